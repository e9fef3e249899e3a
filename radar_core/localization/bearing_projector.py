"""
Relative Bearing Projector.

Turns an emitter's position estimate (or, without one, a stable id-derived
pseudo-bearing) into an observer-relative bearing, a heading-corrected
screen angle, a distance and a time-decayed confidence.

Angles are compass bearings: 0 deg = north, clockwise positive.
"""

import math
from typing import Optional
from dataclasses import dataclass

from radar_core.proto.position_estimate import LocalPoint, PositionEstimate, BearingResult
from radar_core.metrics import get_metrics


def normalize_bearing(angle_deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = angle_deg % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def normalize_angle_delta(delta_deg: float) -> float:
    """Wrap an angle difference into (-180, 180]."""
    wrapped = normalize_bearing(delta_deg)
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def string_hash(text: str) -> int:
    """
    Stable 32-bit string hash (h = h * 31 + unit over UTF-16 code units).

    Matches the classic Java/JavaScript string hash, reduced to its absolute
    value so ids hash identically on every platform that displays them.
    """
    h = 0
    encoded = text.encode('utf-16-le')
    for i in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[i:i + 2], 'little')
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def stable_pseudo_bearing(emitter_id: str) -> float:
    """
    Arbitrary but stable bearing (deg) for an emitter without a fix.

    Keeps an untriangulated emitter at the same place across re-renders.
    """
    if not emitter_id:
        return 0.0
    return float(string_hash(str(emitter_id)) % 360)


def bearing_between(observer: LocalPoint, target: LocalPoint) -> float:
    """Compass bearing (deg) from observer to target in the local frame."""
    dx = target.x - observer.x
    dy = target.y - observer.y
    return normalize_bearing(math.degrees(math.atan2(dx, dy)))


@dataclass
class BearingProjectorConfig:
    """
    Configuration for bearing projection.

    Attributes:
        stale_after_s: Age beyond which an emitter is excluded (s)
        max_confidence: Confidence of a just-seen emitter
        min_confidence: Confidence floor reached at stale_after_s
    """

    stale_after_s: float = 15.0
    max_confidence: float = 1.0
    min_confidence: float = 0.2

    def __post_init__(self):
        """Validate configuration."""
        assert self.stale_after_s > 0, "stale_after must be positive"
        assert 0 <= self.min_confidence <= self.max_confidence <= 1, \
            "confidence bounds must satisfy 0 <= min <= max <= 1"


class BearingProjector:
    """
    Project emitters into observer-relative bearings.

    Usage:
        projector = BearingProjector(config)

        result = projector.project(
            emitter_id="aa:bb",
            estimate=solver.solve(history, frame),
            observer=frame.to_local(lat, lon),
            heading_deg=heading,
            last_seen=emitter.last_seen,
            now=t_now,
            fallback_distance_m=latest_distance,
        )
        if result is None:
            # Stale emitter, or nothing to show
            ...
    """

    def __init__(self, config: Optional[BearingProjectorConfig] = None):
        """
        Initialize projector.

        Args:
            config: Projection configuration (uses defaults if None)
        """
        self.config = config or BearingProjectorConfig()
        self.metrics = get_metrics()

    def confidence(self, last_seen: float, now: float) -> Optional[float]:
        """
        Time-decayed confidence for an emitter.

        Decays linearly from max_confidence at age 0 to min_confidence at
        stale_after_s.

        Returns:
            Confidence in [min, max], or None once the emitter is stale
        """
        age = max(0.0, now - last_seen)
        if age > self.config.stale_after_s:
            return None

        span = self.config.max_confidence - self.config.min_confidence
        decayed = self.config.max_confidence - span * (age / self.config.stale_after_s)
        return max(self.config.min_confidence, decayed)

    def project(
        self,
        emitter_id: str,
        estimate: Optional[PositionEstimate],
        observer: Optional[LocalPoint],
        heading_deg: float,
        last_seen: float,
        now: float,
        fallback_distance_m: Optional[float] = None
    ) -> Optional[BearingResult]:
        """
        Project one emitter.

        Args:
            emitter_id: Emitter identifier
            estimate: Multilateration result, None if no estimate
            observer: Observer position in the same local frame
            heading_deg: Observer compass heading (deg)
            last_seen: Time the emitter was last observed (s)
            now: Current time (s)
            fallback_distance_m: Signal-derived distance for the pseudo-bearing path

        Returns:
            BearingResult, or None if the emitter is stale or has no distance
        """
        confidence = self.confidence(last_seen, now)
        if confidence is None:
            self.metrics.increment_drop('stale_emitter')
            return None

        if estimate is not None and observer is not None:
            target = estimate.point
            world_angle = bearing_between(observer, target)
            distance = observer.distance_to(target)
            triangulated = True
        else:
            if fallback_distance_m is None:
                self.metrics.increment_drop('no_distance')
                return None
            world_angle = stable_pseudo_bearing(emitter_id)
            distance = fallback_distance_m
            triangulated = False

        self.metrics.increment('bearings_projected')
        self.metrics.record_histogram('bearing_confidence', confidence)

        return BearingResult(
            emitter_id=emitter_id,
            world_angle_deg=world_angle,
            screen_angle_deg=normalize_bearing(world_angle - heading_deg),
            distance_m=distance,
            is_triangulated=triangulated,
            confidence=confidence,
        )
