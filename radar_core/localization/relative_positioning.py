"""
Relative Positioning Engine.

Integrates the signal normalizer, path-loss model, reading accumulator,
multilateration solver and bearing projector behind the in-process
interface the scan, position and heading sources and the presentation
layer talk to.

Usage:
    engine = create_default_engine()

    # Scan Source tick
    distance = engine.normalize_and_estimate_distance("aa:bb", -67, Medium.BLE)
    engine.record_reading("aa:bb", lat, lon, distance, t_now)

    # Heading Source tick
    engine.update_heading(raw_heading)

    # Presentation refresh
    result = engine.project_bearing("aa:bb", lat, lon, engine.heading_deg, t_now)
    if result is not None:
        print(f"{result.world_angle_deg:.0f} deg, {result.distance_m:.1f} m")

Writes are serialized with one engine-wide lock; solves run on immutable
history snapshots and never mutate engine state.
"""

import time
import logging
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass

from radar_core.proto.scan_report import Medium, ScanReport
from radar_core.proto.reading import DistanceEstimate
from radar_core.proto.position_estimate import PositionEstimate, BearingResult
from radar_core.localization.signal_normalizer import SignalNormalizer, SignalNormalizerConfig
from radar_core.localization.path_loss_model import (
    PathLossConfig,
    DistanceJumpFilter,
    estimate_distance,
)
from radar_core.localization.reading_accumulator import ReadingAccumulator, ReadingAccumulatorConfig
from radar_core.localization.multilateration_solver import MultilaterationSolver, MultilaterationConfig
from radar_core.localization.bearing_projector import BearingProjector, BearingProjectorConfig
from radar_core.localization.heading_smoother import HeadingSmoother, HeadingSmootherConfig
from radar_core.localization.emitter_registry import Emitter, EmitterRegistry
from radar_core.metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass
class RelativePositioningConfig:
    """
    Configuration for the relative positioning engine.

    Attributes:
        normalizer_config: SignalNormalizer configuration
        path_loss_config: Distance model and jump filter configuration
        accumulator_config: ReadingAccumulator configuration
        solver_config: MultilaterationSolver configuration
        projector_config: BearingProjector configuration (owns the staleness window)
        heading_config: HeadingSmoother configuration
    """

    normalizer_config: Optional[SignalNormalizerConfig] = None
    path_loss_config: Optional[PathLossConfig] = None
    accumulator_config: Optional[ReadingAccumulatorConfig] = None
    solver_config: Optional[MultilaterationConfig] = None
    projector_config: Optional[BearingProjectorConfig] = None
    heading_config: Optional[HeadingSmootherConfig] = None


class RelativePositioningEngine:
    """
    Signal-to-position estimation engine for nearby emitters.

    Pipeline:
    1. Normalize raw strength (smoothing, unreadable rejection)
    2. Path-loss distance + jump filter
    3. Motion-gated reading accumulation
    4. On demand: multilateration + bearing projection
    """

    def __init__(self, config: Optional[RelativePositioningConfig] = None):
        """
        Initialize engine.

        Args:
            config: Engine configuration (uses defaults if None)
        """
        self.config = config or RelativePositioningConfig()
        self.metrics = get_metrics()

        self.path_loss_config = self.config.path_loss_config or PathLossConfig()
        self.normalizer = SignalNormalizer(self.config.normalizer_config or SignalNormalizerConfig())
        self.jump_filter = DistanceJumpFilter(self.path_loss_config)
        self.accumulator = ReadingAccumulator(self.config.accumulator_config or ReadingAccumulatorConfig())
        self.solver = MultilaterationSolver(self.config.solver_config or MultilaterationConfig())
        self.projector = BearingProjector(self.config.projector_config or BearingProjectorConfig())
        self.heading = HeadingSmoother(self.config.heading_config or HeadingSmootherConfig())
        self.registry = EmitterRegistry(self.projector.config.stale_after_s)

        self._latest_distance: Dict[str, DistanceEstimate] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Scan / Position / Heading sources
    # ------------------------------------------------------------------

    def normalize_and_estimate_distance(
        self,
        emitter_id: str,
        raw_strength: Optional[float],
        medium: Medium,
        frequency_mhz: Optional[float] = None,
        observed_at: Optional[float] = None,
        display_name: Optional[str] = None
    ) -> Optional[float]:
        """
        Smooth a raw strength sample and convert it into a distance.

        Args:
            emitter_id: Emitter identifier
            raw_strength: Raw signal strength (dBm)
            medium: Radio medium of the sample
            frequency_mhz: Wi-Fi channel frequency, if known
            observed_at: Observation time (defaults to now)
            display_name: Advertised emitter name, if any

        Returns:
            Distance in meters, or None when the sample carries no
            positional information this tick
        """
        if observed_at is None:
            observed_at = time.time()

        with self._lock:
            smoothed = self.normalizer.update(emitter_id, raw_strength, medium, observed_at)
            if smoothed is None:
                return None

            self.registry.observe(emitter_id, medium, display_name, observed_at)

            raw_distance = estimate_distance(smoothed, medium, frequency_mhz, self.path_loss_config)
            distance = self.jump_filter.apply(emitter_id, raw_distance)
            if distance is None:
                return None

            self._latest_distance[emitter_id] = DistanceEstimate(
                distance_m=distance,
                confidence=1.0,
                observed_at=observed_at,
            )
            self.metrics.increment('distance_estimates')
            return distance

    def record_reading(
        self,
        emitter_id: str,
        observer_lat: float,
        observer_lon: float,
        distance_m: Optional[float],
        now: float
    ) -> bool:
        """
        Offer an (observer position, distance) sample to the accumulator.

        Returns:
            True if the reading was stored
        """
        with self._lock:
            return self.accumulator.add_reading(
                emitter_id, observer_lat, observer_lon, distance_m, now
            )

    def ingest_scan(
        self,
        report: ScanReport,
        observer_lat: Optional[float] = None,
        observer_lon: Optional[float] = None
    ) -> Optional[float]:
        """
        Process one scan report end to end.

        Normalizes the sample and, when the observer position is known,
        records the resulting reading.

        Returns:
            Distance in meters, or None
        """
        distance = self.normalize_and_estimate_distance(
            report.emitter_id,
            report.raw_strength,
            report.medium,
            frequency_mhz=report.frequency_mhz,
            observed_at=report.observed_at,
            display_name=report.display_name,
        )

        if observer_lat is not None and observer_lon is not None:
            self.record_reading(
                report.emitter_id, observer_lat, observer_lon, distance, report.observed_at
            )

        return distance

    def update_heading(self, raw_heading_deg: Optional[float]) -> Optional[float]:
        """Fold a Heading Source sample into the smoothed heading."""
        with self._lock:
            return self.heading.update(raw_heading_deg)

    @property
    def heading_deg(self) -> float:
        """Smoothed observer heading, 0 before the first sample."""
        heading = self.heading.heading_deg
        return heading if heading is not None else 0.0

    # ------------------------------------------------------------------
    # Presentation queries
    # ------------------------------------------------------------------

    def estimate_position(self, emitter_id: str) -> Optional[PositionEstimate]:
        """
        Multilaterate an emitter from its current reading history.

        Returns:
            PositionEstimate in the session's local frame, or None
        """
        with self._lock:
            history = self.accumulator.get_history(emitter_id)
            frame = self.accumulator.frame

        return self.solver.solve(history, frame)

    def project_bearing(
        self,
        emitter_id: str,
        observer_lat: float,
        observer_lon: float,
        observer_heading_deg: Optional[float],
        now: float
    ) -> Optional[BearingResult]:
        """
        Observer-relative bearing, distance and confidence for an emitter.

        Args:
            emitter_id: Emitter identifier
            observer_lat: Observer latitude (degrees)
            observer_lon: Observer longitude (degrees)
            observer_heading_deg: Observer heading, None uses the smoothed heading
            now: Current time (s)

        Returns:
            BearingResult, or None when the emitter is unknown or stale
        """
        with self._lock:
            emitter = self.registry.get(emitter_id)
            history = self.accumulator.get_history(emitter_id)
            frame = self.accumulator.frame
            latest = self._latest_distance.get(emitter_id)

        if emitter is None:
            self.metrics.increment_drop('unknown_emitter')
            return None

        if observer_heading_deg is None:
            observer_heading_deg = self.heading_deg

        estimate = self.solver.solve(history, frame) if len(history) >= 2 else None
        observer = frame.to_local(observer_lat, observer_lon) if frame is not None else None

        return self.projector.project(
            emitter_id=emitter_id,
            estimate=estimate,
            observer=observer,
            heading_deg=observer_heading_deg,
            last_seen=emitter.last_seen,
            now=now,
            fallback_distance_m=latest.distance_m if latest else None,
        )

    def project_all(
        self,
        observer_lat: float,
        observer_lon: float,
        now: float,
        observer_heading_deg: Optional[float] = None
    ) -> List[BearingResult]:
        """
        Project every active emitter, nearest first.
        """
        with self._lock:
            emitter_ids = [e.emitter_id for e in self.registry.active(now)]

        results = []
        for emitter_id in emitter_ids:
            result = self.project_bearing(
                emitter_id, observer_lat, observer_lon, observer_heading_deg, now
            )
            if result is not None:
                results.append(result)

        results.sort(key=lambda r: r.distance_m)
        return results

    def get_emitter(self, emitter_id: str) -> Optional[Emitter]:
        with self._lock:
            return self.registry.get(emitter_id)

    def active_emitters(self, now: float) -> List[Emitter]:
        with self._lock:
            return self.registry.active(now)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def evict_stale(self, now: float) -> List[str]:
        """
        Drop all state of emitters unseen beyond the staleness window.

        Returns:
            IDs of evicted emitters
        """
        with self._lock:
            evicted = self.registry.evict_stale(now)
            for emitter_id in evicted:
                self.normalizer.forget(emitter_id)
                self.jump_filter.forget(emitter_id)
                self.accumulator.forget(emitter_id)
                self._latest_distance.pop(emitter_id, None)
            return evicted

    def reset_session(self):
        """
        Start a new scanning session.

        Clears the session origin and all reading histories. Smoothed
        signal state, distances and the emitter registry are kept.
        """
        with self._lock:
            self.accumulator.reset_session()
            self.metrics.increment('session_resets')

    def get_statistics(self) -> dict:
        """Get engine statistics."""
        with self._lock:
            frame = self.accumulator.frame
            return {
                'emitters_tracked': len(self.registry),
                'emitters_with_history': len(self.accumulator.emitter_ids),
                'origin': (frame.origin_lat, frame.origin_lon) if frame else None,
                'distance_estimates': self.metrics.get_counter('distance_estimates'),
                'readings_appended': self.metrics.get_counter('readings_appended'),
                'multilateration_success': self.metrics.get_counter('multilateration_success'),
                'session_resets': self.metrics.get_counter('session_resets'),
            }


def create_default_engine() -> RelativePositioningEngine:
    """
    Create engine with default configuration for handheld scanning.

    Returns:
        Configured RelativePositioningEngine
    """
    config = RelativePositioningConfig(
        normalizer_config=SignalNormalizerConfig(ble_alpha=0.8, wifi_alpha=0.6),
        path_loss_config=PathLossConfig(),
        accumulator_config=ReadingAccumulatorConfig(min_movement_m=0.3, max_history=50),
        solver_config=MultilaterationConfig(),
        projector_config=BearingProjectorConfig(stale_after_s=15.0),
        heading_config=HeadingSmootherConfig(),
    )

    return RelativePositioningEngine(config)
