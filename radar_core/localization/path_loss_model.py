"""
Path-Loss Distance Model.

Converts a smoothed signal strength into a distance estimate, with one
policy per medium:

- BLE: two-slope log-distance law. A single exponent underestimates
  near-field and overestimates far-field distance, so n = 2.0 is used for
  strong signals (> -70 dBm) and n = 3.5 below that.

      d = 10 ^ ((ref - rssi) / (10 * n))

- Wi-Fi: coarse banding into four base distances, scaled up on 5 GHz
  channels (which read weaker at the same true distance).

A per-emitter jump filter then holds the previous stable distance when a
new value jumps by more than 3x in either direction.
"""

import math
import logging
from typing import Dict, Optional, Tuple
from dataclasses import dataclass

from radar_core.proto.scan_report import Medium, is_readable_strength
from radar_core.metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass
class PathLossConfig:
    """
    Configuration for the path-loss distance model.

    Attributes:
        ble_ref_strength_dbm: Calibrated BLE strength at 1 m (dBm)
        ble_min_strength_dbm: Lower clamp for BLE strength (dBm)
        ble_max_strength_dbm: Upper clamp for BLE strength (dBm)
        ble_near_field_threshold_dbm: Strength above which the near exponent applies
        ble_near_exponent: Path-loss exponent near the emitter
        ble_far_exponent: Path-loss exponent far from the emitter
        min_distance_m: Lower clamp for BLE distance (m)
        max_distance_m: Upper clamp for BLE distance (m)
        wifi_min_strength_dbm: Lower clamp for Wi-Fi strength (dBm)
        wifi_max_strength_dbm: Upper clamp for Wi-Fi strength (dBm)
        wifi_band_thresholds_dbm: Band edges, strongest first (dBm)
        wifi_band_distances_m: Base distance per band, plus one for "weaker" (m)
        wifi_5ghz_scale: Distance multiplier on channels >= 5000 MHz
        jump_ratio: Max accepted ratio between consecutive distances
        max_consecutive_jumps: Rejected jumps after which the next one is
            accepted as real movement (None: never release)
    """

    ble_ref_strength_dbm: float = -59.0
    ble_min_strength_dbm: float = -100.0
    ble_max_strength_dbm: float = -40.0
    ble_near_field_threshold_dbm: float = -70.0
    ble_near_exponent: float = 2.0
    ble_far_exponent: float = 3.5
    min_distance_m: float = 0.1
    max_distance_m: float = 50.0

    wifi_min_strength_dbm: float = -100.0
    wifi_max_strength_dbm: float = -35.0
    wifi_band_thresholds_dbm: Tuple[float, ...] = (-50.0, -60.0, -70.0)
    wifi_band_distances_m: Tuple[float, ...] = (1.0, 3.0, 8.0, 15.0)
    wifi_5ghz_scale: float = 1.3  # No empirical basis, tune in the field

    jump_ratio: float = 3.0
    max_consecutive_jumps: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        assert self.ble_min_strength_dbm < self.ble_max_strength_dbm, \
            "BLE strength clamp must be a non-empty interval"
        assert self.ble_near_exponent > 0 and self.ble_far_exponent > 0, \
            "path-loss exponents must be positive"
        assert 0 < self.min_distance_m < self.max_distance_m, \
            "distance clamp must satisfy 0 < min < max"
        assert self.wifi_min_strength_dbm < self.wifi_max_strength_dbm, \
            "Wi-Fi strength clamp must be a non-empty interval"
        assert len(self.wifi_band_distances_m) == len(self.wifi_band_thresholds_dbm) + 1, \
            "need one Wi-Fi band distance per threshold plus one"
        assert self.wifi_5ghz_scale > 0, "5 GHz scale must be positive"
        assert self.jump_ratio > 1, "jump ratio must be greater than 1"
        assert self.max_consecutive_jumps is None or self.max_consecutive_jumps >= 0, \
            "max_consecutive_jumps must be non-negative"


_DEFAULT_CONFIG = PathLossConfig()


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def calculate_ble_distance(
    strength: Optional[float],
    config: Optional[PathLossConfig] = None
) -> Optional[float]:
    """
    Estimate distance to a BLE emitter from smoothed strength.

    Args:
        strength: Smoothed signal strength (dBm)
        config: Model configuration (uses defaults if None)

    Returns:
        Distance in [min_distance_m, max_distance_m], or None if the
        strength is unreadable
    """
    if not is_readable_strength(strength):
        return None

    cfg = config or _DEFAULT_CONFIG
    clamped = _clamp(float(strength), cfg.ble_min_strength_dbm, cfg.ble_max_strength_dbm)

    if clamped > cfg.ble_near_field_threshold_dbm:
        exponent = cfg.ble_near_exponent
    else:
        exponent = cfg.ble_far_exponent

    distance = 10 ** ((cfg.ble_ref_strength_dbm - clamped) / (10 * exponent))
    return _clamp(distance, cfg.min_distance_m, cfg.max_distance_m)


def calculate_wifi_distance(
    strength: Optional[float],
    frequency_mhz: Optional[float] = None,
    config: Optional[PathLossConfig] = None
) -> Optional[float]:
    """
    Estimate distance to a Wi-Fi access point from smoothed strength.

    Args:
        strength: Smoothed signal strength (dBm)
        frequency_mhz: Channel frequency, if known
        config: Model configuration (uses defaults if None)

    Returns:
        Banded distance in meters, or None if the strength is unreadable
    """
    if not is_readable_strength(strength):
        return None

    cfg = config or _DEFAULT_CONFIG
    clamped = _clamp(float(strength), cfg.wifi_min_strength_dbm, cfg.wifi_max_strength_dbm)

    distance = cfg.wifi_band_distances_m[-1]
    for threshold, band_distance in zip(cfg.wifi_band_thresholds_dbm, cfg.wifi_band_distances_m):
        if clamped > threshold:
            distance = band_distance
            break

    if frequency_mhz is not None and not math.isnan(frequency_mhz) and frequency_mhz >= 5000:
        distance *= cfg.wifi_5ghz_scale

    return distance


def estimate_distance(
    strength: Optional[float],
    medium: Medium,
    frequency_mhz: Optional[float] = None,
    config: Optional[PathLossConfig] = None
) -> Optional[float]:
    """Dispatch to the distance model for a medium."""
    if Medium(medium) == Medium.WIFI:
        return calculate_wifi_distance(strength, frequency_mhz, config)
    return calculate_ble_distance(strength, config)


class DistanceJumpFilter:
    """
    Hold the last stable distance through single-sample spikes.

    A new distance is rejected when it exceeds the previous stable distance
    by more than jump_ratio, or falls below 1/jump_ratio of it. By default a
    jump is always rejected; with max_consecutive_jumps set, the jump after
    that many rejections in a row is accepted.

    Usage:
        jump_filter = DistanceJumpFilter(config)
        stable = jump_filter.apply("aa:bb", raw_distance)
    """

    def __init__(self, config: Optional[PathLossConfig] = None):
        """
        Initialize jump filter.

        Args:
            config: Model configuration (uses defaults if None)
        """
        self.config = config or PathLossConfig()
        self.metrics = get_metrics()

        # Key: emitter_id, Value: (stable_distance_m, consecutive_rejections)
        self._stable: Dict[str, Tuple[float, int]] = {}

    def apply(self, emitter_id: str, distance_m: Optional[float]) -> Optional[float]:
        """
        Filter a freshly computed distance.

        Args:
            emitter_id: Emitter identifier
            distance_m: Newly computed distance (m), or None

        Returns:
            Distance to expose (new or previous stable), or None if neither exists
        """
        previous = self._stable.get(emitter_id)

        if distance_m is None:
            return previous[0] if previous else None

        if previous is None:
            self._stable[emitter_id] = (distance_m, 0)
            return distance_m

        stable, rejections = previous
        ratio = self.config.jump_ratio
        is_jump = distance_m > stable * ratio or distance_m < stable / ratio

        if not is_jump:
            self._stable[emitter_id] = (distance_m, 0)
            return distance_m

        max_jumps = self.config.max_consecutive_jumps
        if max_jumps is not None and rejections >= max_jumps:
            logger.debug(f"{emitter_id}: accepting sustained jump {stable:.2f} -> {distance_m:.2f} m")
            self._stable[emitter_id] = (distance_m, 0)
            return distance_m

        self._stable[emitter_id] = (stable, rejections + 1)
        self.metrics.increment_drop('jump_rejected')
        logger.debug(f"{emitter_id}: rejected jump {stable:.2f} -> {distance_m:.2f} m")
        return stable

    def get_stable_distance(self, emitter_id: str) -> Optional[float]:
        """Get the last stable distance for an emitter."""
        previous = self._stable.get(emitter_id)
        return previous[0] if previous else None

    def forget(self, emitter_id: str):
        """Drop state for one emitter."""
        self._stable.pop(emitter_id, None)

    def reset(self):
        """Drop state for all emitters."""
        self._stable.clear()
