"""
Compass heading smoothing.

Exponential smoothing of the observer's heading with explicit wrap-around
handling: the raw-minus-previous delta is wrapped into (-180, 180] before
blending, so a heading moving from 359 deg to 1 deg turns by 2 deg instead
of sweeping back through 180.
"""

import math
import logging
from typing import Optional
from dataclasses import dataclass

from radar_core.localization.bearing_projector import normalize_angle_delta, normalize_bearing

logger = logging.getLogger(__name__)


@dataclass
class HeadingSmootherConfig:
    """
    Attributes:
        beta: Weight of the new sample's delta (1.0 = no smoothing)
    """

    beta: float = 0.25

    def __post_init__(self):
        """Validate configuration."""
        assert 0 < self.beta <= 1, "beta must be in (0, 1]"


class HeadingSmoother:
    """
    Smooth a stream of compass headings.

    Usage:
        smoother = HeadingSmoother()
        heading = smoother.update(raw_heading_deg)
    """

    def __init__(self, config: Optional[HeadingSmootherConfig] = None):
        """Initialize smoother (uses default config if None)."""
        self.config = config or HeadingSmootherConfig()
        self._heading: Optional[float] = None

    @property
    def heading_deg(self) -> Optional[float]:
        """Current smoothed heading in [0, 360), None before the first sample."""
        return self._heading

    def update(self, raw_heading_deg: Optional[float]) -> Optional[float]:
        """
        Blend a raw heading sample into the smoothed heading.

        Args:
            raw_heading_deg: Raw compass heading (deg), any range

        Returns:
            Smoothed heading in [0, 360)
        """
        if raw_heading_deg is None or not math.isfinite(raw_heading_deg):
            logger.debug(f"Ignoring non-finite heading {raw_heading_deg!r}")
            return self._heading

        raw = normalize_bearing(raw_heading_deg)
        if self._heading is None:
            self._heading = raw
            return self._heading

        delta = normalize_angle_delta(raw - self._heading)
        self._heading = normalize_bearing(self._heading + self.config.beta * delta)
        return self._heading

    def reset(self):
        """Forget the smoothed heading; the next sample passes through."""
        self._heading = None
