"""
Position and Bearing Output Schemas.

LocalPoint is a position in the session's local planar frame, PositionEstimate
is the multilateration solver output for one emitter, and BearingResult is the
display-ready observer-relative projection consumed by presentation.
"""

from dataclasses import dataclass
from typing import Tuple
import math


@dataclass(frozen=True)
class LocalPoint:
    """
    Point in the origin-anchored planar frame.

    Attributes:
        x: East offset from the session origin (m)
        y: North offset from the session origin (m)
    """

    x: float
    y: float

    def distance_to(self, other: "LocalPoint") -> float:
        """Euclidean distance to another local point (m)."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class PositionEstimate:
    """
    Emitter position estimate from multilateration.

    Attributes:
        x: East offset from the session origin (m)
        y: North offset from the session origin (m)
        residual: Weighted mean summed-squared residual of fused candidates (m²)
        num_readings: Number of readings used for scoring
        num_candidates: Number of circle-intersection candidates generated

    Notes:
        - Never cached; recomputed from the reading history on every request
    """

    x: float
    y: float
    residual: float = 0.0
    num_readings: int = 0
    num_candidates: int = 0

    def __post_init__(self):
        """Validate position estimate."""
        if self.residual < 0:
            raise ValueError(f"Residual cannot be negative: {self.residual}")

    @property
    def point(self) -> LocalPoint:
        """Position as a LocalPoint."""
        return LocalPoint(self.x, self.y)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'x': self.x,
            'y': self.y,
            'residual': self.residual,
            'num_readings': self.num_readings,
            'num_candidates': self.num_candidates,
        }


@dataclass
class BearingResult:
    """
    Observer-relative bearing for one emitter.

    Attributes:
        emitter_id: Emitter the bearing refers to
        world_angle_deg: Compass bearing to the emitter (0 = north, clockwise)
        screen_angle_deg: Bearing relative to the observer's heading
        distance_m: Distance to the emitter (m)
        is_triangulated: True if derived from multilateration, False for the
            id-derived pseudo-bearing fallback
        confidence: Time-decayed trust in the result (0-1)
    """

    emitter_id: str
    world_angle_deg: float
    screen_angle_deg: float
    distance_m: float
    is_triangulated: bool
    confidence: float

    def __post_init__(self):
        """Validate bearing result."""
        if not 0 <= self.confidence <= 1:
            raise ValueError(f"Confidence must be in [0,1]: {self.confidence}")

        if self.distance_m < 0:
            raise ValueError(f"Distance cannot be negative: {self.distance_m}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'emitter_id': self.emitter_id,
            'world_angle_deg': self.world_angle_deg,
            'screen_angle_deg': self.screen_angle_deg,
            'distance_m': self.distance_m,
            'is_triangulated': self.is_triangulated,
            'confidence': self.confidence,
        }
