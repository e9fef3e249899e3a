"""
Signal and Reading Schemas.

SignalSample is the normalizer's per-emitter state, DistanceEstimate is the
path-loss model output for one tick, and Reading is the immutable
(observer position, distance) record kept in a ReadingHistory.
"""

from dataclasses import dataclass


@dataclass
class SignalSample:
    """
    Latest smoothed signal state for one emitter.

    Attributes:
        raw_strength: Last accepted raw strength (dBm)
        smoothed_strength: Exponentially smoothed strength (dBm)
        observed_at: Time of the last accepted sample (seconds)
    """

    raw_strength: float
    smoothed_strength: float
    observed_at: float


@dataclass
class DistanceEstimate:
    """
    Distance derived from a smoothed signal sample.

    Attributes:
        distance_m: Estimated distance to the emitter (m)
        confidence: Trust in the estimate (0-1)
        observed_at: Time of the sample it was derived from (seconds)
    """

    distance_m: float
    confidence: float
    observed_at: float

    def __post_init__(self):
        """Validate distance estimate."""
        if self.distance_m < 0:
            raise ValueError(f"Distance cannot be negative: {self.distance_m}")

        if not 0 <= self.confidence <= 1:
            raise ValueError(f"Confidence must be in [0,1]: {self.confidence}")


@dataclass(frozen=True)
class Reading:
    """
    Observer position and emitter distance at one instant.

    Immutable once created; belongs to exactly one emitter's history.

    Attributes:
        observer_lat: Observer latitude (degrees)
        observer_lon: Observer longitude (degrees)
        distance_m: Estimated emitter distance (m)
        timestamp: Time the reading was taken (seconds)
    """

    observer_lat: float
    observer_lon: float
    distance_m: float
    timestamp: float

    def __post_init__(self):
        if self.distance_m < 0:
            raise ValueError(f"Distance cannot be negative: {self.distance_m}")
