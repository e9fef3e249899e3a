"""
Reading Accumulator.

Maintains, per emitter, a bounded and motion-gated history of
(observer position, distance, time) readings, and owns the session origin
that anchors the local planar frame.

A reading is only stored once the observer has moved far enough from the
last stored reading: samples taken from (almost) the same spot add no new
geometry for multilateration.
"""

import math
import logging
from collections import deque
from typing import Deque, Dict, Optional, Tuple
from dataclasses import dataclass

from radar_core.proto.reading import Reading
from radar_core.localization.coordinate_converter import LocalFrame, planar_distance_m
from radar_core.metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass
class ReadingAccumulatorConfig:
    """
    Configuration for reading accumulation.

    Attributes:
        min_movement_m: Minimum observer displacement between stored readings (m)
        max_history: Maximum readings kept per emitter (oldest evicted first)
    """

    min_movement_m: float = 0.3
    max_history: int = 50

    def __post_init__(self):
        """Validate configuration."""
        assert self.min_movement_m >= 0, "min_movement must be non-negative"
        assert self.max_history >= 2, "max_history must allow at least 2 readings"


class ReadingAccumulator:
    """
    Per-emitter reading histories plus the session origin.

    Usage:
        accumulator = ReadingAccumulator(config)

        if accumulator.add_reading("aa:bb", lat, lon, distance_m, t_now):
            history = accumulator.get_history("aa:bb")

        frame = accumulator.frame  # None until the first reading

    Notes:
        - Readings are immutable; history membership is the only mutable state
        - get_history() returns a tuple snapshot safe to hand to the solver
    """

    def __init__(self, config: Optional[ReadingAccumulatorConfig] = None):
        """
        Initialize accumulator.

        Args:
            config: Accumulation configuration (uses defaults if None)
        """
        self.config = config or ReadingAccumulatorConfig()
        self.metrics = get_metrics()

        self._histories: Dict[str, Deque[Reading]] = {}
        self._frame: Optional[LocalFrame] = None

    @property
    def frame(self) -> Optional[LocalFrame]:
        """Local frame anchored at the session origin, if set."""
        return self._frame

    def add_reading(
        self,
        emitter_id: str,
        observer_lat: float,
        observer_lon: float,
        distance_m: Optional[float],
        timestamp: float
    ) -> bool:
        """
        Offer a new (observer position, distance) sample for an emitter.

        Args:
            emitter_id: Emitter identifier
            observer_lat: Observer latitude (degrees)
            observer_lon: Observer longitude (degrees)
            distance_m: Estimated distance (m); None, non-finite or negative
                values carry no estimate this tick and are discarded
            timestamp: Time of the sample (seconds)

        Returns:
            True if the reading was appended, False if discarded

        Side Effects:
            - Sets the session origin on the first reading of the session
            - Evicts the oldest reading when the history exceeds its cap
        """
        if distance_m is None or not math.isfinite(distance_m) or distance_m < 0:
            self.metrics.increment_drop('no_distance')
            logger.debug(f"{emitter_id}: unusable distance {distance_m!r}, reading discarded")
            return False

        if self._frame is None:
            self._frame = LocalFrame(observer_lat, observer_lon)
            logger.info(f"Session origin set: lat={observer_lat:.6f}, lon={observer_lon:.6f}")

        history = self._histories.get(emitter_id)
        if history is None:
            history = deque(maxlen=self.config.max_history)
            self._histories[emitter_id] = history

        if history:
            last = history[-1]
            moved = planar_distance_m(last.observer_lat, last.observer_lon, observer_lat, observer_lon)
            if moved < self.config.min_movement_m:
                self.metrics.increment_drop('insufficient_motion')
                return False

        history.append(Reading(
            observer_lat=observer_lat,
            observer_lon=observer_lon,
            distance_m=distance_m,
            timestamp=timestamp,
        ))
        self.metrics.increment('readings_appended')
        logger.debug(f"{emitter_id}: reading #{len(history)} at d={distance_m:.2f} m")
        return True

    def get_history(self, emitter_id: str) -> Tuple[Reading, ...]:
        """
        Get a snapshot of an emitter's reading history (oldest first).

        Returns:
            Tuple of readings, empty if none stored
        """
        history = self._histories.get(emitter_id)
        return tuple(history) if history else ()

    def history_length(self, emitter_id: str) -> int:
        history = self._histories.get(emitter_id)
        return len(history) if history else 0

    @property
    def emitter_ids(self) -> list:
        """Emitters with at least one stored reading."""
        return [eid for eid, history in self._histories.items() if history]

    def forget(self, emitter_id: str):
        """Drop one emitter's history."""
        self._histories.pop(emitter_id, None)

    def reset_session(self):
        """Clear all histories and the session origin."""
        self._histories.clear()
        self._frame = None
        logger.info("Reading histories and session origin cleared")
