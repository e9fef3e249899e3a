"""
Emitter registry.

Tracks identity and last-seen time of every observed emitter. Emitters are
created on their first accepted observation and evicted once unseen beyond
the staleness window.
"""

import logging
from typing import Dict, List, Optional
from dataclasses import dataclass

from radar_core.proto.scan_report import Medium
from radar_core.metrics import get_metrics

logger = logging.getLogger(__name__)

DEFAULT_NAMES = {
    Medium.BLE: "Unknown",
    Medium.WIFI: "Wi-Fi network",
}


@dataclass
class Emitter:
    """
    A BLE peripheral or Wi-Fi access point seen by the observer.

    Attributes:
        emitter_id: Opaque stable identifier
        display_name: Human-readable name
        medium: Radio medium
        first_seen: Time of first accepted observation (s)
        last_seen: Time of latest accepted observation (s)
    """

    emitter_id: str
    display_name: str
    medium: Medium
    first_seen: float
    last_seen: float

    def age(self, now: float) -> float:
        """Seconds since the emitter was last seen."""
        return max(0.0, now - self.last_seen)


class EmitterRegistry:
    """
    Keyed store of emitters with staleness eviction.

    Usage:
        registry = EmitterRegistry(stale_after_s=15.0)
        registry.observe("aa:bb", Medium.BLE, "Watch", t_now)

        for emitter in registry.active(t_now):
            ...
        evicted_ids = registry.evict_stale(t_now)
    """

    def __init__(self, stale_after_s: float = 15.0):
        """Initialize registry with a staleness window (s)."""
        assert stale_after_s > 0, "stale_after must be positive"
        self.stale_after_s = stale_after_s
        self.metrics = get_metrics()
        self._emitters: Dict[str, Emitter] = {}

    def observe(
        self,
        emitter_id: str,
        medium: Medium,
        display_name: Optional[str],
        observed_at: float
    ) -> Emitter:
        """
        Record an accepted observation.

        Args:
            emitter_id: Emitter identifier
            medium: Radio medium
            display_name: Advertised name, None keeps the current one
            observed_at: Time of observation (s)

        Returns:
            The created or updated Emitter
        """
        medium = Medium(medium)
        emitter = self._emitters.get(emitter_id)

        if emitter is None:
            emitter = Emitter(
                emitter_id=emitter_id,
                display_name=display_name or DEFAULT_NAMES[medium],
                medium=medium,
                first_seen=observed_at,
                last_seen=observed_at,
            )
            self._emitters[emitter_id] = emitter
            logger.info(f"New {medium.value} emitter {emitter_id} ({emitter.display_name})")
            return emitter

        emitter.last_seen = max(emitter.last_seen, observed_at)
        if display_name:
            emitter.display_name = display_name
        return emitter

    def get(self, emitter_id: str) -> Optional[Emitter]:
        """Get an emitter by id, None if unknown."""
        return self._emitters.get(emitter_id)

    def is_stale(self, emitter: Emitter, now: float) -> bool:
        """Check if an emitter is unseen beyond the staleness window."""
        return now - emitter.last_seen > self.stale_after_s

    def active(self, now: float) -> List[Emitter]:
        """Emitters seen within the staleness window."""
        return [e for e in self._emitters.values() if not self.is_stale(e, now)]

    def evict_stale(self, now: float) -> List[str]:
        """
        Remove emitters unseen beyond the staleness window.

        Returns:
            IDs of evicted emitters
        """
        stale_ids = [eid for eid, e in self._emitters.items() if self.is_stale(e, now)]
        for emitter_id in stale_ids:
            del self._emitters[emitter_id]

        if stale_ids:
            self.metrics.increment('emitters_evicted', len(stale_ids))
            logger.info(f"Evicted {len(stale_ids)} stale emitter(s): {', '.join(stale_ids)}")

        return stale_ids

    def clear(self):
        """Remove all emitters."""
        self._emitters.clear()

    def __len__(self) -> int:
        return len(self._emitters)

    def __contains__(self, emitter_id: str) -> bool:
        return emitter_id in self._emitters
