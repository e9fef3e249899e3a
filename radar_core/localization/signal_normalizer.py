"""
Signal-Strength Normalizer.

Smooths raw per-emitter signal strength with an exponential moving average
and rejects unreadable samples before they reach the distance model.

    smoothed = prev * alpha + raw * (1 - alpha)

BLE advertisements arrive often, so a heavier alpha (0.8) is affordable.
Wi-Fi scans are throttled by the platform and use a lighter alpha (0.6).
"""

import logging
from typing import Dict, Optional
from dataclasses import dataclass

from radar_core.proto.scan_report import Medium, is_readable_strength
from radar_core.proto.reading import SignalSample
from radar_core.metrics import get_metrics

logger = logging.getLogger(__name__)


@dataclass
class SignalNormalizerConfig:
    """
    Configuration for signal smoothing.

    Attributes:
        ble_alpha: Weight of the previous smoothed value for BLE
        wifi_alpha: Weight of the previous smoothed value for Wi-Fi
    """

    ble_alpha: float = 0.8
    wifi_alpha: float = 0.6

    def __post_init__(self):
        """Validate configuration."""
        assert 0 <= self.ble_alpha < 1, "ble_alpha must be in [0, 1)"
        assert 0 <= self.wifi_alpha < 1, "wifi_alpha must be in [0, 1)"

    def alpha_for(self, medium: Medium) -> float:
        """Smoothing weight for a medium."""
        if Medium(medium) == Medium.WIFI:
            return self.wifi_alpha
        return self.ble_alpha


class SignalNormalizer:
    """
    Per-emitter exponential smoothing of raw signal strength.

    Usage:
        normalizer = SignalNormalizer()

        smoothed = normalizer.update("aa:bb", -67.0, Medium.BLE, t_now)
        if smoothed is None:
            # Unreadable sample, previous state kept
            ...
    """

    def __init__(self, config: Optional[SignalNormalizerConfig] = None):
        """
        Initialize normalizer.

        Args:
            config: Smoothing configuration (uses defaults if None)
        """
        self.config = config or SignalNormalizerConfig()
        self.metrics = get_metrics()

        # One live sample per emitter, overwritten on each update
        self._samples: Dict[str, SignalSample] = {}

    def update(
        self,
        emitter_id: str,
        raw_strength: Optional[float],
        medium: Medium,
        observed_at: float
    ) -> Optional[float]:
        """
        Fold a raw sample into the emitter's smoothed strength.

        Args:
            emitter_id: Emitter identifier
            raw_strength: Raw signal strength (dBm)
            medium: Radio medium of the sample
            observed_at: Time of observation (seconds)

        Returns:
            New smoothed strength, or None if the sample was unreadable

        Side Effects:
            - Overwrites the emitter's SignalSample on success
        """
        self.metrics.increment('signal_samples_in')

        if not is_readable_strength(raw_strength):
            self.metrics.increment_drop('unreadable_signal')
            logger.debug(f"{emitter_id}: unreadable strength {raw_strength!r}, keeping previous")
            return None

        raw = float(raw_strength)
        previous = self._samples.get(emitter_id)

        if previous is None:
            smoothed = raw
        else:
            alpha = self.config.alpha_for(medium)
            smoothed = previous.smoothed_strength * alpha + raw * (1 - alpha)

        self._samples[emitter_id] = SignalSample(
            raw_strength=raw,
            smoothed_strength=smoothed,
            observed_at=observed_at,
        )
        return smoothed

    def get_sample(self, emitter_id: str) -> Optional[SignalSample]:
        """Get the current signal sample for an emitter."""
        return self._samples.get(emitter_id)

    def get_smoothed(self, emitter_id: str) -> Optional[float]:
        """Get the current smoothed strength for an emitter."""
        sample = self._samples.get(emitter_id)
        return sample.smoothed_strength if sample else None

    def forget(self, emitter_id: str):
        """Drop state for one emitter."""
        self._samples.pop(emitter_id, None)

    def reset(self):
        """Drop state for all emitters."""
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)
