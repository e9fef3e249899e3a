"""
Scan Report Message Schema.

Defines the sample delivered by a Scan Source (BLE peripheral discovery or
Wi-Fi access-point scan) for one emitter at one instant.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import math


class Medium(str, Enum):
    """Radio medium an emitter was observed on."""

    BLE = "ble"
    WIFI = "wifi"


# Raw strength value reported by scanners when no reading is available
UNREADABLE_STRENGTH = 0.0


def is_readable_strength(strength: Optional[float]) -> bool:
    """
    Check whether a signal strength carries information.

    None, NaN and the scanner sentinel 0 are all unreadable.
    """
    if strength is None:
        return False
    try:
        value = float(strength)
    except (TypeError, ValueError):
        return False
    return not math.isnan(value) and value != UNREADABLE_STRENGTH


@dataclass
class ScanReport:
    """
    One signal-strength observation of one emitter.

    Attributes:
        emitter_id: Opaque stable identifier (BLE peripheral id or "wifi:<BSSID>")
        raw_strength: Received signal strength (dBm), may be unreadable
        observed_at: Time of observation (seconds)
        medium: Radio medium
        display_name: Human-readable name advertised by the emitter
        frequency_mhz: Channel frequency for Wi-Fi, if known
    """

    emitter_id: str
    raw_strength: Optional[float]
    observed_at: float
    medium: Medium = Medium.BLE
    display_name: Optional[str] = None
    frequency_mhz: Optional[float] = None

    def __post_init__(self):
        """Validate scan report after initialization."""
        if not self.emitter_id:
            raise ValueError("Emitter id cannot be empty")

        self.medium = Medium(self.medium)

    @property
    def is_readable(self) -> bool:
        """Check if the raw strength carries information."""
        return is_readable_strength(self.raw_strength)

    @property
    def is_5ghz(self) -> bool:
        """Check if the report comes from a 5 GHz Wi-Fi channel."""
        return self.frequency_mhz is not None and self.frequency_mhz >= 5000
