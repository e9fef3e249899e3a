"""
Protocol Module: Message and value schemas.

- ScanReport / Medium: samples delivered by the Scan Source
- SignalSample, DistanceEstimate, Reading: per-emitter signal and history values
- LocalPoint, PositionEstimate, BearingResult: solver and projector outputs
"""

from .scan_report import (
    Medium,
    ScanReport,
    UNREADABLE_STRENGTH,
    is_readable_strength,
)
from .reading import (
    SignalSample,
    DistanceEstimate,
    Reading,
)
from .position_estimate import (
    LocalPoint,
    PositionEstimate,
    BearingResult,
)

__all__ = [
    'Medium',
    'ScanReport',
    'UNREADABLE_STRENGTH',
    'is_readable_strength',
    'SignalSample',
    'DistanceEstimate',
    'Reading',
    'LocalPoint',
    'PositionEstimate',
    'BearingResult',
]
