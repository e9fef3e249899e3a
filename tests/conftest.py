"""
Pytest configuration and shared fixtures for radar engine tests.

This module provides reusable fixtures for the local frame, synthetic
reading histories and a ready-to-use engine.
"""

import sys
import math
from pathlib import Path
from typing import List, Tuple

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from radar_core.proto import LocalPoint, Reading
from radar_core.localization import LocalFrame, create_default_engine
from radar_core.metrics import reset_metrics


# =============================================================================
# Local Frame Fixtures
# =============================================================================


@pytest.fixture
def origin_latlon() -> Tuple[float, float]:
    """
    Standard session origin (Oslo area).

    Returns:
        (lat, lon) in degrees.
    """
    return (59.9139, 10.7522)


@pytest.fixture
def local_frame(origin_latlon) -> LocalFrame:
    """LocalFrame anchored at the standard origin."""
    return LocalFrame(*origin_latlon)


# =============================================================================
# Synthetic Reading Fixtures
# =============================================================================


def make_readings(
    frame: LocalFrame,
    observer_points: List[Tuple[float, float]],
    emitter: Tuple[float, float],
    t0: float = 0.0,
) -> List[Reading]:
    """
    Build noise-free readings of an emitter from observer points.

    Args:
        frame: Local frame the points are expressed in.
        observer_points: Observer (x, y) positions in meters.
        emitter: True emitter (x, y) position in meters.
        t0: Timestamp of the first reading.

    Returns:
        List of Reading with exact distances.
    """
    readings = []
    for i, (x, y) in enumerate(observer_points):
        lat, lon = frame.to_geodetic(LocalPoint(x, y))
        distance = math.hypot(emitter[0] - x, emitter[1] - y)
        readings.append(Reading(
            observer_lat=lat,
            observer_lon=lon,
            distance_m=distance,
            timestamp=t0 + i,
        ))
    return readings


@pytest.fixture
def triangle_readings(local_frame) -> List[Reading]:
    """
    Three readings at (0,0), (5,0), (0,5) of an emitter at (3,4).

    Returns:
        List of 3 Reading.
    """
    return make_readings(local_frame, [(0.0, 0.0), (5.0, 0.0), (0.0, 5.0)], (3.0, 4.0))


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def fresh_metrics():
    """Replace the global metrics collector with a fresh one."""
    reset_metrics()
    from radar_core.metrics import get_metrics
    return get_metrics()


@pytest.fixture
def engine(fresh_metrics):
    """Engine with default configuration and fresh metrics."""
    return create_default_engine()
