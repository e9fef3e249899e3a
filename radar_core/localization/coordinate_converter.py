"""
Local Planar Projection.

Converts geodetic observer positions (lat, lon) into a flat local frame
anchored at the session origin, using an equirectangular approximation:

    y = (lat - lat0) * 110540
    x = (lon - lon0) * 111320 * cos(lat0)

x points east and y points north, both in meters. Over the tens-of-meters
scale covered by a scanning session the error stays well below 1%.
"""

import math
from typing import Tuple
from dataclasses import dataclass

from radar_core.proto.position_estimate import LocalPoint

# Meters per degree of latitude
METERS_PER_DEG_LAT = 110540.0

# Meters per degree of longitude at the equator
METERS_PER_DEG_LON_AT_EQUATOR = 111320.0


def latlon_to_local(
    lat: float,
    lon: float,
    origin_lat: float,
    origin_lon: float
) -> LocalPoint:
    """
    Convert (lat, lon) to local meters relative to an origin.

    Args:
        lat: Latitude (degrees)
        lon: Longitude (degrees)
        origin_lat: Origin latitude (degrees)
        origin_lon: Origin longitude (degrees)

    Returns:
        LocalPoint with x = east, y = north (m)
    """
    y = (lat - origin_lat) * METERS_PER_DEG_LAT
    x = (lon - origin_lon) * METERS_PER_DEG_LON_AT_EQUATOR * math.cos(math.radians(origin_lat))
    return LocalPoint(x=x, y=y)


def planar_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Approximate great-circle distance between two nearby positions (m).

    Uses the same equirectangular projection as the local frame, anchored at
    the first position, so movement gating and multilateration agree on scale.
    """
    offset = latlon_to_local(lat2, lon2, lat1, lon1)
    return math.hypot(offset.x, offset.y)


@dataclass(frozen=True)
class LocalFrame:
    """
    Local planar frame anchored at a session origin.

    Attributes:
        origin_lat: Origin latitude (degrees)
        origin_lon: Origin longitude (degrees)
    """

    origin_lat: float
    origin_lon: float

    def to_local(self, lat: float, lon: float) -> LocalPoint:
        """Project a geodetic position into this frame."""
        return latlon_to_local(lat, lon, self.origin_lat, self.origin_lon)

    def to_geodetic(self, point: LocalPoint) -> Tuple[float, float]:
        """
        Convert a local point back to (lat, lon).

        Args:
            point: Point in this frame

        Returns:
            (lat, lon) tuple in degrees
        """
        lat = self.origin_lat + point.y / METERS_PER_DEG_LAT
        lon_scale = METERS_PER_DEG_LON_AT_EQUATOR * math.cos(math.radians(self.origin_lat))
        if abs(lon_scale) < 1e-9:
            # At the poles every longitude collapses onto the origin
            return (lat, self.origin_lon)
        lon = self.origin_lon + point.x / lon_scale
        return (lat, lon)
