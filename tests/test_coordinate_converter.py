"""
Unit tests for the local planar projection.

Tests cover:
- latlon_to_local axis conventions and scale factors
- LocalFrame forward / inverse conversion
- planar_distance_m used for movement gating
"""

import math

import pytest

from radar_core.proto import LocalPoint
from radar_core.localization import (
    LocalFrame,
    latlon_to_local,
    planar_distance_m,
    METERS_PER_DEG_LAT,
    METERS_PER_DEG_LON_AT_EQUATOR,
)


class TestLatLonToLocal:
    """Tests for latlon_to_local."""

    def test_origin_maps_to_zero(self, origin_latlon):
        """The origin itself is (0, 0)."""
        lat, lon = origin_latlon
        point = latlon_to_local(lat, lon, lat, lon)

        assert point.x == pytest.approx(0.0)
        assert point.y == pytest.approx(0.0)

    def test_north_is_positive_y(self, origin_latlon):
        """Moving north increases y only."""
        lat, lon = origin_latlon
        point = latlon_to_local(lat + 0.001, lon, lat, lon)

        assert point.x == pytest.approx(0.0)
        assert point.y == pytest.approx(0.001 * METERS_PER_DEG_LAT)

    def test_east_is_positive_x_scaled_by_latitude(self, origin_latlon):
        """Moving east increases x, scaled by cos(origin latitude)."""
        lat, lon = origin_latlon
        point = latlon_to_local(lat, lon + 0.001, lat, lon)

        expected = 0.001 * METERS_PER_DEG_LON_AT_EQUATOR * math.cos(math.radians(lat))
        assert point.x == pytest.approx(expected)
        assert point.y == pytest.approx(0.0)

    def test_equator_scale(self):
        """At the equator one degree of longitude is 111320 m."""
        point = latlon_to_local(0.0, 1.0, 0.0, 0.0)
        assert point.x == pytest.approx(111320.0)

    def test_southwest_is_negative(self, origin_latlon):
        lat, lon = origin_latlon
        point = latlon_to_local(lat - 0.0001, lon - 0.0001, lat, lon)

        assert point.x < 0
        assert point.y < 0


class TestLocalFrame:
    """Tests for LocalFrame."""

    def test_to_geodetic_inverts_to_local(self, local_frame):
        """Local -> geodetic -> local returns the same point."""
        original = LocalPoint(12.5, -7.25)

        lat, lon = local_frame.to_geodetic(original)
        restored = local_frame.to_local(lat, lon)

        assert restored.x == pytest.approx(original.x, abs=1e-6)
        assert restored.y == pytest.approx(original.y, abs=1e-6)

    def test_frame_is_immutable(self, local_frame):
        with pytest.raises(AttributeError):
            local_frame.origin_lat = 0.0

    def test_pole_does_not_divide_by_zero(self):
        frame = LocalFrame(90.0, 0.0)
        lat, lon = frame.to_geodetic(LocalPoint(5.0, 0.0))

        assert lat == pytest.approx(90.0)
        assert lon == 0.0


class TestPlanarDistance:
    """Tests for planar_distance_m."""

    def test_zero_for_same_point(self, origin_latlon):
        lat, lon = origin_latlon
        assert planar_distance_m(lat, lon, lat, lon) == 0.0

    def test_matches_local_frame_distance(self, local_frame):
        """Distance agrees with the local frame at the tens-of-meters scale."""
        a = LocalPoint(0.0, 0.0)
        b = LocalPoint(3.0, 4.0)
        lat1, lon1 = local_frame.to_geodetic(a)
        lat2, lon2 = local_frame.to_geodetic(b)

        assert planar_distance_m(lat1, lon1, lat2, lon2) == pytest.approx(5.0, rel=1e-3)

    def test_symmetric_at_small_scale(self, local_frame):
        lat1, lon1 = local_frame.to_geodetic(LocalPoint(-10.0, 2.0))
        lat2, lon2 = local_frame.to_geodetic(LocalPoint(15.0, -8.0))

        forward = planar_distance_m(lat1, lon1, lat2, lon2)
        backward = planar_distance_m(lat2, lon2, lat1, lon1)

        assert forward == pytest.approx(backward, rel=1e-4)
