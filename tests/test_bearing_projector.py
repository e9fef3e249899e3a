"""
Unit tests for bearing projection and heading smoothing.

Tests cover:
- Angle normalization helpers
- Compass bearings in the local frame
- Stable pseudo-bearing for untriangulated emitters
- Confidence decay and staleness
- Heading smoothing across the 0/360 wrap
"""

import pytest

from radar_core.proto import LocalPoint, PositionEstimate
from radar_core.localization import (
    BearingProjector,
    BearingProjectorConfig,
    HeadingSmoother,
    HeadingSmootherConfig,
    normalize_bearing,
    normalize_angle_delta,
    stable_pseudo_bearing,
)
from radar_core.localization.bearing_projector import bearing_between, string_hash


ORIGIN = LocalPoint(0.0, 0.0)


class TestAngleHelpers:
    """Tests for angle wrapping."""

    @pytest.mark.parametrize("angle,expected", [
        (0.0, 0.0),
        (360.0, 0.0),
        (-90.0, 270.0),
        (725.0, 5.0),
        (-1e-15, 0.0),
    ])
    def test_normalize_bearing(self, angle, expected):
        assert normalize_bearing(angle) == pytest.approx(expected)

    @pytest.mark.parametrize("delta,expected", [
        (180.0, 180.0),
        (-180.0, 180.0),
        (190.0, -170.0),
        (-190.0, 170.0),
        (20.0, 20.0),
        (-340.0, 20.0),
    ])
    def test_normalize_angle_delta(self, delta, expected):
        assert normalize_angle_delta(delta) == pytest.approx(expected)


class TestBearingBetween:
    """Tests for compass bearings (0 = north, clockwise)."""

    @pytest.mark.parametrize("target,expected", [
        (LocalPoint(0.0, 10.0), 0.0),
        (LocalPoint(10.0, 0.0), 90.0),
        (LocalPoint(0.0, -10.0), 180.0),
        (LocalPoint(-10.0, 0.0), 270.0),
        (LocalPoint(5.0, 5.0), 45.0),
    ])
    def test_cardinal_directions(self, target, expected):
        assert bearing_between(ORIGIN, target) == pytest.approx(expected)

    def test_relative_to_observer(self):
        observer = LocalPoint(10.0, 10.0)
        assert bearing_between(observer, LocalPoint(10.0, 0.0)) == pytest.approx(180.0)


class TestPseudoBearing:
    """Tests for the id-derived fallback bearing."""

    def test_known_value(self):
        """hash("ab") = 97 * 31 + 98 = 3105, 3105 mod 360 = 225."""
        assert string_hash("ab") == 3105
        assert stable_pseudo_bearing("ab") == 225.0

    def test_stable_across_calls(self):
        emitter_id = "F4:12:FA:9C:33:01"
        assert stable_pseudo_bearing(emitter_id) == stable_pseudo_bearing(emitter_id)

    def test_overflow_wraps_to_32_bits(self):
        """Long ids overflow 32 bits and still land in [0, 360)."""
        emitter_id = "wifi:aa:bb:cc:dd:ee:ff:00:11:22:33"
        value = stable_pseudo_bearing(emitter_id)

        assert string_hash(emitter_id) < 2 ** 31 + 1
        assert 0.0 <= value < 360.0
        assert value == int(value)

    def test_empty_id(self):
        assert stable_pseudo_bearing("") == 0.0


class TestConfidence:
    """Tests for time-decayed confidence."""

    def test_fresh_is_max(self):
        assert BearingProjector().confidence(100.0, 100.0) == pytest.approx(1.0)

    def test_one_second_old(self):
        confidence = BearingProjector().confidence(0.0, 1.0)

        assert confidence >= 0.9
        assert confidence == pytest.approx(1.0 - 0.8 / 15.0)

    def test_floor_at_window_edge(self):
        assert BearingProjector().confidence(0.0, 15.0) == pytest.approx(0.2)

    def test_stale_is_excluded(self):
        assert BearingProjector().confidence(0.0, 16.0) is None

    def test_clock_skew_treated_as_fresh(self):
        assert BearingProjector().confidence(10.0, 5.0) == pytest.approx(1.0)

    def test_monotonic_decay(self):
        projector = BearingProjector()
        values = [projector.confidence(0.0, age / 2.0) for age in range(31)]

        assert all(a >= b for a, b in zip(values, values[1:]))

    def test_invalid_config_rejected(self):
        with pytest.raises(AssertionError):
            BearingProjectorConfig(min_confidence=0.9, max_confidence=0.5)


class TestProject:
    """Tests for BearingProjector.project."""

    def test_triangulated_result(self, fresh_metrics):
        estimate = PositionEstimate(x=3.0, y=4.0)

        result = BearingProjector().project(
            "aa", estimate, ORIGIN, heading_deg=0.0, last_seen=0.0, now=0.0
        )

        assert result.is_triangulated
        assert result.world_angle_deg == pytest.approx(36.8699, abs=1e-3)
        assert result.distance_m == pytest.approx(5.0)
        assert result.confidence == pytest.approx(1.0)

    def test_screen_angle_corrects_heading(self, fresh_metrics):
        """Emitter due north while facing east reads 270 on screen."""
        estimate = PositionEstimate(x=0.0, y=10.0)

        result = BearingProjector().project(
            "aa", estimate, ORIGIN, heading_deg=90.0, last_seen=0.0, now=0.0
        )

        assert result.world_angle_deg == pytest.approx(0.0)
        assert result.screen_angle_deg == pytest.approx(270.0)

    def test_pseudo_bearing_fallback(self, fresh_metrics):
        result = BearingProjector().project(
            "ab", None, ORIGIN, heading_deg=45.0, last_seen=0.0, now=1.0,
            fallback_distance_m=2.5,
        )

        assert not result.is_triangulated
        assert result.world_angle_deg == 225.0
        assert result.screen_angle_deg == pytest.approx(180.0)
        assert result.distance_m == 2.5

    def test_fallback_without_observer_position(self, fresh_metrics):
        estimate = PositionEstimate(x=3.0, y=4.0)

        result = BearingProjector().project(
            "ab", estimate, None, heading_deg=0.0, last_seen=0.0, now=0.0,
            fallback_distance_m=4.0,
        )

        assert not result.is_triangulated
        assert result.distance_m == 4.0

    def test_no_distance_at_all(self, fresh_metrics):
        result = BearingProjector().project(
            "ab", None, ORIGIN, heading_deg=0.0, last_seen=0.0, now=0.0
        )

        assert result is None
        assert fresh_metrics.get_drop_count('no_distance') == 1

    def test_stale_emitter_excluded(self, fresh_metrics):
        estimate = PositionEstimate(x=3.0, y=4.0)

        result = BearingProjector().project(
            "aa", estimate, ORIGIN, heading_deg=0.0, last_seen=0.0, now=20.0
        )

        assert result is None
        assert fresh_metrics.get_drop_count('stale_emitter') == 1


class TestHeadingSmoother:
    """Tests for wrap-aware heading smoothing."""

    def test_first_sample_passes_through(self):
        smoother = HeadingSmoother()
        assert smoother.update(123.0) == pytest.approx(123.0)

    def test_wraps_across_north(self):
        """350 then 10 turns through north, not through south."""
        smoother = HeadingSmoother(HeadingSmootherConfig(beta=0.25))
        smoother.update(350.0)

        assert smoother.update(10.0) == pytest.approx(355.0)

    def test_wraps_the_other_way(self):
        smoother = HeadingSmoother(HeadingSmootherConfig(beta=0.5))
        smoother.update(10.0)

        assert smoother.update(350.0) == pytest.approx(0.0)

    def test_converges_to_constant_input(self):
        smoother = HeadingSmoother()
        smoother.update(0.0)

        for _ in range(100):
            heading = smoother.update(90.0)

        assert heading == pytest.approx(90.0, abs=1e-6)

    def test_output_range(self):
        smoother = HeadingSmoother()
        for raw in [-30.0, 400.0, 359.9, 0.1, -720.0]:
            heading = smoother.update(raw)
            assert 0.0 <= heading < 360.0

    @pytest.mark.parametrize("bad", [None, float('nan'), float('inf')])
    def test_non_finite_ignored(self, bad):
        smoother = HeadingSmoother()
        smoother.update(45.0)

        assert smoother.update(bad) == pytest.approx(45.0)

    def test_reset(self):
        smoother = HeadingSmoother()
        smoother.update(45.0)
        smoother.reset()

        assert smoother.heading_deg is None
        assert smoother.update(200.0) == pytest.approx(200.0)
