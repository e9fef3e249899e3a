"""
Unit tests for the multilateration solver.

Tests cover:
- Circle intersection geometry (two points, tangent, disjoint, coincident)
- Solving from reading histories
- Degenerate histories (too few readings, no baseline, no intersections)
"""

import numpy as np
import pytest

from radar_core.proto import LocalPoint, Reading
from radar_core.localization import (
    MultilaterationSolver,
    MultilaterationConfig,
    intersect_circles,
)
from radar_core.localization.multilateration_solver import summed_squared_residuals

from conftest import make_readings


class TestIntersectCircles:
    """Tests for intersect_circles."""

    def test_two_intersection_points(self):
        points = intersect_circles((0.0, 0.0), 3.0, (4.0, 0.0), 5.0)

        assert len(points) == 2
        ys = sorted(p[1] for p in points)
        for x, _ in points:
            assert x == pytest.approx(0.0, abs=1e-6)
        assert ys[0] == pytest.approx(-3.0, abs=1e-6)
        assert ys[1] == pytest.approx(3.0, abs=1e-6)

    def test_points_lie_on_both_circles(self):
        c1, r1 = (1.0, -2.0), 4.0
        c2, r2 = (3.5, 1.5), 3.0

        for x, y in intersect_circles(c1, r1, c2, r2):
            assert np.hypot(x - c1[0], y - c1[1]) == pytest.approx(r1)
            assert np.hypot(x - c2[0], y - c2[1]) == pytest.approx(r2)

    def test_externally_tangent(self):
        points = intersect_circles((0.0, 0.0), 2.0, (4.0, 0.0), 2.0)

        assert len(points) == 1
        assert points[0][0] == pytest.approx(2.0)
        assert points[0][1] == pytest.approx(0.0)

    def test_near_tangent_within_tolerance(self):
        """Circles that just miss by less than the tolerance still meet once."""
        points = intersect_circles((0.0, 0.0), 1.999, (4.0, 0.0), 1.999, tolerance_m=0.01)

        assert len(points) == 1
        assert points[0][0] == pytest.approx(2.0)

    def test_too_far_apart(self):
        assert intersect_circles((0.0, 0.0), 1.0, (10.0, 0.0), 1.0) == []

    def test_one_contains_the_other(self):
        assert intersect_circles((0.0, 0.0), 10.0, (1.0, 0.0), 2.0) == []

    def test_coincident_circles_return_center(self):
        assert intersect_circles((1.0, 2.0), 3.0, (1.0, 2.0), 3.0) == [(1.0, 2.0)]

    def test_concentric_different_radii(self):
        assert intersect_circles((1.0, 2.0), 3.0, (1.0, 2.0), 4.0) == []


class TestResiduals:
    """Tests for candidate scoring."""

    def test_exact_candidate_scores_zero(self):
        centers = np.array([[0.0, 0.0], [5.0, 0.0]])
        radii = np.array([5.0, np.sqrt(20.0)])
        candidates = np.array([[3.0, 4.0], [0.0, 0.0]])

        residuals = summed_squared_residuals(candidates, centers, radii)

        assert residuals[0] == pytest.approx(0.0, abs=1e-12)
        assert residuals[1] == pytest.approx(25.0 + (5.0 - np.sqrt(20.0)) ** 2)


class TestSolve:
    """Tests for MultilaterationSolver.solve."""

    def test_triangle_recovers_emitter(self, fresh_metrics, local_frame, triangle_readings):
        solver = MultilaterationSolver()

        estimate = solver.solve(triangle_readings, local_frame)

        assert estimate is not None
        assert estimate.x == pytest.approx(3.0, abs=0.5)
        assert estimate.y == pytest.approx(4.0, abs=0.5)
        assert estimate.num_readings == 3
        assert estimate.num_candidates == 6
        assert fresh_metrics.get_counter('multilateration_success') == 1

    def test_noisy_walk_stays_close(self, fresh_metrics, local_frame):
        points = [(0.0, 0.0), (5.0, 0.0), (0.0, 5.0), (5.0, 6.0), (2.0, -2.0), (-2.0, 2.0)]
        readings = make_readings(local_frame, points, (3.0, 4.0))
        noise = [0.2, -0.15, 0.1, -0.2, 0.15, -0.1]
        noisy = [Reading(r.observer_lat, r.observer_lon, r.distance_m + n, r.timestamp)
                 for r, n in zip(readings, noise)]

        estimate = MultilaterationSolver().solve(noisy, local_frame)

        assert estimate is not None
        assert estimate.point.distance_to(LocalPoint(3.0, 4.0)) < 1.0

    def test_fewer_than_two_readings(self, fresh_metrics, local_frame, triangle_readings):
        solver = MultilaterationSolver()

        assert solver.solve([], local_frame) is None
        assert solver.solve(triangle_readings[:1], local_frame) is None
        assert fresh_metrics.get_drop_count('insufficient_readings') == 2

    def test_no_frame(self, fresh_metrics, triangle_readings):
        assert MultilaterationSolver().solve(triangle_readings, None) is None

    def test_clustered_readings(self, fresh_metrics, local_frame):
        """All readings within the minimum baseline of the first."""
        points = [(0.0, 0.0), (0.1, 0.0), (0.0, 0.1), (0.1, 0.1)]
        readings = make_readings(local_frame, points, (3.0, 4.0))

        assert MultilaterationSolver().solve(readings, local_frame) is None
        assert fresh_metrics.get_drop_count('insufficient_baseline') == 1

    def test_non_intersecting_circles(self, fresh_metrics):
        centers = np.array([[0.0, 0.0], [10.0, 0.0]])
        radii = np.array([1.0, 1.0])

        assert MultilaterationSolver().solve_circles(centers, radii) is None
        assert fresh_metrics.get_drop_count('no_intersections') == 1

    def test_radius_floor_applied(self, fresh_metrics):
        """Radii below the floor are raised before intersecting."""
        centers = np.array([[0.0, 0.0], [1.0, 0.0]])
        radii = np.array([0.1, 0.1])

        estimate = MultilaterationSolver().solve_circles(centers, radii)

        assert estimate is not None
        assert estimate.x == pytest.approx(0.5)
        assert estimate.y == pytest.approx(0.0)

    def test_mirror_ambiguity_averaged_with_two_readings(self, fresh_metrics):
        """Two equally good mirror candidates fuse to their midpoint."""
        centers = np.array([[0.0, 0.0], [6.0, 0.0]])
        radii = np.array([5.0, 5.0])

        estimate = MultilaterationSolver().solve_circles(centers, radii)

        assert estimate.x == pytest.approx(3.0)
        assert estimate.y == pytest.approx(0.0, abs=1e-6)

    def test_solve_is_pure(self, fresh_metrics, local_frame, triangle_readings):
        solver = MultilaterationSolver()

        first = solver.solve(triangle_readings, local_frame)
        second = solver.solve(triangle_readings, local_frame)

        assert first.to_dict() == second.to_dict()

    def test_invalid_config_rejected(self):
        with pytest.raises(AssertionError):
            MultilaterationConfig(min_readings=1)
        with pytest.raises(AssertionError):
            MultilaterationConfig(top_candidates=0)
