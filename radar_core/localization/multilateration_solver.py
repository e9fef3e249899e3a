"""
Multilateration Solver (pairwise circle intersection).

Estimates an emitter's 2D position from its reading history. Each reading
is a circle in the local frame: center = observer position, radius =
estimated distance.

Algorithm:
1. Reject histories with < 2 readings or no baseline (all readings within
   the minimum baseline of the first).
2. Intersect every pair of circles whose centers are far enough apart.
3. Score each intersection point by summed squared residual over ALL readings.
4. Fuse the best candidates with inverse-residual weights.

The solver is stateless: every call recomputes from the history it is
given, so there is nothing to invalidate when new readings arrive.
"""

import math
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass
import numpy as np

from radar_core.proto.reading import Reading
from radar_core.proto.position_estimate import PositionEstimate
from radar_core.localization.coordinate_converter import LocalFrame
from radar_core.metrics import get_metrics

Point2D = Tuple[float, float]


@dataclass
class MultilaterationConfig:
    """
    Configuration for the multilateration solver.

    Attributes:
        min_readings: Minimum readings needed to attempt a solve
        min_baseline_m: Minimum separation between circle centers (m)
        intersection_tolerance_m: Slack when deciding whether circles meet (m)
        min_radius_m: Floor applied to every reading distance (m)
        top_candidates: Number of lowest-residual candidates fused
        weight_epsilon: Added to residuals before inverting into weights
    """

    min_readings: int = 2
    min_baseline_m: float = 0.3
    intersection_tolerance_m: float = 0.01
    min_radius_m: float = 0.5
    top_candidates: int = 5
    weight_epsilon: float = 1e-6

    def __post_init__(self):
        """Validate configuration."""
        assert self.min_readings >= 2, "need at least 2 readings to intersect circles"
        assert self.min_baseline_m >= 0, "min_baseline must be non-negative"
        assert self.intersection_tolerance_m >= 0, "tolerance must be non-negative"
        assert self.min_radius_m >= 0, "min_radius must be non-negative"
        assert self.top_candidates >= 1, "need at least one candidate to fuse"
        assert self.weight_epsilon > 0, "weight epsilon must be positive"


def intersect_circles(
    c1: Point2D,
    r1: float,
    c2: Point2D,
    r2: float,
    tolerance_m: float = 0.01
) -> List[Point2D]:
    """
    Intersect two circles.

    Args:
        c1: Center of the first circle (x, y)
        r1: Radius of the first circle
        c2: Center of the second circle (x, y)
        r2: Radius of the second circle
        tolerance_m: Slack for near-tangent and near-contained circles

    Returns:
        0, 1 or 2 intersection points. Coincident circles yield their
        shared center.
    """
    dx = c2[0] - c1[0]
    dy = c2[1] - c1[1]
    d = math.hypot(dx, dy)

    if d <= 1e-6:
        if abs(r1 - r2) <= 1e-6:
            return [(c1[0], c1[1])]
        return []

    if d > r1 + r2 + tolerance_m or d < abs(r1 - r2) - tolerance_m:
        return []

    # Chord midpoint along the center line, then offset perpendicular by h
    a = (r1 * r1 - r2 * r2 + d * d) / (2 * d)
    h_sq = r1 * r1 - a * a
    if h_sq < 0:
        # Inside tolerance: treat as tangent
        h_sq = 0.0

    h = math.sqrt(h_sq)
    px = c1[0] + a * dx / d
    py = c1[1] + a * dy / d

    p1 = (px + h * dy / d, py - h * dx / d)
    if h_sq <= 1e-10:
        return [p1]

    p2 = (px - h * dy / d, py + h * dx / d)
    return [p1, p2]


def summed_squared_residuals(
    candidates: np.ndarray,
    centers: np.ndarray,
    radii: np.ndarray
) -> np.ndarray:
    """
    Score candidate positions against every circle.

    Args:
        candidates: (K, 2) candidate positions
        centers: (N, 2) circle centers
        radii: (N,) circle radii

    Returns:
        (K,) array of sum_i (|candidate - center_i| - radius_i)^2
    """
    offsets = candidates[:, None, :] - centers[None, :, :]
    ranges = np.linalg.norm(offsets, axis=2)
    return np.sum((ranges - radii[None, :]) ** 2, axis=1)


class MultilaterationSolver:
    """
    Estimate an emitter position from its motion-gated reading history.

    Usage:
        solver = MultilaterationSolver(config)

        history = accumulator.get_history("aa:bb")
        estimate = solver.solve(history, accumulator.frame)

        if estimate is not None:
            print(f"Emitter at ({estimate.x:.1f}, {estimate.y:.1f}) m")

    Notes:
        - Pure with respect to its inputs, safe to call on every refresh
        - Degenerate pairs are skipped individually; the solve only fails
          when no pair yields a candidate
    """

    def __init__(self, config: Optional[MultilaterationConfig] = None):
        """
        Initialize solver.

        Args:
            config: Solver configuration (uses defaults if None)
        """
        self.config = config or MultilaterationConfig()
        self.metrics = get_metrics()

    def solve(
        self,
        readings: Sequence[Reading],
        frame: Optional[LocalFrame]
    ) -> Optional[PositionEstimate]:
        """
        Solve an emitter position from readings.

        Args:
            readings: Reading history for one emitter
            frame: Local frame to express readings in

        Returns:
            PositionEstimate in the local frame, or None for "no estimate"
        """
        self.metrics.increment('multilateration_attempts')

        if frame is None or len(readings) < self.config.min_readings:
            self.metrics.increment_drop('insufficient_readings')
            return None

        centers, radii = self._to_circles(readings, frame)
        return self.solve_circles(centers, radii)

    def solve_circles(
        self,
        centers: np.ndarray,
        radii: np.ndarray
    ) -> Optional[PositionEstimate]:
        """
        Solve from circles already expressed in the local frame.

        Args:
            centers: (N, 2) circle centers (m)
            radii: (N,) circle radii (m)

        Returns:
            PositionEstimate, or None for "no estimate"
        """
        centers = np.asarray(centers, dtype=float).reshape(-1, 2)
        radii = np.maximum(np.asarray(radii, dtype=float).reshape(-1), self.config.min_radius_m)

        if len(centers) < self.config.min_readings:
            self.metrics.increment_drop('insufficient_readings')
            return None

        baselines = np.linalg.norm(centers[1:] - centers[0], axis=1)
        if np.all(baselines < self.config.min_baseline_m):
            self.metrics.increment_drop('insufficient_baseline')
            return None

        candidates = self._generate_candidates(centers, radii)
        if not candidates:
            self.metrics.increment_drop('no_intersections')
            return None

        candidate_array = np.array(candidates, dtype=float)
        residuals = summed_squared_residuals(candidate_array, centers, radii)

        x, y, residual = self._fuse_best(candidate_array, residuals)

        self.metrics.increment('multilateration_success')
        self.metrics.record_histogram('multilateration_residual_m2', residual)
        self.metrics.record_histogram('multilateration_candidates', len(candidates))

        return PositionEstimate(
            x=x,
            y=y,
            residual=residual,
            num_readings=len(centers),
            num_candidates=len(candidates),
        )

    def _to_circles(
        self,
        readings: Sequence[Reading],
        frame: LocalFrame
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Express readings as circle centers and radii in the local frame."""
        centers = np.zeros((len(readings), 2))
        radii = np.zeros(len(readings))

        for i, reading in enumerate(readings):
            point = frame.to_local(reading.observer_lat, reading.observer_lon)
            centers[i] = (point.x, point.y)
            radii[i] = reading.distance_m

        return centers, radii

    def _generate_candidates(
        self,
        centers: np.ndarray,
        radii: np.ndarray
    ) -> List[Point2D]:
        """Intersect every pair of circles with a usable baseline."""
        candidates: List[Point2D] = []
        n = len(centers)

        for i in range(n):
            for j in range(i + 1, n):
                separation = float(np.linalg.norm(centers[j] - centers[i]))
                if separation < self.config.min_baseline_m:
                    continue

                candidates.extend(intersect_circles(
                    (float(centers[i, 0]), float(centers[i, 1])),
                    float(radii[i]),
                    (float(centers[j, 0]), float(centers[j, 1])),
                    float(radii[j]),
                    self.config.intersection_tolerance_m,
                ))

        return candidates

    def _fuse_best(
        self,
        candidates: np.ndarray,
        residuals: np.ndarray
    ) -> Tuple[float, float, float]:
        """
        Inverse-residual weighted centroid of the best candidates.

        Returns:
            Tuple of (x, y, weighted_residual)
        """
        order = np.argsort(residuals, kind='stable')[:self.config.top_candidates]
        best = candidates[order]
        best_residuals = residuals[order]

        weights = 1.0 / (best_residuals + self.config.weight_epsilon)
        total = np.sum(weights)

        x = float(np.sum(best[:, 0] * weights) / total)
        y = float(np.sum(best[:, 1] * weights) / total)
        residual = float(np.sum(best_residuals * weights) / total)

        return x, y, residual
