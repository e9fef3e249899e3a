"""
Camera Overlay Placement.

Pure placement math for showing projected emitters over a live camera
view: which bearings fall inside the camera's field of view, where they
land horizontally, how near they read and how strongly to draw them.
Plus the distance label used by the list and overlay views.
"""

import math
from typing import List, Optional
from dataclasses import dataclass

from radar_core.proto.position_estimate import BearingResult
from radar_core.localization.bearing_projector import normalize_angle_delta


def format_distance(distance_m: Optional[float]) -> str:
    """
    Format a distance for display.

    - Missing, negative or NaN: an em dash placeholder
    - Below 1 m: whole centimeters
    - Otherwise: meters with one decimal
    """
    if distance_m is None or math.isnan(distance_m) or distance_m < 0:
        return "—"
    if distance_m < 1:
        return f"{distance_m * 100:.0f} cm"
    return f"{distance_m:.1f} m"


@dataclass
class CameraOverlayConfig:
    """
    Configuration for camera overlay placement.

    Attributes:
        fov_deg: Assumed horizontal field of view of the camera (deg)
        edge_margin_deg: Extra angle beyond the FOV still drawn at the edge (deg)
        near_m: Distance mapped to "closest" (m)
        far_m: Distance mapped to "farthest" (m)
    """

    fov_deg: float = 60.0
    edge_margin_deg: float = 15.0
    near_m: float = 0.5
    far_m: float = 15.0

    def __post_init__(self):
        """Validate configuration."""
        assert 0 < self.fov_deg < 360, "fov must be in (0, 360)"
        assert self.edge_margin_deg >= 0, "edge margin must be non-negative"
        assert 0 <= self.near_m < self.far_m, "need 0 <= near < far"


@dataclass
class OverlayPlacement:
    """
    Where and how to draw one emitter over the camera view.

    Attributes:
        emitter_id: Emitter identifier
        offset_deg: Angle from the view center, negative = left (deg)
        horizontal_fraction: 0 = left edge, 1 = right edge
        distance_fraction: 0 = nearest, 1 = farthest
        intensity: Draw intensity (0-1), stronger when closer
        label: Formatted distance label
    """

    emitter_id: str
    offset_deg: float
    horizontal_fraction: float
    distance_fraction: float
    intensity: float
    label: str


def distance_intensity(distance_m: float) -> float:
    """Draw intensity band for a distance."""
    if distance_m < 2:
        return 1.0
    if distance_m < 5:
        return 0.8
    if distance_m < 10:
        return 0.55
    return 0.35


def project_to_overlay(
    result: BearingResult,
    config: Optional[CameraOverlayConfig] = None
) -> Optional[OverlayPlacement]:
    """
    Place a projected emitter over the camera view.

    Args:
        result: Bearing result (screen angle already heading-corrected)
        config: Overlay configuration (uses defaults if None)

    Returns:
        OverlayPlacement, or None when outside the field of view or
        without a positive distance
    """
    cfg = config or CameraOverlayConfig()

    if result.distance_m <= 0:
        return None

    offset = normalize_angle_delta(result.screen_angle_deg)
    half_fov = cfg.fov_deg / 2
    if abs(offset) > half_fov + cfg.edge_margin_deg:
        return None

    horizontal = min(1.0, max(0.0, (offset + half_fov) / cfg.fov_deg))
    clamped = min(cfg.far_m, max(cfg.near_m, result.distance_m))
    distance_fraction = (clamped - cfg.near_m) / (cfg.far_m - cfg.near_m)

    return OverlayPlacement(
        emitter_id=result.emitter_id,
        offset_deg=offset,
        horizontal_fraction=horizontal,
        distance_fraction=distance_fraction,
        intensity=distance_intensity(result.distance_m),
        label=format_distance(result.distance_m),
    )


def visible_in_overlay(
    results: List[BearingResult],
    config: Optional[CameraOverlayConfig] = None
) -> List[OverlayPlacement]:
    """Place every result that falls inside the camera's view."""
    placements = []
    for result in results:
        placement = project_to_overlay(result, config)
        if placement is not None:
            placements.append(placement)
    return placements
