"""
Domain Module: presentation-facing helpers.

- Camera overlay placement (field of view, distance normalization, intensity)
- Distance labels
"""

from .overlay import (
    CameraOverlayConfig,
    OverlayPlacement,
    distance_intensity,
    format_distance,
    project_to_overlay,
    visible_in_overlay,
)

__all__ = [
    'CameraOverlayConfig',
    'OverlayPlacement',
    'distance_intensity',
    'format_distance',
    'project_to_overlay',
    'visible_in_overlay',
]
