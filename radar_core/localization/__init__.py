"""
Localization Module: signal-to-position estimation for nearby emitters.

Key classes:
- SignalNormalizer: Per-emitter exponential smoothing of raw strength
- DistanceJumpFilter / calculate_*_distance: Path-loss distance model
- ReadingAccumulator: Motion-gated, bounded reading histories + session origin
- LocalFrame: Equirectangular local planar projection
- MultilaterationSolver: Pairwise circle intersection + weighted fusion
- BearingProjector: Observer-relative bearing, distance, confidence
- HeadingSmoother: Wrap-aware compass heading smoothing
- EmitterRegistry: Emitter identity and staleness eviction
- RelativePositioningEngine: Facade tying the chain together
"""

from .coordinate_converter import (
    LocalFrame,
    latlon_to_local,
    planar_distance_m,
    METERS_PER_DEG_LAT,
    METERS_PER_DEG_LON_AT_EQUATOR,
)
from .signal_normalizer import (
    SignalNormalizer,
    SignalNormalizerConfig,
)
from .path_loss_model import (
    PathLossConfig,
    DistanceJumpFilter,
    calculate_ble_distance,
    calculate_wifi_distance,
    estimate_distance,
)
from .reading_accumulator import (
    ReadingAccumulator,
    ReadingAccumulatorConfig,
)
from .multilateration_solver import (
    MultilaterationSolver,
    MultilaterationConfig,
    intersect_circles,
)
from .bearing_projector import (
    BearingProjector,
    BearingProjectorConfig,
    normalize_bearing,
    normalize_angle_delta,
    stable_pseudo_bearing,
)
from .heading_smoother import (
    HeadingSmoother,
    HeadingSmootherConfig,
)
from .emitter_registry import (
    Emitter,
    EmitterRegistry,
)
from .relative_positioning import (
    RelativePositioningEngine,
    RelativePositioningConfig,
    create_default_engine,
)

__all__ = [
    # Local planar projection
    'LocalFrame',
    'latlon_to_local',
    'planar_distance_m',
    'METERS_PER_DEG_LAT',
    'METERS_PER_DEG_LON_AT_EQUATOR',
    # Signal normalizer
    'SignalNormalizer',
    'SignalNormalizerConfig',
    # Path-loss distance model
    'PathLossConfig',
    'DistanceJumpFilter',
    'calculate_ble_distance',
    'calculate_wifi_distance',
    'estimate_distance',
    # Reading accumulator
    'ReadingAccumulator',
    'ReadingAccumulatorConfig',
    # Multilateration
    'MultilaterationSolver',
    'MultilaterationConfig',
    'intersect_circles',
    # Bearing projection
    'BearingProjector',
    'BearingProjectorConfig',
    'normalize_bearing',
    'normalize_angle_delta',
    'stable_pseudo_bearing',
    'HeadingSmoother',
    'HeadingSmootherConfig',
    # Registry and engine
    'Emitter',
    'EmitterRegistry',
    'RelativePositioningEngine',
    'RelativePositioningConfig',
    'create_default_engine',
]
