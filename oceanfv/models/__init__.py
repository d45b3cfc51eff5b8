"""
Hydrostatic free-surface model, time stepping and construction from configuration.
"""

from .free_surface import (
    AbstractFreeSurface, ExplicitFreeSurface, ImplicitFreeSurface, SplitExplicitFreeSurface,
    compute_w_from_continuity,
)
from .time_stepping import Clock, QuasiAdamsBashforth2TimeStepper
from .hydrostatic_model import HydrostaticFreeSurfaceModel, VelocityFields
from .factory import build_model, run_simulation

__all__ = [
    'AbstractFreeSurface', 'ExplicitFreeSurface', 'ImplicitFreeSurface', 'SplitExplicitFreeSurface',
    'compute_w_from_continuity',
    'Clock', 'QuasiAdamsBashforth2TimeStepper',
    'HydrostaticFreeSurfaceModel', 'VelocityFields',
    'build_model', 'run_simulation',
]
