"""
oceanfv: finite-volume reconstruction, advection and free-surface solvers
on a staggered rectilinear C-grid.
"""

from .errors import ConfigurationError, SizeMismatchError, ConvergenceError
from .architectures import CPU, GPU, on_architecture
from .grid import RectilinearGrid, Center, Face, Periodic, Bounded
from .fields import (
    Field, CenterField, XFaceField, YFaceField, ZFaceField, SurfaceField,
    ConditionalOperation, condition_operand, materialize_condition,
    materialize_condition_inplace, conditional_length,
)
from .advection import (
    Centered, UpwindBiased, WENO, EnergyConserving, EnstrophyConserving,
    DefaultStencil, VelocityStencil, FunctionStencil,
    OnlySelfUpwinding, CrossAndSelfUpwinding,
    VectorInvariant, weno_vector_invariant,
)
from .models import (
    ExplicitFreeSurface, ImplicitFreeSurface, SplitExplicitFreeSurface,
    HydrostaticFreeSurfaceModel, build_model,
)

__version__ = "0.1.0"

__all__ = [
    'ConfigurationError', 'SizeMismatchError', 'ConvergenceError',
    'CPU', 'GPU', 'on_architecture',
    'RectilinearGrid', 'Center', 'Face', 'Periodic', 'Bounded',
    'Field', 'CenterField', 'XFaceField', 'YFaceField', 'ZFaceField', 'SurfaceField',
    'ConditionalOperation', 'condition_operand', 'materialize_condition',
    'materialize_condition_inplace', 'conditional_length',
    'Centered', 'UpwindBiased', 'WENO', 'EnergyConserving', 'EnstrophyConserving',
    'DefaultStencil', 'VelocityStencil', 'FunctionStencil',
    'OnlySelfUpwinding', 'CrossAndSelfUpwinding',
    'VectorInvariant', 'weno_vector_invariant',
    'ExplicitFreeSurface', 'ImplicitFreeSurface', 'SplitExplicitFreeSurface',
    'HydrostaticFreeSurfaceModel', 'build_model',
]
