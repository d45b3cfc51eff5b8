"""
Free-surface solvers: solve for η, then correct the horizontal velocities.
"""

from .base import AbstractFreeSurface
from .explicit import ExplicitFreeSurface
from .implicit import ImplicitFreeSurface, SOLVER_METHODS
from .split_explicit import SplitExplicitFreeSurface, averaging_weights, AVERAGING_KERNELS
from .vertical_velocity import compute_w_from_continuity
from .barotropic import BarotropicGeometry, barotropic_geometry, barotropic_transport

__all__ = [
    'AbstractFreeSurface', 'ExplicitFreeSurface', 'ImplicitFreeSurface',
    'SplitExplicitFreeSurface', 'SOLVER_METHODS', 'averaging_weights', 'AVERAGING_KERNELS',
    'compute_w_from_continuity',
    'BarotropicGeometry', 'barotropic_geometry', 'barotropic_transport',
]
