"""
Reconstruction schemes and advection operators.
"""

from .schemes import (
    AbstractAdvectionScheme, Centered, UpwindBiased, WENO,
    EnergyConserving, EnstrophyConserving,
)
from .smoothness import DefaultStencil, VelocityStencil, FunctionStencil
from .upwinding import OnlySelfUpwinding, CrossAndSelfUpwinding
from .vector_invariant import VectorInvariant, weno_vector_invariant
from .flux_form import div_Uc, div_Uu, div_Uv, tracer_tendency
from .momentum import (
    momentum_advection_form, U_dot_grad_u, U_dot_grad_v,
    u_advection_tendency, v_advection_tendency,
)

__all__ = [
    'AbstractAdvectionScheme', 'Centered', 'UpwindBiased', 'WENO',
    'EnergyConserving', 'EnstrophyConserving',
    'DefaultStencil', 'VelocityStencil', 'FunctionStencil',
    'OnlySelfUpwinding', 'CrossAndSelfUpwinding',
    'VectorInvariant', 'weno_vector_invariant',
    'div_Uc', 'div_Uu', 'div_Uv', 'tracer_tendency',
    'momentum_advection_form', 'U_dot_grad_u', 'U_dot_grad_v',
    'u_advection_tendency', 'v_advection_tendency',
]
