"""
Upwinding treatments for the divergence flux and the kinetic energy gradient
of vector-invariant momentum advection.

``OnlySelfUpwinding`` upwinds only the derivative along the advecting
direction (the "self" term) and interpolates the cross term symmetrically;
``CrossAndSelfUpwinding`` upwinds the full horizontal divergence.
"""

from dataclasses import dataclass, field

from ..operators.difference import delta_xc, delta_yc
from ..operators.interpolation import interp_xc, interp_yc
from ..operators.metrics import Ax_q_fcc, Ay_q_cfc
from .schemes import AbstractAdvectionScheme, Centered
from .smoothness import DefaultStencil, FunctionStencil


# Horizontal transport divergence pieces at (Center, Center, Center)

def delta_x_U(i, j, k, grid, u, v):
    return delta_xc(i, j, k, grid, Ax_q_fcc, u)


def delta_y_V(i, j, k, grid, u, v):
    return delta_yc(i, j, k, grid, Ay_q_cfc, v)


def horizontal_divergence_flux(i, j, k, grid, u, v):
    return delta_x_U(i, j, k, grid, u, v) + delta_y_V(i, j, k, grid, u, v)


# Smoothness measures used by the default stencils

def divergence_smoothness(i, j, k, grid, u, v):
    return horizontal_divergence_flux(i, j, k, grid, u, v)


def u_smoothness(i, j, k, grid, u, v):
    return interp_xc(i, j, k, grid, u)


def v_smoothness(i, j, k, grid, u, v):
    return interp_yc(i, j, k, grid, v)


@dataclass(frozen=True)
class OnlySelfUpwinding:
    """Upwind the self-derivative, interpolate the cross term with
    ``cross_scheme``.

    Parameters
    ----------
    cross_scheme : AbstractAdvectionScheme
        Scheme for the symmetric interpolation of the cross terms.
    delta_U_stencil, delta_V_stencil : smoothness stencil
        Smoothness of δx(Ax u) and δy(Ay v) reconstructions.
    delta_u2_stencil, delta_v2_stencil : smoothness stencil
        Smoothness of the kinetic energy gradient reconstructions.
    """

    cross_scheme: AbstractAdvectionScheme = field(default_factory=Centered)
    delta_U_stencil: object = field(default_factory=lambda: FunctionStencil(divergence_smoothness))
    delta_V_stencil: object = field(default_factory=lambda: FunctionStencil(divergence_smoothness))
    delta_u2_stencil: object = field(default_factory=lambda: FunctionStencil(u_smoothness))
    delta_v2_stencil: object = field(default_factory=lambda: FunctionStencil(v_smoothness))

    def on_architecture(self, arch):
        return self


@dataclass(frozen=True)
class CrossAndSelfUpwinding:
    """Upwind the whole horizontal divergence with ``divergence_stencil``
    smoothness. The kinetic energy gradient is treated as in
    ``OnlySelfUpwinding``."""

    cross_scheme: AbstractAdvectionScheme = field(default_factory=Centered)
    divergence_stencil: object = field(default_factory=DefaultStencil)
    delta_u2_stencil: object = field(default_factory=lambda: FunctionStencil(u_smoothness))
    delta_v2_stencil: object = field(default_factory=lambda: FunctionStencil(v_smoothness))

    def on_architecture(self, arch):
        return self


UPWINDING_ALIASES = {
    "self": OnlySelfUpwinding,
    "cross": CrossAndSelfUpwinding,
}


__all__ = [
    'OnlySelfUpwinding', 'CrossAndSelfUpwinding', 'UPWINDING_ALIASES',
    'delta_x_U', 'delta_y_V', 'horizontal_divergence_flux',
    'divergence_smoothness', 'u_smoothness', 'v_smoothness',
]
