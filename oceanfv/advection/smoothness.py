"""
Smoothness stencils: which values the WENO indicators are computed from.

By default a WENO reconstruction measures the smoothness of the quantity it
reconstructs. In the vector-invariant formulation it pays to measure it on
something else, e.g. the velocity components instead of the vorticity, or
the divergence instead of its flux.
"""

from dataclasses import dataclass
from typing import Callable

from ..operators.interpolation import interp_xf, interp_yf
from .reconstruction import biased_stencils


@dataclass(frozen=True)
class DefaultStencil:
    """Smoothness of the reconstructed quantity itself."""

    def smoothness_stencils(self, width, axis, to_face, i, j, k, grid, ψ, args):
        return None


def _u_at_ffc(i, j, k, grid, u, v, *args):
    return interp_yf(i, j, k, grid, u)


def _v_at_ffc(i, j, k, grid, u, v, *args):
    return interp_xf(i, j, k, grid, v)


@dataclass(frozen=True)
class VelocityStencil:
    """Smoothness averaged over the two horizontal velocity components.

    Meant for the vorticity at (Face, Face, Center): the first two kernel
    arguments must be ``u`` and ``v``. With fewer arguments it behaves like
    ``DefaultStencil``.
    """

    def smoothness_stencils(self, width, axis, to_face, i, j, k, grid, ψ, args):
        if len(args) < 2:
            return None
        u_left, u_right = biased_stencils(_u_at_ffc, axis, to_face, width, i, j, k, grid, args)
        v_left, v_right = biased_stencils(_v_at_ffc, axis, to_face, width, i, j, k, grid, args)
        return [u_left, v_left], [u_right, v_right]


@dataclass(frozen=True)
class FunctionStencil:
    """Smoothness of ``func(i, j, k, grid, *args)``, called with the same
    arguments as the reconstructed quantity."""

    func: Callable

    def smoothness_stencils(self, width, axis, to_face, i, j, k, grid, ψ, args):
        left, right = biased_stencils(self.func, axis, to_face, width, i, j, k, grid, args)
        return [left], [right]


__all__ = ['DefaultStencil', 'VelocityStencil', 'FunctionStencil']
