"""
Momentum advection dispatch.

``U_dot_grad_u`` and ``U_dot_grad_v`` pick the discretization from the type
of the advection scheme: vector-invariant schemes use the vorticity /
kinetic-energy split, every other scheme the flux form. A vector-invariant
scheme on a grid with non-uniform horizontal spacing falls back to the flux
form (metric terms vanish on a rectilinear grid).
"""

from loguru import logger

from .flux_form import div_Uu, div_Uv
from .vector_invariant import VectorInvariant, vector_invariant_U, vector_invariant_V


def momentum_advection_form(grid, advection):
    """The scheme actually used for momentum advection on ``grid``.

    Returns ``advection`` unless it is vector-invariant and the grid is
    horizontally stretched, in which case the flux-form fallback is returned
    (with a warning).
    """
    if isinstance(advection, VectorInvariant) and not grid.has_uniform_horizontal_spacing:
        fallback = advection.flux_form_fallback
        logger.warning(f"VectorInvariant needs uniform horizontal spacing; "
                       f"using flux form with {fallback!r} for momentum advection")
        return fallback
    return advection


def U_dot_grad_u(i, j, k, grid, advection, u, v, w):
    """(u·∇)u at (Face, Center, Center). ``advection=None`` gives zero."""
    if advection is None:
        return 0.0
    if isinstance(advection, VectorInvariant):
        if grid.has_uniform_horizontal_spacing:
            return vector_invariant_U(i, j, k, grid, advection, u, v, w)
        return div_Uu(i, j, k, grid, advection.flux_form_fallback, u, v, w)
    return div_Uu(i, j, k, grid, advection, u, v, w)


def U_dot_grad_v(i, j, k, grid, advection, u, v, w):
    """(u·∇)v at (Center, Face, Center). ``advection=None`` gives zero."""
    if advection is None:
        return 0.0
    if isinstance(advection, VectorInvariant):
        if grid.has_uniform_horizontal_spacing:
            return vector_invariant_V(i, j, k, grid, advection, u, v, w)
        return div_Uv(i, j, k, grid, advection.flux_form_fallback, u, v, w)
    return div_Uv(i, j, k, grid, advection, u, v, w)


def u_advection_tendency(i, j, k, grid, advection, u, v, w):
    return -U_dot_grad_u(i, j, k, grid, advection, u, v, w)


def v_advection_tendency(i, j, k, grid, advection, u, v, w):
    return -U_dot_grad_v(i, j, k, grid, advection, u, v, w)


__all__ = [
    'momentum_advection_form', 'U_dot_grad_u', 'U_dot_grad_v',
    'u_advection_tendency', 'v_advection_tendency',
]
