"""
Flux-form advection.

Tracer advection ``∇·(U c)`` and momentum advection ``∇·(U u)``,
``∇·(U v)`` as divergences of reconstructed advective fluxes. Each flux is a
transport (velocity times face area) times the value reconstructed at the
face by the advection scheme, upwinded by the sign of the transport.

Fluxes through faces on a Bounded boundary are zero. For the vertical axis
this means no advective flux through the (linearized) free surface.
"""

from ..architectures.backends import ifelse
from ..constants import BOUNDED
from ..grid.locations import CCC, FCC, CFC
from ..operators.difference import delta_xc, delta_xf, delta_yc, delta_yf, delta_zc
from ..operators.interpolation import interp_xc, interp_xf, interp_yc, interp_yf
from ..operators.metrics import Ax_q_fcc, Ay_q_cfc, Az_q_ccf


def boundary_flux_mask(grid, axis, index):
    """0 on Bounded boundary faces (0 and N) along ``axis``, 1 elsewhere."""
    if grid.topology[axis] != BOUNDED:
        return 1.0
    N = grid.size[axis]
    return ifelse((index == 0) | (index == N), 0.0, 1.0)


# =============================================================================
# Tracer fluxes
# =============================================================================

def advective_tracer_flux_x(i, j, k, grid, scheme, u, c):
    transport = Ax_q_fcc(i, j, k, grid, u)
    c_face = scheme.advective_interpolate(0, True, transport, i, j, k, grid, c)
    return boundary_flux_mask(grid, 0, i) * transport * c_face


def advective_tracer_flux_y(i, j, k, grid, scheme, v, c):
    transport = Ay_q_cfc(i, j, k, grid, v)
    c_face = scheme.advective_interpolate(1, True, transport, i, j, k, grid, c)
    return boundary_flux_mask(grid, 1, j) * transport * c_face


def advective_tracer_flux_z(i, j, k, grid, scheme, w, c):
    transport = Az_q_ccf(i, j, k, grid, w)
    c_face = scheme.advective_interpolate(2, True, transport, i, j, k, grid, c)
    return boundary_flux_mask(grid, 2, k) * transport * c_face


def div_Uc(i, j, k, grid, scheme, u, v, w, c):
    """Flux divergence ``∇·(U c)`` at (Center, Center, Center)."""
    return (delta_xc(i, j, k, grid, advective_tracer_flux_x, scheme, u, c)
            + delta_yc(i, j, k, grid, advective_tracer_flux_y, scheme, v, c)
            + delta_zc(i, j, k, grid, advective_tracer_flux_z, scheme, w, c)) / grid.volume(i, j, k, CCC)


def tracer_tendency(i, j, k, grid, scheme, u, v, w, c):
    return -div_Uc(i, j, k, grid, scheme, u, v, w, c)


# =============================================================================
# Momentum fluxes
# =============================================================================

def advective_momentum_flux_Uu(i, j, k, grid, scheme, u):
    """x-flux of u at (Center, Center, Center)."""
    transport = interp_xc(i, j, k, grid, Ax_q_fcc, u)
    u_center = scheme.advective_interpolate(0, False, transport, i, j, k, grid, u)
    return transport * u_center


def advective_momentum_flux_Vu(i, j, k, grid, scheme, u, v):
    """y-flux of u at (Face, Face, Center)."""
    transport = interp_xf(i, j, k, grid, Ay_q_cfc, v)
    u_face = scheme.advective_interpolate(1, True, transport, i, j, k, grid, u)
    return boundary_flux_mask(grid, 1, j) * transport * u_face


def advective_momentum_flux_Wu(i, j, k, grid, scheme, u, w):
    """z-flux of u at (Face, Center, Face)."""
    transport = interp_xf(i, j, k, grid, Az_q_ccf, w)
    u_face = scheme.advective_interpolate(2, True, transport, i, j, k, grid, u)
    return boundary_flux_mask(grid, 2, k) * transport * u_face


def advective_momentum_flux_Uv(i, j, k, grid, scheme, u, v):
    """x-flux of v at (Face, Face, Center)."""
    transport = interp_yf(i, j, k, grid, Ax_q_fcc, u)
    v_face = scheme.advective_interpolate(0, True, transport, i, j, k, grid, v)
    return boundary_flux_mask(grid, 0, i) * transport * v_face


def advective_momentum_flux_Vv(i, j, k, grid, scheme, v):
    """y-flux of v at (Center, Center, Center)."""
    transport = interp_yc(i, j, k, grid, Ay_q_cfc, v)
    v_center = scheme.advective_interpolate(1, False, transport, i, j, k, grid, v)
    return transport * v_center


def advective_momentum_flux_Wv(i, j, k, grid, scheme, v, w):
    """z-flux of v at (Center, Face, Face)."""
    transport = interp_yf(i, j, k, grid, Az_q_ccf, w)
    v_face = scheme.advective_interpolate(2, True, transport, i, j, k, grid, v)
    return boundary_flux_mask(grid, 2, k) * transport * v_face


def div_Uu(i, j, k, grid, scheme, u, v, w):
    """Flux divergence ``∇·(U u)`` at (Face, Center, Center)."""
    return (delta_xf(i, j, k, grid, advective_momentum_flux_Uu, scheme, u)
            + delta_yc(i, j, k, grid, advective_momentum_flux_Vu, scheme, u, v)
            + delta_zc(i, j, k, grid, advective_momentum_flux_Wu, scheme, u, w)) / grid.volume(i, j, k, FCC)


def div_Uv(i, j, k, grid, scheme, u, v, w):
    """Flux divergence ``∇·(U v)`` at (Center, Face, Center)."""
    return (delta_xc(i, j, k, grid, advective_momentum_flux_Uv, scheme, u, v)
            + delta_yf(i, j, k, grid, advective_momentum_flux_Vv, scheme, v)
            + delta_zc(i, j, k, grid, advective_momentum_flux_Wv, scheme, v, w)) / grid.volume(i, j, k, CFC)


__all__ = [
    'boundary_flux_mask',
    'advective_tracer_flux_x', 'advective_tracer_flux_y', 'advective_tracer_flux_z',
    'div_Uc', 'tracer_tendency',
    'advective_momentum_flux_Uu', 'advective_momentum_flux_Vu', 'advective_momentum_flux_Wu',
    'advective_momentum_flux_Uv', 'advective_momentum_flux_Vv', 'advective_momentum_flux_Wv',
    'div_Uu', 'div_Uv',
]
