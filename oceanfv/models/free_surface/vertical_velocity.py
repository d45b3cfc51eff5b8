"""
Vertical velocity diagnosed from the continuity equation.

    w[k+1] = w[k] - (δx(Ax u) + δy(Ay v)) / Az

integrated from the bottom (w = 0) or, when a surface value is given, down
from the top. On the CPU the column integration is a numba kernel parallel
over columns; JAX arrays use ``jnp.cumsum``.
"""

import numpy as np
from numba import njit, prange

from ...architectures.backends import is_jax_array
from ...architectures.jax_config import jnp
from ...grid.locations import CCF
from ...operators.difference import delta_xc, delta_yc
from ...operators.metrics import Ax_q_fcc, Ay_q_cfc


# =============================================================================
# Numba column kernels
# =============================================================================

@njit(cache=True, parallel=True)
def _integrate_up_numba(tendency: np.ndarray, w_out: np.ndarray) -> None:
    """w_out[:, :, 0] = 0, w_out[:, :, k+1] = w_out[:, :, k] - tendency[:, :, k]."""
    NI, NJ, NK = tendency.shape

    for i in prange(NI):
        for j in range(NJ):
            w_out[i, j, 0] = 0.0
            for k in range(NK):
                w_out[i, j, k + 1] = w_out[i, j, k] - tendency[i, j, k]


@njit(cache=True, parallel=True)
def _integrate_down_numba(tendency: np.ndarray, w_top: np.ndarray, w_out: np.ndarray) -> None:
    """w_out[:, :, NK] = w_top, w_out[:, :, k] = w_out[:, :, k+1] + tendency[:, :, k]."""
    NI, NJ, NK = tendency.shape

    for i in prange(NI):
        for j in range(NJ):
            w_out[i, j, NK] = w_top[i, j]
            for k in range(NK - 1, -1, -1):
                w_out[i, j, k] = w_out[i, j, k + 1] + tendency[i, j, k]


# =============================================================================
# Driver
# =============================================================================

def _horizontal_divergence_over_area(i, j, k, grid, u, v):
    return ((delta_xc(i, j, k, grid, Ax_q_fcc, u) + delta_yc(i, j, k, grid, Ay_q_cfc, v))
            / grid.area_z(i, j, k, CCF))


def compute_w_from_continuity(w, u, v, surface_value=None):
    """Diagnose ``w`` from ``u`` and ``v`` in place.

    Parameters
    ----------
    w : Field
        Vertical velocity at (Center, Center, Face). Levels 0..Nz are
        written; halos are filled horizontally only, so the surface value at
        level Nz is kept.
    u, v : Field
        Horizontal velocities with filled halos.
    surface_value : array (Nx, Ny), optional
        Integrate down from this surface value instead of up from w = 0 at
        the bottom.

    Returns
    -------
    Field
        ``w``.
    """
    grid = w.grid
    Nx, Ny, Nz = grid.size
    Hx, Hy, Hz = w.halo

    i = np.arange(Nx).reshape(-1, 1, 1)
    j = np.arange(Ny).reshape(1, -1, 1)
    k = np.arange(Nz).reshape(1, 1, -1)
    tendency = _horizontal_divergence_over_area(i, j, k, grid, u, v)

    if is_jax_array(w.data):
        tendency = jnp.asarray(tendency)
        if surface_value is None:
            columns = jnp.concatenate([jnp.zeros((Nx, Ny, 1)), -jnp.cumsum(tendency, axis=2)], axis=2)
        else:
            from_top = jnp.cumsum(tendency[:, :, ::-1], axis=2)[:, :, ::-1]
            top = jnp.asarray(surface_value)[:, :, None]
            columns = jnp.concatenate([top + from_top, top], axis=2)
        w.data = w.data.at[Hx:Hx + Nx, Hy:Hy + Ny, Hz:Hz + Nz + 1].set(columns)
    else:
        tendency = np.ascontiguousarray(np.asarray(tendency, dtype=np.float64))
        columns = np.empty((Nx, Ny, Nz + 1))
        if surface_value is None:
            _integrate_up_numba(tendency, columns)
        else:
            top = np.ascontiguousarray(np.asarray(surface_value, dtype=np.float64))
            _integrate_down_numba(tendency, top, columns)
        w.data[Hx:Hx + Nx, Hy:Hy + Ny, Hz:Hz + Nz + 1] = columns

    w.fill_halo_regions(axes=(0, 1))
    return w


__all__ = ['compute_w_from_continuity']
