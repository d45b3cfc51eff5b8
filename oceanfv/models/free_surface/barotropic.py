"""
Barotropic (depth-integrated) quantities shared by the free-surface solvers.

All 2D arrays have the interior horizontal shape (Nx, Ny). Face arrays use
the same convention as fields: entry ``i`` belongs to the face on the left
of cell ``i``. Along Bounded axes the wall face 0 (which also stands for
face N) carries zero coefficients, so rolling neighbours wrap harmlessly
and the same formulas serve periodic and bounded axes.
"""

from typing import NamedTuple

import numpy as np

from ...architectures.backends import array_module, on_architecture
from ...grid.locations import Center, Face
from ...grid.rectilinear_grid import face_wall_mask


class BarotropicGeometry(NamedTuple):
    """Depth-integrated metrics of a flat-bottomed grid.

    Attributes
    ----------
    Az : array (Nx, Ny)
        Horizontal cell areas.
    dx_f, dy_f : array (Nx, 1), (1, Ny)
        Distances between adjacent centers (spacing at faces).
    AxH, AyH : array (Nx, Ny)
        Depth-integrated face areas, zero on Bounded walls.
    cx, cy : array (Nx, Ny)
        ``AxH / dx_f`` and ``AyH / dy_f``: free-surface operator coefficients.
    mask_x, mask_y : array (Nx, 1), (1, Ny)
        Zero on Bounded walls.
    dyz_u, dxz_v : array (1, Ny, Nz), (Nx, 1, Nz)
        Face areas of u and v cells, for vertical integration.
    depth : float
    """
    Az: np.ndarray
    dx_f: np.ndarray
    dy_f: np.ndarray
    AxH: np.ndarray
    AyH: np.ndarray
    cx: np.ndarray
    cy: np.ndarray
    mask_x: np.ndarray
    mask_y: np.ndarray
    dyz_u: np.ndarray
    dxz_v: np.ndarray
    depth: float


def barotropic_geometry(grid) -> BarotropicGeometry:
    """Build the barotropic metrics of ``grid`` on its architecture."""
    dx_c = grid.interior_spacing(0, Center)[:, None]
    dy_c = grid.interior_spacing(1, Center)[None, :]
    dx_f = grid.interior_spacing(0, Face)[:, None]
    dy_f = grid.interior_spacing(1, Face)[None, :]
    dz = grid.interior_spacing(2, Center)
    depth = float(dz.sum())

    mask_x = face_wall_mask(grid, 0)[:, None]
    mask_y = face_wall_mask(grid, 1)[None, :]

    AxH = dy_c * depth * mask_x * np.ones_like(dx_c)
    AyH = dx_c * depth * mask_y * np.ones_like(dy_c)

    geometry = BarotropicGeometry(
        Az=dx_c * dy_c,
        dx_f=dx_f,
        dy_f=dy_f,
        AxH=AxH,
        AyH=AyH,
        cx=AxH / dx_f,
        cy=AyH / dy_f,
        mask_x=mask_x,
        mask_y=mask_y,
        dyz_u=dy_c[:, :, None] * dz[None, None, :],
        dxz_v=dx_c[:, :, None] * dz[None, None, :],
        depth=depth,
    )
    return on_architecture(grid.architecture, geometry)


def barotropic_transport(geometry: BarotropicGeometry, u, v):
    """Depth-integrated volume transports (U, V) from 3D velocity fields."""
    U = (u.interior * geometry.dyz_u).sum(axis=2) * geometry.mask_x
    V = (v.interior * geometry.dxz_v).sum(axis=2) * geometry.mask_y
    return U, V


def transport_divergence(U, V):
    """δx U + δy V at cell centers."""
    xp = array_module(U, V)
    return (xp.roll(U, -1, axis=0) - U) + (xp.roll(V, -1, axis=1) - V)


def free_surface_laplacian(eta, cx, cy):
    """δx(cx δx η) + δy(cy δy η)."""
    xp = array_module(eta, cx, cy)
    flux_x = cx * (eta - xp.roll(eta, 1, axis=0))
    flux_y = cy * (eta - xp.roll(eta, 1, axis=1))
    return (xp.roll(flux_x, -1, axis=0) - flux_x) + (xp.roll(flux_y, -1, axis=1) - flux_y)


def free_surface_operator(eta, cx, cy, Az, shift):
    """L(η) - shift * Az * η."""
    return free_surface_laplacian(eta, cx, cy) - shift * Az * eta


def negative_free_surface_operator(eta, cx, cy, Az, shift):
    """The symmetric positive definite operator -(L(η) - shift * Az * η)."""
    return -free_surface_operator(eta, cx, cy, Az, shift)


def free_surface_diagonal(cx, cy, Az, shift):
    """Diagonal of ``negative_free_surface_operator``."""
    xp = array_module(cx, cy)
    return cx + xp.roll(cx, -1, axis=0) + cy + xp.roll(cy, -1, axis=1) + shift * Az


def surface_gradient(geometry: BarotropicGeometry, eta):
    """(∂x η, ∂y η) at u and v faces, zero on Bounded walls."""
    xp = array_module(eta)
    gx = geometry.mask_x * (eta - xp.roll(eta, 1, axis=0)) / geometry.dx_f
    gy = geometry.mask_y * (eta - xp.roll(eta, 1, axis=1)) / geometry.dy_f
    return gx, gy


def surface_interior(eta_field):
    """The (Nx, Ny) interior of a surface field."""
    return eta_field.interior[:, :, 0]


def set_surface(eta_field, values):
    eta_field.set_interior(values[:, :, None])
    eta_field.fill_halo_regions()
    return eta_field


def correct_velocities(u, v, du, dv):
    """Add depth-uniform increments ``du``, ``dv`` (shape (Nx, Ny)) to u and v."""
    u.set_interior(u.interior + du[:, :, None])
    v.set_interior(v.interior + dv[:, :, None])
    u.fill_halo_regions()
    v.fill_halo_regions()


__all__ = [
    'BarotropicGeometry', 'barotropic_geometry', 'barotropic_transport',
    'transport_divergence', 'free_surface_laplacian', 'free_surface_operator',
    'negative_free_surface_operator', 'free_surface_diagonal', 'surface_gradient',
    'surface_interior', 'set_surface', 'correct_velocities',
]
