"""
Metric-weighted quantities: a field multiplied by a length or area at the
field's own location. Suffixes name the location, e.g. ``fcc`` for
(Face, Center, Center).
"""

from ..grid.locations import Center, Face, FCC, CFC, CCF


def Ax_q_fcc(i, j, k, grid, u):
    return grid.area_x(i, j, k, FCC) * u[i, j, k]


def Ay_q_cfc(i, j, k, grid, v):
    return grid.area_y(i, j, k, CFC) * v[i, j, k]


def Az_q_ccf(i, j, k, grid, w):
    return grid.area_z(i, j, k, CCF) * w[i, j, k]


def dx_q_fcc(i, j, k, grid, u):
    return grid.dx(i, Face) * u[i, j, k]


def dx_q_cfc(i, j, k, grid, v):
    return grid.dx(i, Center) * v[i, j, k]


def dy_q_fcc(i, j, k, grid, u):
    return grid.dy(j, Center) * u[i, j, k]


def dy_q_cfc(i, j, k, grid, v):
    return grid.dy(j, Face) * v[i, j, k]


__all__ = ['Ax_q_fcc', 'Ay_q_cfc', 'Az_q_ccf', 'dx_q_fcc', 'dx_q_cfc', 'dy_q_fcc', 'dy_q_cfc']
