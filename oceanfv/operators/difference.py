"""
Differences and derivatives on the staggered grid.

``delta_xf`` differences centers onto x-faces: ``f[i] - f[i-1]``.
``delta_xc`` differences faces onto x-centers: ``f[i+1] - f[i]``.
Derivatives divide by the spacing at the destination location.
"""

from ..grid.locations import Center, Face
from .evaluation import value


def delta_xf(i, j, k, grid, f, *args):
    return value(f, i, j, k, grid, *args) - value(f, i - 1, j, k, grid, *args)


def delta_xc(i, j, k, grid, f, *args):
    return value(f, i + 1, j, k, grid, *args) - value(f, i, j, k, grid, *args)


def delta_yf(i, j, k, grid, f, *args):
    return value(f, i, j, k, grid, *args) - value(f, i, j - 1, k, grid, *args)


def delta_yc(i, j, k, grid, f, *args):
    return value(f, i, j + 1, k, grid, *args) - value(f, i, j, k, grid, *args)


def delta_zf(i, j, k, grid, f, *args):
    return value(f, i, j, k, grid, *args) - value(f, i, j, k - 1, grid, *args)


def delta_zc(i, j, k, grid, f, *args):
    return value(f, i, j, k + 1, grid, *args) - value(f, i, j, k, grid, *args)


def ddx_f(i, j, k, grid, f, *args):
    return delta_xf(i, j, k, grid, f, *args) / grid.dx(i, Face)


def ddx_c(i, j, k, grid, f, *args):
    return delta_xc(i, j, k, grid, f, *args) / grid.dx(i, Center)


def ddy_f(i, j, k, grid, f, *args):
    return delta_yf(i, j, k, grid, f, *args) / grid.dy(j, Face)


def ddy_c(i, j, k, grid, f, *args):
    return delta_yc(i, j, k, grid, f, *args) / grid.dy(j, Center)


def ddz_f(i, j, k, grid, f, *args):
    return delta_zf(i, j, k, grid, f, *args) / grid.dz(k, Face)


def ddz_c(i, j, k, grid, f, *args):
    return delta_zc(i, j, k, grid, f, *args) / grid.dz(k, Center)


__all__ = [
    'delta_xf', 'delta_xc', 'delta_yf', 'delta_yc', 'delta_zf', 'delta_zc',
    'ddx_f', 'ddx_c', 'ddy_f', 'ddy_c', 'ddz_f', 'ddz_c',
]
