"""
Second-order interpolation between centers and faces.

Naming: ``interp_xf`` interpolates *to* x-faces (from centers),
``interp_xc`` interpolates *to* x-centers (from faces). Face ``i`` sits
between centers ``i-1`` and ``i``.
"""

from .evaluation import value


def interp_xf(i, j, k, grid, f, *args):
    return (value(f, i - 1, j, k, grid, *args) + value(f, i, j, k, grid, *args)) / 2


def interp_xc(i, j, k, grid, f, *args):
    return (value(f, i, j, k, grid, *args) + value(f, i + 1, j, k, grid, *args)) / 2


def interp_yf(i, j, k, grid, f, *args):
    return (value(f, i, j - 1, k, grid, *args) + value(f, i, j, k, grid, *args)) / 2


def interp_yc(i, j, k, grid, f, *args):
    return (value(f, i, j, k, grid, *args) + value(f, i, j + 1, k, grid, *args)) / 2


def interp_zf(i, j, k, grid, f, *args):
    return (value(f, i, j, k - 1, grid, *args) + value(f, i, j, k, grid, *args)) / 2


def interp_zc(i, j, k, grid, f, *args):
    return (value(f, i, j, k, grid, *args) + value(f, i, j, k + 1, grid, *args)) / 2


__all__ = ['interp_xf', 'interp_xc', 'interp_yf', 'interp_yc', 'interp_zf', 'interp_zc']
