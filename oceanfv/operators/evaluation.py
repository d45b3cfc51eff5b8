"""
Uniform evaluation of fields and kernels at (shifted) indices.

Operators accept either something indexable (a field, a conditional view)
or a kernel function ``f(i, j, k, grid, *args)``.
"""


def value(f, i, j, k, grid, *args):
    if callable(f):
        return f(i, j, k, grid, *args)
    return f[i, j, k]


def shifted_value(f, axis, shift, i, j, k, grid, *args):
    """``f`` evaluated ``shift`` points away from ``(i, j, k)`` along ``axis``."""
    if axis == 0:
        return value(f, i + shift, j, k, grid, *args)
    if axis == 1:
        return value(f, i, j + shift, k, grid, *args)
    return value(f, i, j, k + shift, grid, *args)


def axis_index(axis, i, j, k):
    return (i, j, k)[axis]


__all__ = ['value', 'shifted_value', 'axis_index']
