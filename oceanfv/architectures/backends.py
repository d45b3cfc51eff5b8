"""
Execution backends.

Kernels in oceanfv are pure functions of ``(i, j, k, grid, *args)`` that
accept integer index *arrays*. ``launch`` evaluates a kernel over the whole
interior index range of an output field at once, so the same kernel runs on
NumPy arrays (``CPU``) or JAX arrays (``GPU``) without modification.
"""

import dataclasses

import numpy as np

from .jax_config import jax, jnp


class AbstractArchitecture:
    """Base class for execution backends."""

    array_module = np

    def __repr__(self):
        return f"{type(self).__name__}()"

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self).__name__)


class CPU(AbstractArchitecture):
    """NumPy arrays, numba-compiled column kernels."""

    array_module = np


class GPU(AbstractArchitecture):
    """JAX arrays, placed on the default JAX device."""

    array_module = jnp


def is_jax_array(obj) -> bool:
    return isinstance(obj, jax.Array)


def array_module(*arrays):
    """Return ``jnp`` if any argument is a JAX array, else ``np``."""
    for a in arrays:
        if is_jax_array(a):
            return jnp
    return np


def architecture_of(array) -> AbstractArchitecture:
    return GPU() if is_jax_array(array) else CPU()


def on_architecture(arch, obj):
    """Return a copy of ``obj`` with every array moved to ``arch``.

    Recurses into tuples, lists, dicts and dataclasses. Objects that define
    their own ``on_architecture(arch)`` method (grids, fields, lazy
    operations) are delegated to.
    """
    if obj is None or isinstance(obj, (bool, int, float, complex, str, type)):
        return obj

    if isinstance(obj, np.ndarray) or is_jax_array(obj):
        if isinstance(arch, GPU):
            return jnp.array(obj)
        return np.array(obj)

    if hasattr(obj, 'on_architecture') and not isinstance(obj, type):
        return obj.on_architecture(arch)

    if isinstance(obj, tuple) and hasattr(obj, '_fields'):
        return type(obj)(*(on_architecture(arch, o) for o in obj))

    if isinstance(obj, (tuple, list)):
        return type(obj)(on_architecture(arch, o) for o in obj)

    if isinstance(obj, dict):
        return {key: on_architecture(arch, value) for key, value in obj.items()}

    if dataclasses.is_dataclass(obj):
        changes = {f.name: on_architecture(arch, getattr(obj, f.name))
                   for f in dataclasses.fields(obj) if f.init}
        return dataclasses.replace(obj, **changes)

    return obj


def ifelse(condition, a, b):
    """Element-wise select, dispatched on the array types involved."""
    xp = array_module(condition, a, b)
    return xp.where(condition, a, b)


def interior_indices(size, reduced=(False, False, False)):
    """Broadcastable index arrays covering an interior of ``size``.

    Returns ``i`` with shape ``(Nx, 1, 1)``, ``j`` with shape ``(1, Ny, 1)``
    and ``k`` with shape ``(1, 1, Nz)``. Reduced dimensions get a single
    zero index.
    """
    Nx, Ny, Nz = size
    i = np.arange(Nx if not reduced[0] else 1).reshape(-1, 1, 1)
    j = np.arange(Ny if not reduced[1] else 1).reshape(1, -1, 1)
    k = np.arange(Nz if not reduced[2] else 1).reshape(1, 1, -1)
    return i, j, k


def launch(grid, kernel, out, *args):
    """Evaluate ``kernel`` at every interior index of ``out`` and store the result.

    Parameters
    ----------
    grid : RectilinearGrid
        Grid passed through to the kernel.
    kernel : callable
        ``kernel(i, j, k, grid, *args)``; must accept broadcastable integer
        index arrays.
    out : Field
        Destination. Only interior points are written.
    *args
        Extra kernel arguments (fields, schemes, ...).

    Returns
    -------
    Field
        ``out``, for chaining.
    """
    i, j, k = out.interior_indices()
    values = kernel(i, j, k, grid, *args)
    out.set_interior(values)
    return out


__all__ = [
    'AbstractArchitecture', 'CPU', 'GPU',
    'array_module', 'architecture_of', 'is_jax_array',
    'on_architecture', 'ifelse', 'interior_indices', 'launch',
]
