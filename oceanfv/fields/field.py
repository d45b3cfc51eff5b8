"""
Fields: halo-augmented 3D arrays at a staggered grid location.
"""

from typing import Optional, Tuple

import numpy as np

from ..architectures.backends import (
    array_module, interior_indices, is_jax_array, on_architecture,
)
from ..grid.locations import (
    Center, Face, CCC, FCC, CFC, CCF, location_name, validate_location,
)
from ..errors import SizeMismatchError
from .halos import fill_halo_regions


class Field:
    """A 3D array of values at one staggered location, with halos.

    Parameters
    ----------
    location : tuple
        ``(LX, LY, LZ)`` with entries ``Center``, ``Face`` or ``None``
        (``None`` marks a reduced dimension of size 1 without halo).
    grid : RectilinearGrid
        The grid the field lives on.
    data : array, optional
        Halo-augmented storage. Allocated with zeros when omitted.
    name : str, optional
        Label used in logs and reprs.

    Notes
    -----
    ``field[i, j, k]`` takes *logical* indices: the interior is
    ``0 <= i < Nx`` and halo points are reached with negative indices or
    indices ``>= Nx``. Index arguments may be integer arrays.
    """

    def __init__(self, location, grid, data=None, name: Optional[str] = None):
        self.location = validate_location(location)
        self.grid = grid
        self.name = name

        self.size = tuple(1 if loc is None else grid.size[d]
                          for d, loc in enumerate(self.location))
        self.halo = tuple(0 if loc is None else grid.halo[d]
                          for d, loc in enumerate(self.location))
        self._reduced = tuple(loc is None for loc in self.location)

        shape = tuple(n + 2 * h for n, h in zip(self.size, self.halo))

        if data is None:
            xp = grid.architecture.array_module
            data = xp.zeros(shape, dtype=np.float64)
        elif tuple(data.shape) != shape:
            raise SizeMismatchError(f"data shape {tuple(data.shape)} does not match "
                                    f"halo-augmented shape {shape}")
        self.data = data

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def _offset(self, idx):
        i, j, k = idx
        Hx, Hy, Hz = self.halo
        if self._reduced[0]:
            i = 0
        if self._reduced[1]:
            j = 0
        if self._reduced[2]:
            k = 0
        return i + Hx, j + Hy, k + Hz

    def __getitem__(self, idx):
        return self.data[self._offset(idx)]

    def __setitem__(self, idx, value):
        position = self._offset(idx)
        if is_jax_array(self.data):
            self.data = self.data.at[position].set(value)
        else:
            self.data[position] = value

    @property
    def interior_slices(self) -> Tuple[slice, slice, slice]:
        return tuple(slice(h, h + n) for n, h in zip(self.size, self.halo))

    @property
    def interior(self):
        """View (NumPy) or copy (JAX) of the interior points."""
        return self.data[self.interior_slices]

    def interior_indices(self):
        return interior_indices(self.size, self._reduced)

    def set_interior(self, values):
        """Overwrite interior points, broadcasting ``values`` to the interior shape."""
        xp = array_module(self.data)
        values = xp.broadcast_to(xp.asarray(values, dtype=self.data.dtype), self.size)
        if is_jax_array(self.data):
            self.data = self.data.at[self.interior_slices].set(values)
        else:
            self.data[self.interior_slices] = values
        return self

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def nodes(self):
        return self.grid.nodes(self.location)

    def set(self, value):
        """Set interior values and fill halos.

        ``value`` may be a scalar, an array of the interior shape, another
        field, a lazy operation with ``__getitem__`` (e.g. a
        ``ConditionalOperation``), or a function of coordinates: ``f(x, y, z)``
        (``f(x, y)`` when the vertical dimension is reduced).
        """
        if isinstance(value, Field):
            values = value.interior
        elif hasattr(value, 'operand') and hasattr(value, '__getitem__'):
            i, j, k = self.interior_indices()
            values = value[i, j, k]
        elif callable(value):
            x, y, z = self.nodes()
            values = value(x, y) if self._reduced[2] else value(x, y, z)
        else:
            values = value

        if self._reduced[2] and np.ndim(values) == 2:
            values = values[:, :, None]

        try:
            compatible = np.broadcast_shapes(np.shape(values), self.size) == self.size
        except ValueError:
            compatible = False
        if not compatible:
            raise SizeMismatchError(f"cannot set {self!r} from values of shape {np.shape(values)}")

        self.set_interior(values)
        fill_halo_regions(self)
        return self

    def similar(self, name: Optional[str] = None):
        """A zero field with the same location and grid."""
        return Field(self.location, self.grid, name=name)

    def copy(self):
        xp = array_module(self.data)
        return Field(self.location, self.grid, data=xp.array(self.data), name=self.name)

    def fill_halo_regions(self, axes=(0, 1, 2)):
        return fill_halo_regions(self, axes=axes)

    def on_architecture(self, arch):
        return Field(self.location, on_architecture(arch, self.grid),
                     data=on_architecture(arch, self.data), name=self.name)

    def __repr__(self):
        loc = ", ".join(location_name(l) for l in self.location)
        Nx, Ny, Nz = self.size
        label = f" '{self.name}'" if self.name else ""
        return f"{Nx}×{Ny}×{Nz} Field{label} at ({loc}) on {self.grid.architecture!r}"


def CenterField(grid, **kwargs):
    return Field(CCC, grid, **kwargs)


def XFaceField(grid, **kwargs):
    return Field(FCC, grid, **kwargs)


def YFaceField(grid, **kwargs):
    return Field(CFC, grid, **kwargs)


def ZFaceField(grid, **kwargs):
    return Field(CCF, grid, **kwargs)


def SurfaceField(grid, location=(Center, Center), **kwargs):
    """A single-level field, e.g. the free-surface displacement."""
    return Field((location[0], location[1], None), grid, **kwargs)


class OneField:
    """Lazy field of ones, used to count points under a condition."""

    def __init__(self, location, grid):
        self.location = validate_location(location)
        self.grid = grid
        self.size = tuple(1 if loc is None else grid.size[d]
                          for d, loc in enumerate(self.location))

    def __getitem__(self, idx):
        i, j, k = idx
        shape = np.broadcast_shapes(np.shape(i), np.shape(j), np.shape(k))
        return np.ones(shape, dtype=np.int64)

    def on_architecture(self, arch):
        return OneField(self.location, on_architecture(arch, self.grid))


__all__ = [
    'Field', 'CenterField', 'XFaceField', 'YFaceField', 'ZFaceField',
    'SurfaceField', 'OneField',
]
