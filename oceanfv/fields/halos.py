"""
Halo filling for periodic and bounded topologies.

Every axis is filled with one gather: for each array position a source
position and a sign are precomputed, then ``data[src] * sign`` replaces the
whole array. Interior positions map onto themselves.

Bounded axes:
    - Center: even reflection about the wall (zero normal gradient)
    - Face: odd reflection about the wall (impenetrable); wall faces are zero
"""

from functools import lru_cache

import numpy as np

from ..architectures.backends import is_jax_array
from ..constants import PERIODIC
from ..grid.locations import Center


@lru_cache(maxsize=None)
def _halo_index_map(N: int, H: int, topology: str, loc_name: str):
    """Source positions and signs for one axis (cached, host arrays)."""
    if loc_name == "None":
        return np.zeros(1, dtype=np.int64), np.ones(1)

    m = np.arange(-H, N + H)

    if topology == PERIODIC:
        src = m % N
        sign = np.ones(len(m))

    elif loc_name == Center.__name__:
        t = m % (2 * N)
        src = np.where(t < N, t, 2 * N - 1 - t)
        sign = np.ones(len(m))

    else:
        t = m % (2 * N)
        src = np.where(t <= N, t, 2 * N - t)
        sign = np.where(t <= N, 1.0, -1.0)
        sign[(t == 0) | (t == N)] = 0.0

    src.setflags(write=False)
    sign.setflags(write=False)
    return src + H, sign


def _identity_map(length: int):
    return np.arange(length), np.ones(length)


def fill_halo_regions(*fields, axes=(0, 1, 2)):
    """Fill the halos of one or more fields in place.

    Parameters
    ----------
    *fields : Field
        Fields to fill.
    axes : tuple of int
        Axes to fill. Axes left out keep their current halo values; this is
        how the diagnosed vertical velocity keeps its surface value.
    """
    for field in fields:
        grid = field.grid
        maps = []
        for d in range(3):
            length = field.data.shape[d]
            if d in axes:
                src, sign = _halo_index_map(field.size[d], field.halo[d], grid.topology[d],
                                            "None" if field.location[d] is None
                                            else field.location[d].__name__)
            else:
                src, sign = _identity_map(length)
            maps.append((src, sign))

        (sx, wx), (sy, wy), (sz, wz) = maps
        weights = wx[:, None, None] * wy[None, :, None] * wz[None, None, :]
        filled = field.data[np.ix_(sx, sy, sz)] * weights

        if is_jax_array(field.data):
            field.data = filled
        else:
            field.data[...] = filled

    return fields[0] if len(fields) == 1 else fields


__all__ = ['fill_halo_regions']
