"""
Rectilinear grid metrics provider.

A structured grid with (possibly stretched) coordinates along each axis and
a halo of ghost cells on every side. Metrics are precomputed on the full
halo-extended index range so that stencil kernels can query them at any
index they are allowed to touch.

Index convention (per axis, N cells, halo H):
    - center i in [-H, N+H) sits between faces i and i+1
    - face i sits on the left of center i
    - array position = logical index + H
"""

import copy
from typing import Sequence, Tuple

import numpy as np

from ..architectures.backends import CPU, on_architecture
from ..constants import BOUNDED, DEFAULT_HALO, PERIODIC, TOPOLOGIES
from ..errors import ConfigurationError
from .locations import Center, Face


def _interior_faces(N, coordinate, default_extent, name):
    """Face coordinates of the N interior cells (N+1 values)."""
    if coordinate is None:
        if default_extent is None:
            raise ConfigurationError(f"Either `extent` or `{name}` must be given")
        return np.linspace(default_extent[0], default_extent[1], N + 1)

    coordinate = np.asarray(coordinate, dtype=np.float64)

    if coordinate.shape == (2,):
        return np.linspace(coordinate[0], coordinate[1], N + 1)

    if coordinate.shape != (N + 1,):
        raise ConfigurationError(
            f"`{name}` must be a (start, end) pair or {N + 1} face coordinates, "
            f"got shape {coordinate.shape}")

    if np.any(np.diff(coordinate) <= 0):
        raise ConfigurationError(f"`{name}` face coordinates must be strictly increasing")

    return coordinate


def _extended_axis(faces, H, topology):
    """Extend interior faces into the halo.

    Returns
    -------
    faces_ext : ndarray, shape (N + 2H + 1,)
    centers_ext : ndarray, shape (N + 2H,)
    dc : ndarray, shape (N + 2H,)
        Cell widths (spacing at centers).
    df : ndarray, shape (N + 2H,)
        Distance between adjacent centers (spacing at faces).
    """
    N = len(faces) - 1
    widths = np.diff(faces)

    m = np.arange(-H, N + H)
    if topology == PERIODIC:
        dc = widths[m % N]
    else:
        dc = widths[np.clip(m, 0, N - 1)]

    faces_ext = np.empty(N + 2 * H + 1)
    faces_ext[0] = faces[0] - dc[:H].sum()
    faces_ext[1:] = faces_ext[0] + np.cumsum(dc)
    # Keep interior faces bit-identical to the input
    faces_ext[H:H + N + 1] = faces

    centers_ext = 0.5 * (faces_ext[:-1] + faces_ext[1:])

    df = np.empty(N + 2 * H)
    df[1:] = np.diff(centers_ext)
    df[0] = dc[0]

    return faces_ext, centers_ext, dc, df


class RectilinearGrid:
    """Structured rectilinear grid with per-axis topology.

    Parameters
    ----------
    architecture : CPU or GPU, optional
        Where metric arrays live. Default CPU.
    size : tuple of int
        Number of interior cells (Nx, Ny, Nz).
    extent : tuple of float, optional
        Domain lengths (Lx, Ly, Lz) for a uniform grid spanning
        [0, Lx] x [0, Ly] x [-Lz, 0].
    x, y, z : array-like, optional
        Either a (start, end) pair or N+1 face coordinates (stretched).
        Override ``extent`` along that axis.
    halo : tuple of int
        Halo width (Hx, Hy, Hz); each must be >= 1.
    topology : tuple of str
        "Periodic" or "Bounded" per axis.
    """

    def __init__(self, architecture=None, size=(16, 16, 4), extent=None,
                 x=None, y=None, z=None, halo=DEFAULT_HALO,
                 topology=(PERIODIC, PERIODIC, BOUNDED)):

        size = tuple(int(n) for n in size)
        halo = tuple(int(h) for h in halo)
        topology = tuple(topology)

        if len(size) != 3 or any(n < 1 for n in size):
            raise ConfigurationError(f"size must be 3 positive integers, got {size}")
        if len(halo) != 3 or any(h < 1 for h in halo):
            raise ConfigurationError(f"halo must be 3 integers >= 1, got {halo}")
        if len(topology) != 3 or any(t not in TOPOLOGIES for t in topology):
            raise ConfigurationError(f"topology entries must be one of {TOPOLOGIES}, got {topology}")

        self.architecture = architecture if architecture is not None else CPU()
        self.size = size
        self.halo = halo
        self.topology = topology

        if extent is not None:
            Lx, Ly, Lz = (float(L) for L in extent)
            defaults = ((0.0, Lx), (0.0, Ly), (-Lz, 0.0))
        else:
            defaults = (None, None, None)

        self._faces = []
        self._centers = []
        self._spacings = []
        self._interior_widths = []

        for d, (coord, name) in enumerate(zip((x, y, z), ('x', 'y', 'z'))):
            faces = _interior_faces(size[d], coord, defaults[d], name)
            faces_ext, centers_ext, dc, df = _extended_axis(faces, halo[d], topology[d])
            self._interior_widths.append(np.diff(faces))
            self._faces.append(faces_ext)
            self._centers.append(centers_ext)
            self._spacings.append({Center: dc, Face: df})

        self._move_metrics(self.architecture)

    # ------------------------------------------------------------------
    # Basic properties
    # ------------------------------------------------------------------

    @property
    def Nx(self): return self.size[0]

    @property
    def Ny(self): return self.size[1]

    @property
    def Nz(self): return self.size[2]

    @property
    def Hx(self): return self.halo[0]

    @property
    def Hy(self): return self.halo[1]

    @property
    def Hz(self): return self.halo[2]

    @property
    def Lx(self): return float(self._interior_widths[0].sum())

    @property
    def Ly(self): return float(self._interior_widths[1].sum())

    @property
    def Lz(self): return float(self._interior_widths[2].sum())

    def is_uniform(self, axis: int) -> bool:
        widths = self._interior_widths[axis]
        return bool(np.allclose(widths, widths[0], rtol=1e-12, atol=0.0))

    @property
    def has_uniform_horizontal_spacing(self) -> bool:
        return self.is_uniform(0) and self.is_uniform(1)

    def min_spacing(self, axis: int) -> float:
        return float(self._interior_widths[axis].min())

    # ------------------------------------------------------------------
    # Metrics (accept integer or integer-array indices)
    # ------------------------------------------------------------------

    def dx(self, i, loc=Center):
        return self._spacings[0][loc][i + self.Hx]

    def dy(self, j, loc=Center):
        return self._spacings[1][loc][j + self.Hy]

    def dz(self, k, loc=Center):
        return self._spacings[2][loc][k + self.Hz]

    def area_x(self, i, j, k, loc):
        return self.dy(j, loc[1]) * self.dz(k, loc[2] or Center)

    def area_y(self, i, j, k, loc):
        return self.dx(i, loc[0]) * self.dz(k, loc[2] or Center)

    def area_z(self, i, j, k, loc):
        return self.dx(i, loc[0]) * self.dy(j, loc[1])

    def volume(self, i, j, k, loc):
        return self.dx(i, loc[0]) * self.dy(j, loc[1]) * self.dz(k, loc[2] or Center)

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    def node_coordinates(self, axis: int, loc) -> np.ndarray:
        """Interior node coordinates along one axis (host array)."""
        N, H = self.size[axis], self.halo[axis]
        if loc is None:
            return np.zeros(1)
        source = self._host_centers[axis] if loc is Center else self._host_faces[axis]
        return np.asarray(source[H:H + N])

    def nodes(self, location) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Broadcastable interior coordinates at a staggered location."""
        x = self.node_coordinates(0, location[0]).reshape(-1, 1, 1)
        y = self.node_coordinates(1, location[1]).reshape(1, -1, 1)
        z = self.node_coordinates(2, location[2]).reshape(1, 1, -1)
        return x, y, z

    def interior_spacing(self, axis: int, loc=Center) -> np.ndarray:
        """Host copy of the interior spacing along one axis."""
        N, H = self.size[axis], self.halo[axis]
        return np.asarray(self._host_spacings[axis][loc][H:H + N])

    # ------------------------------------------------------------------
    # Architecture
    # ------------------------------------------------------------------

    def _move_metrics(self, arch):
        self._host_faces = self._faces
        self._host_centers = self._centers
        self._host_spacings = self._spacings
        self._faces = [on_architecture(arch, f) for f in self._faces]
        self._centers = [on_architecture(arch, c) for c in self._centers]
        self._spacings = [{Center: on_architecture(arch, s[Center]),
                           Face: on_architecture(arch, s[Face])} for s in self._spacings]

    def on_architecture(self, arch):
        new = copy.copy(self)
        new.architecture = arch
        new._faces = new._host_faces
        new._centers = new._host_centers
        new._spacings = new._host_spacings
        new._move_metrics(arch)
        return new

    def __repr__(self):
        Nx, Ny, Nz = self.size
        Hx, Hy, Hz = self.halo
        return (f"{Nx}×{Ny}×{Nz} RectilinearGrid{self.topology} on {self.architecture!r} "
                f"with {Hx}×{Hy}×{Hz} halo")


def face_wall_mask(grid, axis: int) -> np.ndarray:
    """1 at interior faces along ``axis``, 0 at bounded walls (faces 0..N-1)."""
    N = grid.size[axis]
    mask = np.ones(N)
    if grid.topology[axis] == BOUNDED:
        mask[0] = 0.0
    return mask


__all__ = ['RectilinearGrid', 'face_wall_mask']
