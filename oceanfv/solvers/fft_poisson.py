"""
Spectral solver for the separable 2D free-surface (Helmholtz) operator.

Solves

    cx δx²η + cy δy²η - shift * Az * η = rhs

with constant coefficients on a horizontally uniform grid. Periodic axes
are diagonalized with the FFT, Bounded axes (zero normal flux) with the
orthonormal DCT-II.
"""

import numpy as np
import scipy.fft
from jax.scipy import fft as jax_fft

from ..architectures.backends import is_jax_array
from ..architectures.jax_config import jnp
from ..constants import PERIODIC


def laplacian_eigenvalues(N: int, topology: str) -> np.ndarray:
    """Eigenvalues of the unit-spaced second difference along one axis."""
    m = np.arange(N)
    if topology == PERIODIC:
        return -4 * np.sin(np.pi * m / N) ** 2
    return -4 * np.sin(np.pi * m / (2 * N)) ** 2


class FFTBasedPoissonSolver:
    """Direct solver for constant-coefficient 2D Helmholtz problems.

    Parameters
    ----------
    size : tuple of int
        (Nx, Ny).
    topology : tuple of str
        Horizontal topologies.
    cx, cy : float
        Coefficients of the second differences.
    Az : float
        Cell area multiplying the shift term.
    """

    def __init__(self, size, topology, cx: float, cy: float, Az: float):
        self.size = tuple(size)
        self.topology = tuple(topology)
        self.Az = float(Az)

        ex = laplacian_eigenvalues(self.size[0], self.topology[0])
        ey = laplacian_eigenvalues(self.size[1], self.topology[1])
        self.eigenvalues = cx * ex[:, None] + cy * ey[None, :]

        self.periodic_axes = tuple(d for d in range(2) if self.topology[d] == PERIODIC)
        self.bounded_axes = tuple(d for d in range(2) if self.topology[d] != PERIODIC)

    def _forward(self, x, xp_fft, dct):
        for axis in self.bounded_axes:
            x = dct(x, type=2, axis=axis, norm="ortho")
        if self.periodic_axes:
            x = xp_fft.fftn(x, axes=self.periodic_axes)
        return x

    def _backward(self, x, xp_fft, idct):
        if self.periodic_axes:
            x = xp_fft.ifftn(x, axes=self.periodic_axes)
        x = x.real
        for axis in self.bounded_axes:
            x = idct(x, type=2, axis=axis, norm="ortho")
        return x

    def solve(self, rhs, shift: float = 0.0):
        """Solve for ``η`` given a 2D ``rhs`` of shape ``size``.

        With ``shift == 0`` the constant mode is undetermined and set to zero.
        """
        denominator = self.eigenvalues - shift * self.Az
        singular = denominator == 0
        denominator = np.where(singular, 1.0, denominator)

        if is_jax_array(rhs):
            transformed = self._forward(rhs, jnp.fft, jax_fft.dct)
            transformed = jnp.where(jnp.asarray(singular), 0.0, transformed / jnp.asarray(denominator))
            return self._backward(transformed, jnp.fft, jax_fft.idct)

        transformed = self._forward(np.asarray(rhs), scipy.fft, scipy.fft.dct)
        transformed = np.where(singular, 0.0, transformed / denominator)
        return self._backward(transformed, scipy.fft, scipy.fft.idct)


__all__ = ['FFTBasedPoissonSolver', 'laplacian_eigenvalues']
