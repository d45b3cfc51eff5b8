"""
Split-explicit free surface.

The barotropic (depth-integrated) mode is sub-cycled with a short time step
τ = Δt / M while the baroclinic velocities take one long step:

    ηᵐ⁺¹ = ηᵐ - τ δ(Uᵐ) / Az
    Uᵐ⁺¹ = Uᵐ + τ (G_U - g AxH ∂x ηᵐ⁺¹)

with the slow forcing ``G_U = (Û* - Uⁿ) / Δt``. The new displacement is the
weighted average ``η̄ = Σ aₘ ηᵐ`` and the transport used to correct the 3D
velocities is the secondary average ``Ũ = Σ bₗ Uˡ`` with
``bₗ = (1/M) Σ_{m>l} aₘ``. This pairing satisfies the barotropic continuity
equation ``Az (η̄ - ηⁿ) / Δt + δ(Ũ) = 0`` exactly.
"""

import math
from typing import Callable, Optional, Union

import numpy as np
from loguru import logger

from ...constants import GRAVITATIONAL_ACCELERATION
from ...errors import ConfigurationError
from .barotropic import (
    barotropic_transport, correct_velocities, set_surface, surface_gradient,
    surface_interior, transport_divergence,
)
from .base import AbstractFreeSurface


DEFAULT_CFL = 0.7


def constant_averaging_kernel(tau):
    return np.ones_like(tau)


def final_averaging_kernel(tau):
    return np.where(tau >= 1.0, 1.0, 0.0)


def cosine_averaging_kernel(tau):
    """1 + cos(2π(τ - 1)) over the second half of the window, zero before."""
    return np.where(tau >= 0.5, 1.0 + np.cos(2 * np.pi * (tau - 1.0)), 0.0)


AVERAGING_KERNELS = {
    "constant": constant_averaging_kernel,
    "final": final_averaging_kernel,
    "cosine": cosine_averaging_kernel,
}


def averaging_weights(substeps: int, kernel: Callable):
    """Primary weights ``a`` (m = 1..M) and secondary weights ``b`` (l = 0..M-1).

    ``a`` sums to one, ``b`` to the first moment ``Σ m aₘ / M``.
    """
    tau = np.arange(1, substeps + 1) / substeps
    a = np.asarray(kernel(tau), dtype=np.float64) * np.ones(substeps)
    total = a.sum()
    if not np.isfinite(total) or total <= 0:
        raise ConfigurationError("averaging kernel weights must have a positive sum")
    a = a / total
    # b[l] = (1/M) Σ_{m > l} a[m], with a indexed from m = 1
    tail = np.cumsum(a[::-1])[::-1]
    b = tail / substeps
    return a, b


class SplitExplicitFreeSurface(AbstractFreeSurface):
    """Split-explicit free surface.

    Parameters
    ----------
    substeps : int, optional
        Number of barotropic substeps per baroclinic step.
    cfl : float, optional
        Barotropic CFL number; the number of substeps is then chosen each
        step from the gravity wave speed. Mutually exclusive with
        ``substeps``. Defaults to 0.7 when neither is given.
    averaging_kernel : {"constant", "final", "cosine"} or callable
        Weight as a function of the normalized substep time τ in (0, 1].
    gravitational_acceleration : float
    """

    def __init__(self, substeps: Optional[int] = None, cfl: Optional[float] = None,
                 averaging_kernel: Union[str, Callable] = "cosine",
                 gravitational_acceleration: float = GRAVITATIONAL_ACCELERATION):
        super().__init__(gravitational_acceleration)

        if substeps is not None and cfl is not None:
            raise ConfigurationError("give either substeps or cfl, not both")
        if substeps is not None and (int(substeps) != substeps or substeps < 1):
            raise ConfigurationError(f"substeps must be a positive integer, got {substeps}")
        if cfl is not None and not cfl > 0:
            raise ConfigurationError(f"cfl must be positive, got {cfl}")
        if substeps is None and cfl is None:
            cfl = DEFAULT_CFL

        if isinstance(averaging_kernel, str):
            if averaging_kernel not in AVERAGING_KERNELS:
                raise ConfigurationError(
                    f"averaging_kernel must be one of {sorted(AVERAGING_KERNELS)} or a callable, "
                    f"got {averaging_kernel!r}")
            kernel = AVERAGING_KERNELS[averaging_kernel]
        elif callable(averaging_kernel):
            kernel = averaging_kernel
        else:
            raise ConfigurationError(f"averaging_kernel must be a string or callable, got {averaging_kernel!r}")

        self.substeps = None if substeps is None else int(substeps)
        self.cfl = cfl
        self.averaging_kernel = kernel
        self.U = None
        self.V = None

        if self.substeps is not None:
            # Validate the kernel eagerly
            averaging_weights(self.substeps, kernel)

    def _materialize_solver(self, grid):
        self.wave_speed = math.sqrt(self.gravitational_acceleration * self.geometry.depth)
        self.min_spacing = min(grid.min_spacing(0), grid.min_spacing(1))

    def number_of_substeps(self, dt: float) -> int:
        if self.substeps is not None:
            return self.substeps
        substep = self.cfl * self.min_spacing / self.wave_speed
        return max(1, math.ceil(dt / substep))

    def prepare(self, u, v):
        """Record the barotropic transport at the start of the step."""
        self._check_materialized()
        self.U, self.V = barotropic_transport(self.geometry, u, v)

    def step(self, u, v, dt: float):
        self._check_materialized()
        g = self.gravitational_acceleration
        geometry = self.geometry
        self._store_previous()

        U_star, V_star = barotropic_transport(geometry, u, v)
        if self.U is None:
            self.U, self.V = U_star, V_star

        M = self.number_of_substeps(dt)
        a, b = averaging_weights(M, self.averaging_kernel)
        tau = dt / M

        forcing_U = (U_star - self.U) / dt
        forcing_V = (V_star - self.V) / dt

        eta = surface_interior(self.eta) * 1.0
        U, V = self.U, self.V
        eta_mean = 0.0 * eta
        U_mean = 0.0 * U
        V_mean = 0.0 * V

        for m in range(M):
            U_mean = U_mean + b[m] * U
            V_mean = V_mean + b[m] * V

            eta = eta - tau * transport_divergence(U, V) / geometry.Az
            gx, gy = surface_gradient(geometry, eta)
            U = U + tau * (forcing_U - g * geometry.AxH * gx)
            V = V + tau * (forcing_V - g * geometry.AyH * gy)

            eta_mean = eta_mean + a[m] * eta

        set_surface(self.eta, eta_mean)

        # Depth-uniform correction so that the transport equals Ũ
        column_area_x = geometry.AxH + (geometry.mask_x == 0) * 1.0
        column_area_y = geometry.AyH + (geometry.mask_y == 0) * 1.0
        correct_velocities(u, v,
                           (U_mean - U_star) / column_area_x,
                           (V_mean - V_star) / column_area_y)

        self.U, self.V = U_mean, V_mean
        logger.debug(f"SplitExplicitFreeSurface: {M} substeps of {tau:.3g} s")
        return self.eta

    def __repr__(self):
        n = f"substeps={self.substeps}" if self.substeps is not None else f"cfl={self.cfl}"
        return f"SplitExplicitFreeSurface({n}, g={self.gravitational_acceleration})"


__all__ = [
    'SplitExplicitFreeSurface', 'averaging_weights', 'AVERAGING_KERNELS',
    'constant_averaging_kernel', 'final_averaging_kernel', 'cosine_averaging_kernel',
]
