"""
Explicit free surface (forward-backward).

The velocities are corrected with the gradient of the current displacement,
then η is stepped with the divergence of the corrected transport, so the
discrete continuity equation holds exactly. Stable only for time steps
resolving surface gravity waves.
"""

import numpy as np
from loguru import logger

from .barotropic import (
    barotropic_transport, correct_velocities, set_surface, surface_gradient,
    surface_interior, transport_divergence,
)
from .base import AbstractFreeSurface


class ExplicitFreeSurface(AbstractFreeSurface):
    """Explicit free surface.

    Parameters
    ----------
    gravitational_acceleration : float
    """

    def _materialize_solver(self, grid):
        wave_speed = np.sqrt(self.gravitational_acceleration * self.geometry.depth)
        spacing = min(grid.min_spacing(0), grid.min_spacing(1))
        self.max_stable_dt = spacing / wave_speed
        logger.debug(f"ExplicitFreeSurface: gravity wave speed {wave_speed:.3g} m/s, "
                     f"Δt ≲ {self.max_stable_dt:.3g} s")

    def step(self, u, v, dt: float):
        self._check_materialized()
        g = self.gravitational_acceleration
        self._store_previous()

        eta = surface_interior(self.eta)
        gx, gy = surface_gradient(self.geometry, eta)
        correct_velocities(u, v, -g * dt * gx, -g * dt * gy)

        U, V = barotropic_transport(self.geometry, u, v)
        eta_new = eta - dt * transport_divergence(U, V) / self.geometry.Az
        set_surface(self.eta, eta_new)
        return self.eta


__all__ = ['ExplicitFreeSurface']
