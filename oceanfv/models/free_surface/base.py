"""
Common state and interface of the free-surface solvers.

A free surface is configured by keyword arguments and bound to a grid with
``materialize(grid)``, which allocates the displacement ``η`` and any solver
state. Each time step the model calls

    prepare(u, v)       before the momentum predictor
    step(u, v, dt)      after it: SOLVE for η, then CORRECT u and v in place
"""

from ...constants import GRAVITATIONAL_ACCELERATION
from ...errors import ConfigurationError
from ...fields.field import SurfaceField
from .barotropic import (
    barotropic_geometry, barotropic_transport, surface_interior, transport_divergence,
)


class AbstractFreeSurface:
    """Base class for free-surface solvers.

    Parameters
    ----------
    gravitational_acceleration : float
        Must be positive.
    """

    def __init__(self, gravitational_acceleration: float = GRAVITATIONAL_ACCELERATION):
        if not gravitational_acceleration > 0:
            raise ConfigurationError(
                f"gravitational_acceleration must be positive, got {gravitational_acceleration}")
        self.gravitational_acceleration = float(gravitational_acceleration)
        self.grid = None
        self.eta = None
        self.eta_previous = None
        self.geometry = None

    def materialize(self, grid):
        """Bind to ``grid``: allocate η and solver state. Returns ``self``."""
        self.grid = grid
        self.eta = SurfaceField(grid, name="η")
        self.eta_previous = SurfaceField(grid, name="η_previous")
        self.geometry = barotropic_geometry(grid)
        self._materialize_solver(grid)
        return self

    def _materialize_solver(self, grid):
        pass

    def _check_materialized(self):
        if self.eta is None:
            raise ConfigurationError(f"{type(self).__name__} must be materialized on a grid first")

    def prepare(self, u, v):
        """Hook called before the momentum predictor."""

    def step(self, u, v, dt: float):
        raise NotImplementedError

    def _store_previous(self):
        self.eta_previous.set_interior(self.eta.interior)
        self.eta_previous.fill_halo_regions()

    def continuity_residual(self, u, v, dt: float):
        """``Az (η - η_previous) / Δt + δx U + δy V`` (shape (Nx, Ny)).

        Vanishes (to solver tolerance) after a completed step.
        """
        self._check_materialized()
        U, V = barotropic_transport(self.geometry, u, v)
        deta = surface_interior(self.eta) - surface_interior(self.eta_previous)
        return self.geometry.Az * deta / dt + transport_divergence(U, V)

    def __repr__(self):
        return f"{type(self).__name__}(g={self.gravitational_acceleration})"


__all__ = ['AbstractFreeSurface']
