"""
Hydrostatic free-surface model.

One time step is

    1. free_surface.prepare(u, v)
    2. tendencies Gu, Gv, Gc from the advection operators
    3. PREDICT u, v and tracers with QAB2, fill halos
    4. free_surface.step: SOLVE for η and CORRECT u, v
    5. diagnose w from continuity

The model owns its fields; kernels only read them.
"""

from typing import Dict, NamedTuple, Optional, Sequence

import numpy as np
from loguru import logger

from ..advection.flux_form import tracer_tendency
from ..advection.momentum import (
    momentum_advection_form, u_advection_tendency, v_advection_tendency,
)
from ..advection.schemes import Centered
from ..advection.vector_invariant import VectorInvariant
from ..architectures.backends import launch
from ..errors import ConfigurationError
from ..fields.field import CenterField, XFaceField, YFaceField, ZFaceField
from ..fields.halos import fill_halo_regions
from .free_surface import ImplicitFreeSurface, compute_w_from_continuity
from .free_surface.barotropic import surface_interior
from .time_stepping import Clock, QuasiAdamsBashforth2TimeStepper


VERTICAL_VELOCITY_BOUNDARIES = ("bottom", "top")


class VelocityFields(NamedTuple):
    u: object
    v: object
    w: object


def validate_halo(grid, scheme, role: str):
    """Raise ``ConfigurationError`` if ``grid.halo`` is smaller than ``scheme`` needs."""
    if scheme is None:
        return
    required = scheme.required_halo
    for axis, (have, need) in enumerate(zip(grid.halo, required)):
        if have < need:
            raise ConfigurationError(
                f"{role} scheme {scheme!r} needs halo {tuple(required)} but the grid has "
                f"{tuple(grid.halo)} (axis {'xyz'[axis]} is too small)")


class HydrostaticFreeSurfaceModel:
    """Advection of momentum and tracers with a free surface.

    Parameters
    ----------
    grid : RectilinearGrid
    momentum_advection : scheme or None
        Defaults to ``VectorInvariant()``. ``None`` disables momentum advection.
    tracer_advection : scheme
        Flux-form scheme for the tracers. Defaults to ``Centered(2)``.
    free_surface : AbstractFreeSurface
        Defaults to ``ImplicitFreeSurface()``. Materialized on ``grid``.
    tracers : sequence of str
        Names of the passive tracers.
    vertical_velocity_boundary : {"bottom", "top"}
        Where the continuity integration for ``w`` starts: up from ``w = 0``
        at the bottom, or down from the kinematic surface value
        ``(η - η_previous) / Δt``.
    """

    def __init__(self, grid, momentum_advection=VectorInvariant(), tracer_advection=Centered(2),
                 free_surface=None, tracers: Sequence[str] = ("c",),
                 vertical_velocity_boundary: str = "bottom"):
        if tracer_advection is None:
            raise ConfigurationError("tracer_advection must be an advection scheme")
        if vertical_velocity_boundary not in VERTICAL_VELOCITY_BOUNDARIES:
            raise ConfigurationError(f"vertical_velocity_boundary must be one of "
                                     f"{VERTICAL_VELOCITY_BOUNDARIES}, got {vertical_velocity_boundary!r}")
        if free_surface is None:
            free_surface = ImplicitFreeSurface()

        if isinstance(tracers, str):
            tracers = (tracers,)
        if len(set(tracers)) != len(tracers):
            raise ConfigurationError(f"tracer names must be unique, got {tuple(tracers)}")
        for name in tracers:
            if name in ("u", "v", "w", "η"):
                raise ConfigurationError(f"tracer name {name!r} is reserved")

        self.grid = grid
        self.momentum_advection = momentum_advection_form(grid, momentum_advection)
        self.tracer_advection = tracer_advection
        self.vertical_velocity_boundary = vertical_velocity_boundary

        validate_halo(grid, self.momentum_advection, "momentum advection")
        validate_halo(grid, self.tracer_advection, "tracer advection")

        self.velocities = VelocityFields(XFaceField(grid, name="u"),
                                         YFaceField(grid, name="v"),
                                         ZFaceField(grid, name="w"))
        self.tracers: Dict[str, object] = {name: CenterField(grid, name=name) for name in tracers}

        self.free_surface = free_surface.materialize(grid)
        self.clock = Clock()
        self.timestepper = QuasiAdamsBashforth2TimeStepper(self.prognostic_fields)

        logger.info(f"HydrostaticFreeSurfaceModel on {grid!r}")
        logger.info(f"  momentum advection: {self.momentum_advection!r}")
        logger.info(f"  tracer advection:   {self.tracer_advection!r}")
        logger.info(f"  free surface:       {self.free_surface!r}")
        logger.info(f"  tracers:            {tuple(self.tracers)}")
        logger.info(f"  w integrated from:  {self.vertical_velocity_boundary}")

    @property
    def prognostic_fields(self) -> Dict:
        fields = {"u": self.velocities.u, "v": self.velocities.v}
        fields.update(self.tracers)
        return fields

    @property
    def eta(self):
        return self.free_surface.eta

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def set(self, **kwargs):
        """Set ``u``, ``v``, ``η`` or tracers, then diagnose ``w``.

        Values are anything ``Field.set`` accepts.
        """
        for name, value in kwargs.items():
            if name in ("u", "v"):
                getattr(self.velocities, name).set(value)
            elif name in ("eta", "η"):
                self.free_surface.eta.set(value)
            elif name in self.tracers:
                self.tracers[name].set(value)
            else:
                raise ConfigurationError(f"cannot set unknown field {name!r}")
        self.update_state()

    def update_state(self):
        u, v, _ = self.velocities
        fill_halo_regions(u, v, *self.tracers.values())
        self.diagnose_vertical_velocity()

    def diagnose_vertical_velocity(self, dt: Optional[float] = None):
        """Integrate continuity for ``w`` from the configured boundary.

        Without ``dt`` the surface is taken to be at rest, so top-down
        integration starts from ``w = 0``.
        """
        u, v, w = self.velocities
        if self.vertical_velocity_boundary == "bottom":
            return compute_w_from_continuity(w, u, v)

        if dt is None:
            surface_value = np.zeros(self.grid.size[:2])
        else:
            fs = self.free_surface
            surface_value = (surface_interior(fs.eta) - surface_interior(fs.eta_previous)) / dt
        return compute_w_from_continuity(w, u, v, surface_value=surface_value)

    # ------------------------------------------------------------------
    # Time stepping
    # ------------------------------------------------------------------

    def compute_tendencies(self):
        """Evaluate advection tendencies into the time stepper's Gⁿ."""
        u, v, w = self.velocities
        G = self.timestepper.G_current
        launch(self.grid, u_advection_tendency, G["u"], self.momentum_advection, u, v, w)
        launch(self.grid, v_advection_tendency, G["v"], self.momentum_advection, u, v, w)
        for name, c in self.tracers.items():
            launch(self.grid, tracer_tendency, G[name], self.tracer_advection, u, v, w, c)

    def time_step(self, dt: float):
        if not dt > 0:
            raise ConfigurationError(f"time step must be positive, got {dt}")

        u, v, _ = self.velocities
        self.free_surface.prepare(u, v)
        self.compute_tendencies()

        self.timestepper.advance(self.prognostic_fields, dt)
        fill_halo_regions(u, v, *self.tracers.values())

        self.free_surface.step(u, v, dt)
        self.diagnose_vertical_velocity(dt)

        self.timestepper.store_tendencies()
        self.clock.tick(dt)
        logger.debug(f"iteration {self.clock.iteration}, t = {self.clock.time:.6g}")

    def run(self, dt: float, iterations: int):
        for _ in range(iterations):
            self.time_step(dt)
        return self

    def continuity_residual(self):
        """``Az (η - η_old) / Δt + δx U + δy V`` after the last step, shape (Nx, Ny)."""
        if self.clock.last_dt is None:
            raise ConfigurationError("no time step has been taken yet")
        u, v, _ = self.velocities
        return self.free_surface.continuity_residual(u, v, self.clock.last_dt)

    def __repr__(self):
        return (f"HydrostaticFreeSurfaceModel(grid={self.grid!r}, "
                f"iteration={self.clock.iteration}, time={self.clock.time:.6g})")


__all__ = [
    'HydrostaticFreeSurfaceModel', 'VelocityFields', 'validate_halo', 'VERTICAL_VELOCITY_BOUNDARIES',
]
