"""
Model Factory Module.

Turns a ``SimulationConfig`` into a grid, schemes, a free surface and a
validated ``HydrostaticFreeSurfaceModel``, so scripts and tests share one
construction path.
"""

from typing import Optional

from loguru import logger

from ..advection.schemes import Centered, UpwindBiased, WENO
from ..advection.vector_invariant import VectorInvariant, weno_vector_invariant
from ..architectures.backends import CPU, GPU
from ..architectures.jax_config import get_device_info, select_device
from ..config.schema import (
    AdvectionConfig, FreeSurfaceConfig, GridConfig, SimulationConfig,
)
from ..errors import ConfigurationError
from ..grid.rectilinear_grid import RectilinearGrid
from ..utils.logging import configure_logging
from .free_surface import ExplicitFreeSurface, ImplicitFreeSurface, SplitExplicitFreeSurface
from .hydrostatic_model import HydrostaticFreeSurfaceModel
from .time_stepping import QuasiAdamsBashforth2TimeStepper


ARCHITECTURES = {"cpu": CPU, "gpu": GPU}

FLUX_FORM_SCHEMES = {
    "centered": (Centered, 2),
    "upwind": (UpwindBiased, 3),
    "weno": (WENO, 5),
}


def build_architecture(name: str):
    try:
        return ARCHITECTURES[name.lower()]()
    except KeyError:
        raise ConfigurationError(f"architecture must be one of {sorted(ARCHITECTURES)}, got {name!r}")


def build_grid(config: GridConfig, architecture=None) -> RectilinearGrid:
    return RectilinearGrid(architecture=architecture,
                           size=tuple(config.size),
                           extent=tuple(config.extent),
                           halo=tuple(config.halo),
                           topology=tuple(config.topology))


def _flux_form_scheme(name: str, order: Optional[int], role: str):
    if name not in FLUX_FORM_SCHEMES:
        raise ConfigurationError(f"{role} advection must be one of {sorted(FLUX_FORM_SCHEMES)}, got {name!r}")
    cls, default_order = FLUX_FORM_SCHEMES[name]
    return cls(default_order if order is None else order)


def build_momentum_advection(config: AdvectionConfig):
    """Momentum advection scheme from its configuration (``None`` for "none")."""
    name = config.momentum
    if name == "none":
        return None
    if name == "vector_invariant":
        return VectorInvariant(upwinding=config.upwinding)
    if name == "weno_vector_invariant":
        return weno_vector_invariant(order=config.momentum_order,
                                     vorticity_order=config.vorticity_order,
                                     upwinding=config.upwinding,
                                     multi_dimensional_stencil=config.multi_dimensional_stencil)
    return _flux_form_scheme(name, config.momentum_order, "momentum")


def build_tracer_advection(config: AdvectionConfig):
    return _flux_form_scheme(config.tracer, config.tracer_order, "tracer")


def build_free_surface(config: FreeSurfaceConfig):
    g = config.gravitational_acceleration
    if config.type == "explicit":
        return ExplicitFreeSurface(gravitational_acceleration=g)
    if config.type == "implicit":
        return ImplicitFreeSurface(solver_method=config.solver_method,
                                   gravitational_acceleration=g,
                                   reltol=config.reltol,
                                   abstol=config.abstol,
                                   maxiter=config.maxiter,
                                   preconditioner=config.preconditioner,
                                   matrix_method=config.matrix_method,
                                   on_nonconvergence=config.on_nonconvergence)
    if config.type == "split_explicit":
        return SplitExplicitFreeSurface(substeps=config.substeps,
                                        cfl=config.cfl,
                                        averaging_kernel=config.averaging_kernel,
                                        gravitational_acceleration=g)
    raise ConfigurationError(f"free_surface.type must be 'explicit', 'implicit' or 'split_explicit', "
                             f"got {config.type!r}")


def build_model(config: Optional[SimulationConfig] = None) -> HydrostaticFreeSurfaceModel:
    """
    Create a HydrostaticFreeSurfaceModel from a configuration.

    Parameters
    ----------
    config : SimulationConfig, optional
        Defaults to ``SimulationConfig()``.

    Returns
    -------
    HydrostaticFreeSurfaceModel

    Raises
    ------
    ConfigurationError
        On unknown choices or incompatible schemes and halos.
    """
    if config is None:
        config = SimulationConfig()

    architecture = build_architecture(config.device.architecture)
    if isinstance(architecture, GPU):
        select_device(config.device.device)
        logger.info(get_device_info())

    grid = build_grid(config.grid, architecture)
    model = HydrostaticFreeSurfaceModel(grid,
                                        momentum_advection=build_momentum_advection(config.advection),
                                        tracer_advection=build_tracer_advection(config.advection),
                                        free_surface=build_free_surface(config.free_surface),
                                        tracers=tuple(config.tracers),
                                        vertical_velocity_boundary=config.vertical_velocity_boundary)
    model.timestepper = QuasiAdamsBashforth2TimeStepper(model.prognostic_fields,
                                                        chi=config.time_stepping.chi)
    return model


def run_simulation(model: HydrostaticFreeSurfaceModel, config: SimulationConfig):
    """Advance ``model`` by ``config.time_stepping.iterations`` steps, logging progress.

    Logging is configured from ``config.logging`` first.
    """
    ts = config.time_stepping
    if ts.iterations < 0:
        raise ConfigurationError(f"iterations must be non-negative, got {ts.iterations}")

    configure_logging(config)
    logger.info(f"Running {ts.iterations} steps of {ts.dt:g} s")

    for n in range(ts.iterations):
        model.time_step(ts.dt)
        if ts.print_freq and (n + 1) % ts.print_freq == 0:
            residual = abs(model.continuity_residual()).max()
            logger.info(f"Iter {model.clock.iteration:6d}: t = {model.clock.time:.6g} s, "
                        f"max continuity residual {float(residual):.3e}")
    return model


__all__ = [
    'build_model', 'run_simulation', 'build_grid', 'build_architecture',
    'build_momentum_advection', 'build_tracer_advection', 'build_free_surface',
]
