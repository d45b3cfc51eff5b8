"""
Configuration schema for oceanfv simulations.

Dataclass-based configuration that can be loaded from YAML or constructed programmatically.
Choices are validated when the model is built (``oceanfv.models.factory``).
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional

from ..constants import BOUNDED, DEFAULT_HALO, GRAVITATIONAL_ACCELERATION, PERIODIC, QAB2_CHI


@dataclass
class GridConfig:
    """Rectilinear grid configuration."""

    size: List[int] = field(default_factory=lambda: [32, 32, 4])
    extent: List[float] = field(default_factory=lambda: [1.0e5, 1.0e5, 1.0e3])  # Lx, Ly, Lz in m
    halo: List[int] = field(default_factory=lambda: list(DEFAULT_HALO))
    topology: List[str] = field(default_factory=lambda: [PERIODIC, PERIODIC, BOUNDED])


@dataclass
class AdvectionConfig:
    """Advection schemes for momentum and tracers.

    ``momentum`` is one of "vector_invariant", "weno_vector_invariant",
    "centered", "upwind", "weno" or "none"; ``tracer`` one of "centered",
    "upwind" or "weno".
    """

    momentum: str = "vector_invariant"
    momentum_order: Optional[int] = None     # Flux-form order, or overall WENO VI order
    vorticity_order: Optional[int] = None    # weno_vector_invariant only
    upwinding: str = "self"                  # "self" or "cross"
    multi_dimensional_stencil: bool = False
    tracer: str = "centered"
    tracer_order: Optional[int] = None


@dataclass
class FreeSurfaceConfig:
    """Free-surface solver configuration."""

    type: str = "implicit"                   # "explicit", "implicit" or "split_explicit"
    gravitational_acceleration: float = GRAVITATIONAL_ACCELERATION

    # Implicit
    solver_method: Optional[str] = None      # "fft", "pcg", "matrix"; None picks by grid
    preconditioner: Optional[str] = "jacobi"
    matrix_method: str = "cg"
    reltol: float = 1e-10
    abstol: float = 0.0
    maxiter: Optional[int] = None
    on_nonconvergence: str = "warn"          # "warn" or "raise"

    # Split-explicit
    substeps: Optional[int] = None
    cfl: Optional[float] = None
    averaging_kernel: str = "cosine"


@dataclass
class TimeSteppingConfig:
    """Time stepping settings."""

    dt: float = 60.0
    iterations: int = 10
    chi: float = QAB2_CHI
    print_freq: int = 10


@dataclass
class DeviceConfig:
    """Device/backend configuration."""

    # "cpu" (NumPy + numba) or "gpu" (JAX arrays)
    architecture: str = "cpu"
    # JAX device selection: "auto", "cpu", or GPU index ("0", "1", "cuda:0", etc.)
    device: Optional[str] = "auto"


@dataclass
class LoggingConfig:
    """loguru sinks."""

    level: str = "INFO"
    show_time: bool = True
    # Optional log file, written uncolored in addition to stderr
    file: Optional[str] = None
    file_level: str = "DEBUG"


@dataclass
class SimulationConfig:
    """Complete simulation configuration."""

    grid: GridConfig = field(default_factory=GridConfig)
    advection: AdvectionConfig = field(default_factory=AdvectionConfig)
    free_surface: FreeSurfaceConfig = field(default_factory=FreeSurfaceConfig)
    time_stepping: TimeSteppingConfig = field(default_factory=TimeSteppingConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    tracers: List[str] = field(default_factory=lambda: ["c"])
    vertical_velocity_boundary: str = "bottom"   # "bottom" or "top"
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict:
        """Convert to nested dictionary."""
        return asdict(self)


# Preset grids
def coarse_preset() -> GridConfig:
    """Coarse grid for quick tests."""
    return GridConfig(size=[16, 16, 2])


def production_preset() -> GridConfig:
    """Finer grid with a halo wide enough for high-order WENO vector invariant."""
    return GridConfig(size=[256, 256, 16], halo=[6, 6, 4])
