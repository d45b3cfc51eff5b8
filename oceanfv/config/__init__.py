"""
Configuration module for oceanfv.

Provides YAML-based configuration with dataclass schema.
"""

from .schema import (
    SimulationConfig,
    GridConfig,
    AdvectionConfig,
    FreeSurfaceConfig,
    TimeSteppingConfig,
    DeviceConfig,
    LoggingConfig,
    coarse_preset,
    production_preset,
)

from .loader import (
    load_yaml,
    from_dict,
    apply_overrides,
    save_yaml,
)

__all__ = [
    # Schema classes
    'SimulationConfig',
    'GridConfig',
    'AdvectionConfig',
    'FreeSurfaceConfig',
    'TimeSteppingConfig',
    'DeviceConfig',
    'LoggingConfig',
    # Presets
    'coarse_preset',
    'production_preset',
    # Loader functions
    'load_yaml',
    'from_dict',
    'apply_overrides',
    'save_yaml',
]
