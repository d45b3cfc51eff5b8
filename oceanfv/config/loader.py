"""
YAML configuration loader.
"""

import copy
import typing
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml
from loguru import logger

from ..errors import ConfigurationError
from .schema import SimulationConfig, GridConfig, coarse_preset, production_preset


PRESETS = {
    'coarse': coarse_preset,
    'production': production_preset,
}


def _merge_dict(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def _unwrap_optional(field_type):
    args = [a for a in typing.get_args(field_type) if a is not type(None)]
    if typing.get_origin(field_type) is Union and len(args) == 1:
        return args[0]
    return field_type


def _coerce_type(value, field_type):
    """Coerce value to the expected field type."""
    field_type = _unwrap_optional(field_type)
    # String representations of numbers (e.g., "1.0e5")
    if field_type == float and isinstance(value, (str, int)) and not isinstance(value, bool):
        try:
            return float(value)
        except ValueError:
            return value
    if field_type == int and isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return value
    if typing.get_origin(field_type) in (list, tuple) and isinstance(value, (list, tuple)):
        (item_type, *_) = typing.get_args(field_type) or (None,)
        return [_coerce_type(v, item_type) for v in value]
    return value


def _dict_to_dataclass(cls, data: dict):
    """Convert a nested dictionary to a dataclass instance."""
    if not is_dataclass(cls):
        return data

    field_types = {f.name: f.type for f in fields(cls)}
    kwargs = {}

    for key, value in data.items():
        if key not in field_types:
            logger.warning(f"Ignoring unknown configuration key {cls.__name__}.{key}")
            continue

        field_type = field_types[key]

        if is_dataclass(field_type) and isinstance(value, dict):
            kwargs[key] = _dict_to_dataclass(field_type, value)
        else:
            kwargs[key] = _coerce_type(value, field_type)

    return cls(**kwargs)


def load_yaml(path: Union[str, Path]) -> SimulationConfig:
    """
    Load simulation configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        SimulationConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    logger.info(f"Loaded configuration from {path}")
    return from_dict(data)


def from_dict(data: Dict[str, Any]) -> SimulationConfig:
    """
    Create SimulationConfig from a dictionary.

    Handles nested structures and applies defaults for missing values. A
    ``preset`` key selects a grid preset that explicit ``grid`` entries
    override.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"configuration must be a mapping, got {type(data).__name__}")
    data = copy.deepcopy(dict(data))

    preset = data.pop('preset', None)
    if preset is not None:
        if preset not in PRESETS:
            raise ConfigurationError(f"unknown preset {preset!r}; choose from {sorted(PRESETS)}")
        grid_preset = PRESETS[preset]()
        preset_dict = {f.name: getattr(grid_preset, f.name) for f in fields(GridConfig)}
        data['grid'] = _merge_dict(preset_dict, data.get('grid') or {})

    return _dict_to_dataclass(SimulationConfig, data)


def apply_overrides(config: SimulationConfig, overrides: Mapping[str, Any]) -> SimulationConfig:
    """
    Return a new configuration with dotted-path overrides applied.

    Example: ``{"grid.size": [64, 64, 8], "free_surface.type": "explicit"}``.
    ``None`` values are skipped.
    """
    config_dict = config.to_dict()

    for dotted, value in overrides.items():
        if value is None:
            continue
        *parents, leaf = dotted.split('.')
        target = config_dict
        for key in parents:
            if not isinstance(target.get(key), dict):
                raise ConfigurationError(f"invalid override path {dotted!r}")
            target = target[key]
        if leaf not in target:
            raise ConfigurationError(f"invalid override path {dotted!r}")
        target[leaf] = value

    return from_dict(config_dict)


def save_yaml(config: SimulationConfig, path: Union[str, Path]) -> None:
    """Save configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
