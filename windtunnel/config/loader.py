"""
YAML configuration loader with validation.
"""

import copy
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Dict, Any, Union, get_args, get_origin

import yaml
from loguru import logger

from .schema import (
    SimulationConfig, GridConfig, FlowConfig, GeometryConfig,
    SolverSettings, OutputConfig, LoggingConfig, DeviceConfig,
    SCENARIOS,
)

_SECTIONS = {
    'grid': GridConfig,
    'flow': FlowConfig,
    'geometry': GeometryConfig,
    'solver': SolverSettings,
    'output': OutputConfig,
    'logging': LoggingConfig,
    'device': DeviceConfig,
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
    """Optional[X] -> X; other annotations are returned unchanged."""
    if get_origin(field_type) is Union:
        args = [a for a in get_args(field_type) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return field_type


def _coerce_type(value, field_type):
    """Coerce value to the expected field type."""
    field_type = _unwrap_optional(field_type)
    # Handle string representations of numbers (e.g., "1.0e5")
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
    return value


def _dict_to_dataclass(cls, data: dict):
    """Convert a nested dictionary to a dataclass instance."""
    if not is_dataclass(cls):
        return data

    field_types = {f.name: f.type for f in fields(cls)}
    kwargs = {}

    for key, value in data.items():
        if key not in field_types:
            logger.warning(f"Ignoring unknown {cls.__name__} field '{key}'")
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
        ValueError: On an unknown scenario, solver or geometry kind
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    return from_dict(data)


def from_dict(data: Dict[str, Any]) -> SimulationConfig:
    """
    Create SimulationConfig from a dictionary.

    A ``scenario`` key selects one of ``SCENARIOS`` as the base; explicit
    sections override it. Missing values take the dataclass defaults.
    """
    data = dict(data)
    scenario = data.pop('scenario', None)
    if scenario:
        if scenario not in SCENARIOS:
            valid = ", ".join(SCENARIOS)
            raise ValueError(f"Unknown scenario '{scenario}'. Valid scenarios: {valid}")
        data = _merge_dict(copy.deepcopy(SCENARIOS[scenario]), data)
        logger.debug(f"Using scenario '{scenario}'")

    config_dict = {}
    for section, cls in _SECTIONS.items():
        if section in data and data[section] is not None:
            config_dict[section] = _dict_to_dataclass(cls, data[section])

    for key in set(data) - set(_SECTIONS):
        logger.warning(f"Ignoring unknown configuration section '{key}'")

    config = SimulationConfig(**config_dict)
    config.validate()
    return config


def apply_cli_overrides(config: SimulationConfig, args) -> SimulationConfig:
    """
    Apply command-line argument overrides to a configuration.

    Only overrides values that were explicitly set (not None).

    Args:
        config: Base configuration
        args: argparse.Namespace with CLI arguments

    Returns:
        Updated SimulationConfig
    """
    config_dict = config.to_dict()

    # Map CLI args to config paths
    cli_mapping = {
        # Solver
        'solver': ('solver', 'kind'),
        'steps': ('solver', 'steps'),
        'print_freq': ('solver', 'print_freq'),

        # Flow conditions
        'mach': ('flow', 'mach'),
        'reynolds': ('flow', 'reynolds'),
        'viscosity': ('flow', 'viscosity'),

        # Grid
        'nx': ('grid', 'nx'),
        'ny': ('grid', 'ny'),
        'nz': ('grid', 'nz'),

        # Geometry
        'geometry': ('geometry', 'kind'),
        'angle': ('geometry', 'angle'),
        'mesh': ('geometry', 'mesh_file'),

        # Output
        'output_dir': ('output', 'directory'),
        'case_name': ('output', 'case_name'),

        # Logging and device
        'log_level': ('logging', 'level'),
        'log_file': ('logging', 'file'),
        'device': ('device', 'device'),
    }

    for cli_name, config_path in cli_mapping.items():
        if hasattr(args, cli_name):
            value = getattr(args, cli_name)
            if value is not None:
                target = config_dict
                for key in config_path[:-1]:
                    target = target[key]
                target[config_path[-1]] = value

    if getattr(args, 'mesh', None):
        config_dict['geometry']['kind'] = 'custom'

    if getattr(args, 'no_save', False):
        config_dict['output']['save_snapshot'] = False

    return from_dict(config_dict)


def save_yaml(config: SimulationConfig, path: Union[str, Path]) -> None:
    """Save configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
