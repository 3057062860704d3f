"""
Configuration module for the wind-tunnel solvers.

Provides YAML-based configuration with dataclass schema.
"""

from .schema import (
    SimulationConfig,
    GridConfig,
    FlowConfig,
    GeometryConfig,
    SolverSettings,
    OutputConfig,
    LoggingConfig,
    DeviceConfig,
    SCENARIOS,
)

from .loader import (
    load_yaml,
    from_dict,
    apply_cli_overrides,
    save_yaml,
)

__all__ = [
    # Schema classes
    'SimulationConfig',
    'GridConfig',
    'FlowConfig',
    'GeometryConfig',
    'SolverSettings',
    'OutputConfig',
    'LoggingConfig',
    'DeviceConfig',
    # Scenarios
    'SCENARIOS',
    # Loader functions
    'load_yaml',
    'from_dict',
    'apply_cli_overrides',
    'save_yaml',
]
