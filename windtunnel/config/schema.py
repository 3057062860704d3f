"""
Configuration schema for the wind-tunnel solvers.

Dataclass-based configuration that can be loaded from YAML or constructed programmatically.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any


@dataclass
class GridConfig:
    """Grid extents; the dimension follows the selected solver."""

    nx: int = 256
    ny: int = 128
    nz: int = 64               # Only used by the 3D solvers
    dx: float = 1.0


@dataclass
class FlowConfig:
    """Flow conditions configuration."""

    mach: float = 0.15
    reynolds: float = 5000.0
    # Lattice viscosity; None derives it from the Reynolds number
    viscosity: Optional[float] = None
    dt: float = 0.01
    density0: float = 1.0


@dataclass
class GeometryConfig:
    """Obstacle configuration."""

    kind: str = "airfoil"      # cylinder, airfoil, wing, sphere or custom
    angle: float = 0.0         # Angle of attack [deg]
    mesh_file: Optional[str] = None   # STL file, implies kind 'custom'
    preset_id: Optional[str] = None


@dataclass
class SolverSettings:
    """Solver selection and iteration settings."""

    kind: str = "lbm2d"
    steps: int = 200
    print_freq: int = 50


@dataclass
class OutputConfig:
    """Output configuration."""

    directory: str = "output/windtunnel"
    case_name: str = "run"
    save_snapshot: bool = True  # Write <directory>/<case_name>.npz at the end


@dataclass
class LoggingConfig:
    """Console logging configuration."""

    level: str = "INFO"
    show_time: bool = True
    file: Optional[str] = None         # Plain-text copy of the log
    file_level: str = "DEBUG"


@dataclass
class DeviceConfig:
    """Device configuration for the JAX kernels."""

    # Device selection: "auto", "cpu" or "gpu"
    device: Optional[str] = "auto"


@dataclass
class SimulationConfig:
    """Complete simulation configuration."""

    grid: GridConfig = field(default_factory=GridConfig)
    flow: FlowConfig = field(default_factory=FlowConfig)
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    solver: SolverSettings = field(default_factory=SolverSettings)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)

    def validate(self) -> None:
        """
        Check the enumerated settings.

        Raises
        ------
        ValueError
            On an unknown solver key or geometry kind.
        """
        from windtunnel.grid.state import GeometryKind
        from windtunnel.solvers.factory import SolverKind

        SolverKind.parse(self.solver.kind)
        try:
            GeometryKind(self.geometry.kind)
        except ValueError:
            valid = ", ".join(k.value for k in GeometryKind)
            raise ValueError(f"Unknown geometry kind '{self.geometry.kind}'. "
                             f"Valid kinds: {valid}") from None

    def build_state(self):
        """Create a ``SimulationState`` for this configuration."""
        from windtunnel.grid.state import (
            SimulationState, SimulationParams, GeometryDescriptor,
            GeometryKind, viscosity_from_reynolds,
        )
        from windtunnel.solvers.factory import SolverKind

        self.validate()
        kind = SolverKind.parse(self.solver.kind)

        viscosity = self.flow.viscosity
        if viscosity is None:
            viscosity = viscosity_from_reynolds(self.flow.reynolds)

        params = SimulationParams(
            dimension=kind.dimension,
            solver=kind.value,
            nx=self.grid.nx,
            ny=self.grid.ny,
            nz=self.grid.nz,
            dx=self.grid.dx,
            dt=self.flow.dt,
            mach=self.flow.mach,
            reynolds=self.flow.reynolds,
            viscosity=viscosity,
            density0=self.flow.density0,
        )
        geometry = GeometryDescriptor(
            kind=GeometryKind(self.geometry.kind),
            angle=self.geometry.angle,
            preset_id=self.geometry.preset_id,
        )
        state = SimulationState(params, geometry)

        if self.geometry.mesh_file:
            path = Path(self.geometry.mesh_file)
            if not path.exists():
                raise FileNotFoundError(f"Mesh file not found: {path}")
            state.load_mesh(path, preset_id=self.geometry.preset_id)

        return state

    def to_dict(self) -> dict:
        """Convert to nested dictionary."""
        return asdict(self)


# Named scenarios, selected with a top-level ``scenario:`` key
SCENARIOS: Dict[str, Dict[str, Any]] = {
    'cylinder': {
        'grid': {'nx': 256, 'ny': 128},
        'flow': {'mach': 0.15, 'reynolds': 3900.0},
        'geometry': {'kind': 'cylinder', 'angle': 0.0},
        'solver': {'kind': 'lbm2d'},
    },
    'airfoil': {
        'grid': {'nx': 320, 'ny': 160},
        'flow': {'mach': 0.3, 'reynolds': 1.0e5},
        'geometry': {'kind': 'airfoil', 'angle': 4.0},
        'solver': {'kind': 'lbm2d'},
    },
    'wing': {
        'grid': {'nx': 192, 'ny': 96, 'nz': 64},
        'flow': {'mach': 0.2, 'reynolds': 6000.0},
        'geometry': {'kind': 'wing', 'angle': 8.0},
        'solver': {'kind': 'lbm3d'},
    },
    'cavity': {
        'grid': {'nx': 160, 'ny': 160, 'nz': 80},
        'flow': {'mach': 0.05, 'reynolds': 2000.0},
        'geometry': {'kind': 'sphere', 'angle': 0.0},
        'solver': {'kind': 'lbm3d'},
    },
}
