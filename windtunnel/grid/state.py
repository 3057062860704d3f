"""
Shared simulation state: parameters, geometry, field buffers and diagnostics.

The state object owns every field buffer for both the 2D and the 3D
configuration. Solvers borrow the buffers during ``step`` and write the
results back in place; they never own them. Field sets are replaced
wholesale (new allocations) on resize and reset, so readers must look the
arrays up again after either call.

Memory Layout:
    2D fields are flat arrays of length nx*ny, cell (i, j) at ``j*nx + i``.
    3D fields are flat arrays of length nx*ny*nz, cell (x, y, z) at
    ``z*nx*ny + y*nx + x``. Lattice distributions append the population
    index: slot ``idx*Q + k``. ``view(name)`` returns a reshaped view
    ((ny, nx) or (nz, ny, nx), with a trailing Q axis for distributions)
    sharing memory with the flat array.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional, Dict, Any, Union

import numpy as np
from loguru import logger

from ..constants import (
    MIN_EXTENT, CS, DIM_2D, DIM_3D, LBM_2D,
    D2Q9_C, D2Q9_W, Q9, D3Q19_C, D3Q19_W, Q19,
)
from ..numerics.lattice import equilibrium
from .stl import MeshBounds, read_stl


class GeometryKind(str, Enum):
    """Obstacle shapes understood by the voxelizer."""
    CYLINDER = "cylinder"
    AIRFOIL = "airfoil"
    WING = "wing"
    SPHERE = "sphere"
    CUSTOM = "custom"


def viscosity_from_reynolds(reynolds: float) -> float:
    """Lattice viscosity for a Reynolds number: clamp(5000/Re, 0.002, 0.2)."""
    if reynolds <= 0:
        return 0.2
    return float(np.clip(5000.0 / reynolds, 0.002, 0.2))


@dataclass
class SimulationParams:
    """Simulation parameters (merged without range validation)."""

    dimension: str = DIM_2D
    solver: str = LBM_2D
    nx: int = 256
    ny: int = 128
    nz: int = 64
    dx: float = 1.0
    dt: float = 0.01
    mach: float = 0.15
    reynolds: float = 5000.0
    viscosity: float = 0.02
    density0: float = 1.0

    @property
    def inlet_velocity(self) -> float:
        """Lattice inflow speed u0 = Mach * c_s."""
        return self.mach * CS


@dataclass
class GeometryDescriptor:
    """Obstacle description consumed by the voxelizer."""

    kind: GeometryKind = GeometryKind.AIRFOIL
    angle: float = 0.0                         # Angle of attack [deg]
    custom_mesh: Optional[np.ndarray] = None   # Flat vertex triples
    custom_bounds: Optional[MeshBounds] = None
    preset_id: Optional[str] = None


@dataclass
class Diagnostics:
    """Scalar diagnostics written by the solvers every step."""

    drag: float = 0.0
    lift: float = 0.0
    lift_to_drag: float = 0.0
    strouhal: float = 0.0
    side_force: float = 0.0

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, 0.0)


@dataclass
class FieldSet2D:
    """Field buffers of a 2D grid."""

    nx: int
    ny: int
    velocity_x: np.ndarray
    velocity_y: np.ndarray
    pressure: np.ndarray
    vorticity: np.ndarray
    density: np.ndarray
    obstacle: np.ndarray
    lbm_distribution: np.ndarray

    Q = Q9

    @classmethod
    def allocate(cls, nx: int, ny: int, u0: float, rho0: float = 1.0) -> 'FieldSet2D':
        """Allocate a uniform freestream at (rho0, u0) with equilibrium populations."""
        n = nx * ny
        fs = cls(
            nx=nx, ny=ny,
            velocity_x=np.full(n, u0, dtype=np.float64),
            velocity_y=np.zeros(n, dtype=np.float64),
            pressure=np.full(n, rho0, dtype=np.float64),
            vorticity=np.zeros(n, dtype=np.float64),
            density=np.full(n, rho0, dtype=np.float64),
            obstacle=np.zeros(n, dtype=np.uint8),
            lbm_distribution=np.empty(n * Q9, dtype=np.float64),
        )
        f_eq = equilibrium(fs.density, (fs.velocity_x, fs.velocity_y), D2Q9_C, D2Q9_W)
        fs.lbm_distribution[:] = f_eq.ravel()
        return fs

    @property
    def shape(self) -> tuple:
        return (self.ny, self.nx)

    @property
    def cell_count(self) -> int:
        return self.nx * self.ny

    def view(self, name: str) -> np.ndarray:
        """Grid-shaped view of a flat field (shares memory)."""
        arr = getattr(self, name)
        if name == "lbm_distribution":
            return arr.reshape(self.shape + (self.Q,))
        return arr.reshape(self.shape)

    def distributions(self) -> np.ndarray:
        """Distributions as (n_cells, Q) view."""
        return self.lbm_distribution.reshape(self.cell_count, self.Q)


@dataclass
class FieldSet3D:
    """Field buffers of a 3D grid."""

    nx: int
    ny: int
    nz: int
    velocity_x: np.ndarray
    velocity_y: np.ndarray
    velocity_z: np.ndarray
    pressure: np.ndarray
    vorticity: np.ndarray
    density: np.ndarray
    obstacle: np.ndarray
    lbm_distribution: np.ndarray

    Q = Q19

    @classmethod
    def allocate(cls, nx: int, ny: int, nz: int, u0: float,
                 rho0: float = 1.0) -> 'FieldSet3D':
        """Allocate a uniform freestream at (rho0, u0) with equilibrium populations."""
        n = nx * ny * nz
        fs = cls(
            nx=nx, ny=ny, nz=nz,
            velocity_x=np.full(n, u0, dtype=np.float64),
            velocity_y=np.zeros(n, dtype=np.float64),
            velocity_z=np.zeros(n, dtype=np.float64),
            pressure=np.full(n, rho0, dtype=np.float64),
            vorticity=np.zeros(n, dtype=np.float64),
            density=np.full(n, rho0, dtype=np.float64),
            obstacle=np.zeros(n, dtype=np.uint8),
            lbm_distribution=np.empty(n * Q19, dtype=np.float64),
        )
        # Every cell starts in the same state, so one equilibrium suffices
        f_eq = equilibrium(rho0, (u0, 0.0, 0.0), D3Q19_C, D3Q19_W)
        fs.lbm_distribution.reshape(n, Q19)[:] = f_eq
        return fs

    @property
    def shape(self) -> tuple:
        return (self.nz, self.ny, self.nx)

    @property
    def cell_count(self) -> int:
        return self.nx * self.ny * self.nz

    def view(self, name: str) -> np.ndarray:
        """Grid-shaped view of a flat field (shares memory)."""
        arr = getattr(self, name)
        if name == "lbm_distribution":
            return arr.reshape(self.shape + (self.Q,))
        return arr.reshape(self.shape)

    def distributions(self) -> np.ndarray:
        """Distributions as (n_cells, Q) view."""
        return self.lbm_distribution.reshape(self.cell_count, self.Q)


FieldSet = Union[FieldSet2D, FieldSet3D]


class SimulationState:
    """
    Parameters, geometry, fields and diagnostics of one simulation.

    A single caller drives the simulation loop and is the only writer;
    solvers receive the state explicitly and mutate it during ``step``.
    """

    def __init__(self,
                 params: Optional[SimulationParams] = None,
                 geometry: Optional[GeometryDescriptor] = None):
        self.params = params or SimulationParams()
        self.geometry = geometry or GeometryDescriptor()
        self.diagnostics = Diagnostics()
        self.iterations = 0
        self._check_extents(self.params.nx, self.params.ny, self.params.nz)
        self.fields2d = self._create_2d_fields()
        self.fields3d = self._create_3d_fields()

    # ----- Field allocation -----

    def _create_2d_fields(self) -> FieldSet2D:
        p = self.params
        return FieldSet2D.allocate(p.nx, p.ny, p.inlet_velocity, p.density0)

    def _create_3d_fields(self) -> FieldSet3D:
        p = self.params
        return FieldSet3D.allocate(p.nx, p.ny, p.nz, p.inlet_velocity, p.density0)

    @staticmethod
    def _check_extents(nx: int, ny: int, nz: int) -> None:
        if min(nx, ny, nz) < MIN_EXTENT:
            raise ValueError(
                f"Grid extents must be >= {MIN_EXTENT}, got {nx} x {ny} x {nz}")

    @property
    def active_fields(self) -> FieldSet:
        return self.fields3d if self.params.dimension == DIM_3D else self.fields2d

    # ----- Parameter updates -----

    def resize_grid(self, nx: int, ny: int, nz: Optional[int] = None) -> None:
        """Set new extents and reallocate both field sets; old contents are dropped."""
        if nz is None:
            nz = self.params.nz
        self._check_extents(nx, ny, nz)
        self.params.nx = int(nx)
        self.params.ny = int(ny)
        self.params.nz = int(nz)
        self.fields2d = self._create_2d_fields()
        self.fields3d = self._create_3d_fields()
        self.iterations = 0
        logger.debug(f"Grid resized to {nx} x {ny} x {nz}")

    def set_dimension(self, dimension: str) -> None:
        if dimension not in (DIM_2D, DIM_3D):
            logger.warning(f"Ignoring unknown dimension '{dimension}'")
            return
        self.params.dimension = dimension

    def set_solver(self, solver: str) -> None:
        self.params.solver = str(solver)

    def set_reynolds(self, reynolds: float) -> None:
        """Store a Reynolds number and the lattice viscosity derived from it."""
        self.params.reynolds = reynolds
        self.params.viscosity = viscosity_from_reynolds(reynolds)

    def update_params(self, **partial: Any) -> None:
        """Merge parameter values (callers are responsible for valid ranges)."""
        known = {f.name for f in fields(SimulationParams)}
        unknown = set(partial) - known
        if unknown:
            raise ValueError(f"Unknown simulation parameters: {sorted(unknown)}")
        self.params = replace(self.params, **partial)

    def update_geometry(self, **partial: Any) -> None:
        """Merge geometry values; a resulting kind other than 'custom' holds no mesh, bounds or preset."""
        known = {f.name for f in fields(GeometryDescriptor)}
        unknown = set(partial) - known
        if unknown:
            raise ValueError(f"Unknown geometry fields: {sorted(unknown)}")

        if "kind" in partial:
            partial["kind"] = GeometryKind(partial["kind"])
        self.geometry = replace(self.geometry, **partial)

        if GeometryKind(self.geometry.kind) is not GeometryKind.CUSTOM:
            self.geometry.custom_mesh = None
            self.geometry.custom_bounds = None
            self.geometry.preset_id = None

    def load_mesh(self, source, preset_id: Optional[str] = None) -> bool:
        """
        Parse a triangle mesh and make it the custom obstacle.

        Returns False (geometry untouched) when the input cannot be parsed.
        """
        mesh = read_stl(source)
        if mesh is None:
            logger.warning("Mesh input could not be parsed; geometry unchanged")
            return False
        self.update_geometry(
            kind=GeometryKind.CUSTOM,
            custom_mesh=mesh.vertices,
            custom_bounds=mesh.bounds,
            preset_id=preset_id,
        )
        logger.info(f"Custom mesh loaded: {mesh.n_triangles} triangles")
        return True

    def reset_fields(self) -> None:
        """Reallocate both field sets and zero diagnostics and the iteration count."""
        self.fields2d = self._create_2d_fields()
        self.fields3d = self._create_3d_fields()
        self.iterations = 0
        self.diagnostics.reset()

    # ----- Read surface -----

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the active fields and diagnostics (flat arrays)."""
        fs = self.active_fields
        data = {
            name: np.array(getattr(fs, name))
            for name in ("velocity_x", "velocity_y", "pressure",
                         "vorticity", "density", "obstacle")
        }
        if isinstance(fs, FieldSet3D):
            data["velocity_z"] = np.array(fs.velocity_z)
        data["shape"] = np.array(fs.shape)
        data["iterations"] = np.array(self.iterations)
        for f in fields(Diagnostics):
            data[f.name] = np.array(getattr(self.diagnostics, f.name))
        return data
