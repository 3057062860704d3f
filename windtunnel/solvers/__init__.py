"""
Flow solvers for the wind-tunnel grids.

This package provides:
    - Lattice-Boltzmann BGK in 2D (D2Q9) and 3D (D3Q19)
    - Semi-Lagrangian Navier-Stokes, potential flow and vortex sheet in 2D
    - Compressible Euler in 3D
    - The solver factory and the batch driver
"""

from .base import FlowSolver, ScratchBuffers

from .boundary_conditions import (
    FreestreamConditions,
    apply_lbm_inlet_outlet,
    apply_free_slip_walls_2d,
    apply_euler_inlet_outlet,
)

from .lattice_boltzmann import LBMSolver2D, LBMSolver3D
from .navier_stokes2d import NavierStokesSolver2D
from .potential2d import PotentialFlowSolver2D
from .vortex2d import VortexSheetSolver2D
from .euler3d import EulerSolver3D

from .factory import SolverKind, create_solver, configure_state
from .runner import run_simulation, save_snapshot

__all__ = [
    # Contract
    'FlowSolver',
    'ScratchBuffers',
    # Boundary conditions
    'FreestreamConditions',
    'apply_lbm_inlet_outlet',
    'apply_free_slip_walls_2d',
    'apply_euler_inlet_outlet',
    # Solvers
    'LBMSolver2D',
    'LBMSolver3D',
    'NavierStokesSolver2D',
    'PotentialFlowSolver2D',
    'VortexSheetSolver2D',
    'EulerSolver3D',
    # Factory
    'SolverKind',
    'create_solver',
    'configure_state',
    # Driver
    'run_simulation',
    'save_snapshot',
]
