"""
Solver Factory Module.

Maps the fixed set of solver keys onto solver classes. Selection is a
single switch over ``SolverKind``; unknown keys are rejected.
"""

from enum import Enum
from typing import Union

from loguru import logger

from ..constants import DIM_2D, DIM_3D
from .base import FlowSolver
from .lattice_boltzmann import LBMSolver2D, LBMSolver3D
from .navier_stokes2d import NavierStokesSolver2D
from .potential2d import PotentialFlowSolver2D
from .vortex2d import VortexSheetSolver2D
from .euler3d import EulerSolver3D


class SolverKind(str, Enum):
    """Available solvers, keyed by their configuration string."""
    LBM_2D = "lbm2d"
    NS_2D = "ns2d"
    POTENTIAL_2D = "potential2d"
    VORTEX_2D = "vortex2d"
    LBM_3D = "lbm3d"
    EULER_3D = "euler3d"

    @property
    def dimension(self) -> str:
        """Grid dimension the solver runs on."""
        if self in (SolverKind.LBM_3D, SolverKind.EULER_3D):
            return DIM_3D
        return DIM_2D

    @classmethod
    def parse(cls, key: Union[str, 'SolverKind']) -> 'SolverKind':
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown solver '{key}'. Valid solvers: {valid}") from None


def create_solver(key: Union[str, SolverKind], state) -> FlowSolver:
    """
    Create the solver for ``key`` bound to ``state``.

    Construction voxelizes the current geometry into the solver's field
    set. The state's dimension and solver parameters are not changed; use
    ``SimulationState.set_dimension`` (or ``configure_state``) to match.

    Parameters
    ----------
    key : str or SolverKind
        One of lbm2d, ns2d, potential2d, vortex2d, lbm3d, euler3d.
    state : SimulationState
        Shared simulation state.

    Returns
    -------
    FlowSolver

    Raises
    ------
    ValueError
        If ``key`` is not a known solver.
    """
    kind = SolverKind.parse(key)

    if kind is SolverKind.LBM_2D:
        solver = LBMSolver2D(state)
    elif kind is SolverKind.NS_2D:
        solver = NavierStokesSolver2D(state)
    elif kind is SolverKind.POTENTIAL_2D:
        solver = PotentialFlowSolver2D(state)
    elif kind is SolverKind.VORTEX_2D:
        solver = VortexSheetSolver2D(state)
    elif kind is SolverKind.LBM_3D:
        solver = LBMSolver3D(state)
    else:
        solver = EulerSolver3D(state)

    logger.debug(f"Created solver '{kind.value}'")
    return solver


def configure_state(key: Union[str, SolverKind], state) -> FlowSolver:
    """Point ``state`` at the solver's key and dimension, then create it."""
    kind = SolverKind.parse(key)
    state.set_solver(kind.value)
    state.set_dimension(kind.dimension)
    return create_solver(kind, state)
