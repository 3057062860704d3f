"""
Common contract of the flow solvers.

A solver borrows the field set of its dimension from the ``SimulationState``
for the duration of ``step`` and owns only private scratch buffers. The
obstacle mask is rebuilt at construction and whenever the caller changes
the geometry or the grid (``rebuild_obstacle``); it is read-only during a
step.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import numpy as np
from loguru import logger

from ..constants import DIM_2D, DIM_3D
from ..grid.voxelizer import build_2d_obstacle, build_3d_obstacle


class ScratchBuffers:
    """Named private work arrays, reallocated when the requested shape changes."""

    def __init__(self, owner: str = ""):
        self._owner = owner
        self._buffers: Dict[str, np.ndarray] = {}

    def ensure(self, name: str, shape: Tuple[int, ...],
               dtype=np.float64) -> np.ndarray:
        """
        Return buffer ``name`` with the given shape and dtype.

        A buffer whose shape or dtype no longer matches is replaced by a new
        zeroed allocation; contents are not carried over.
        """
        buf = self._buffers.get(name)
        if buf is None or buf.shape != tuple(shape) or buf.dtype != dtype:
            if buf is not None:
                logger.debug(f"{self._owner}: reallocating scratch '{name}' "
                             f"{buf.shape} -> {tuple(shape)}")
            buf = np.zeros(shape, dtype=dtype)
            self._buffers[name] = buf
        return buf

    def matches(self, name: str, shape: Tuple[int, ...]) -> bool:
        buf = self._buffers.get(name)
        return buf is not None and buf.shape == tuple(shape)

    def clear(self) -> None:
        self._buffers.clear()


class FlowSolver(ABC):
    """
    Base class of the six solvers.

    Subclasses set ``kind`` and ``dimension`` and implement ``_advance``,
    which performs one step on the active field set and writes the
    diagnostics. ``step`` handles the dimension check and the iteration
    counter.
    """

    kind: str = ""
    dimension: str = DIM_2D

    def __init__(self, state):
        self.state = state
        self.scratch = ScratchBuffers(owner=type(self).__name__)
        self._bound_fields = None
        self._bind_fields()
        logger.info(f"{type(self).__name__} ready on "
                    f"{' x '.join(str(n) for n in self.fields.shape[::-1])} grid")

    @property
    def fields(self):
        """Field set this solver operates on."""
        if self.dimension == DIM_3D:
            return self.state.fields3d
        return self.state.fields2d

    def rebuild_obstacle(self) -> np.ndarray:
        """Voxelize the current geometry into this solver's field set."""
        if self.dimension == DIM_3D:
            return build_3d_obstacle(self.state)
        return build_2d_obstacle(self.state)

    def _bind_fields(self) -> None:
        """Attach to the current field set: voxelize, then reset solver state."""
        self._bound_fields = self.fields
        self.rebuild_obstacle()
        self._on_new_fields()

    def _on_new_fields(self) -> None:
        """Hook for solvers that keep state tied to one field allocation."""

    def step(self, elapsed: Optional[float] = None) -> None:
        """
        Advance the simulation by one step.

        Parameters
        ----------
        elapsed : float, optional
            Wall-clock time since the previous frame. Accepted for
            interface compatibility; the solvers use their own time step.
        """
        if self.state.params.dimension != self.dimension:
            logger.warning(f"{type(self).__name__} needs a {self.dimension} "
                           f"state but dimension is "
                           f"'{self.state.params.dimension}'; step skipped")
            return
        if self.fields is not self._bound_fields:
            logger.debug(f"{type(self).__name__}: field set replaced, rebinding")
            self._bind_fields()
        self._advance()
        self.state.iterations += 1

    @abstractmethod
    def _advance(self) -> None:
        """One step on ``self.fields``; iteration counter not yet incremented."""

    def _publish(self, drag: float, lift: float, lift_to_drag: float,
                 strouhal: float, side_force: float = 0.0) -> None:
        diag = self.state.diagnostics
        diag.drag = float(drag)
        diag.lift = float(lift)
        diag.lift_to_drag = float(lift_to_drag)
        diag.strouhal = float(strouhal)
        diag.side_force = float(side_force)
