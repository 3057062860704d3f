"""
Lattice-Boltzmann BGK solvers (D2Q9 and D3Q19).

Per step: collide -> stream -> boundaries -> vorticity -> loads.

Streaming reads a private copy of the post-collision populations and
writes the field-set distributions, so the two buffers never alias.
"""

from abc import abstractmethod

import numpy as np

from ..constants import (
    LBM_2D, LBM_3D, DIM_2D, DIM_3D,
    D2Q9_C, D2Q9_W, D2Q9_OPP, D3Q19_C, D3Q19_W, D3Q19_OPP,
)
from ..numerics.lattice import relaxation_rate, collide_kernel, stream_kernel
from ..numerics.gradients import vorticity_2d, vorticity_3d
from ..numerics.forces import lattice_coefficients, frontal_extent, LiftHistory
from .base import FlowSolver
from .boundary_conditions import (
    FreestreamConditions,
    apply_lbm_inlet_outlet,
    apply_free_slip_walls_2d,
)


class LatticeBoltzmannSolver(FlowSolver):
    """Shared collide/stream/loads logic; subclasses pick the stencil."""

    c: np.ndarray = D2Q9_C
    w: np.ndarray = D2Q9_W
    opp: np.ndarray = D2Q9_OPP
    _velocity_names = ("velocity_x", "velocity_y")

    def _on_new_fields(self) -> None:
        self.lift_history = LiftHistory()

    @property
    def omega(self) -> float:
        """BGK relaxation rate for the current viscosity."""
        return relaxation_rate(self.state.params.viscosity)

    @property
    def freestream(self) -> FreestreamConditions:
        p = self.state.params
        return FreestreamConditions.lattice(p.mach, p.density0)

    def _velocities(self) -> tuple:
        fs = self.fields
        return tuple(getattr(fs, name) for name in self._velocity_names)

    def _extents(self) -> tuple:
        fs = self.fields
        return fs.nx, fs.ny, getattr(fs, "nz", 1)

    @abstractmethod
    def compute_vorticity(self) -> None:
        """Write the vorticity field from the current velocities."""

    def collide(self) -> None:
        """BGK relaxation of every fluid cell; updates density, pressure, velocity."""
        fs = self.fields
        collide_kernel(fs.distributions(), fs.obstacle, self.c, self.w,
                       self.omega, fs.density, fs.pressure, self._velocities())

    def stream(self) -> None:
        """Mass-conserving streaming with bounce-back at walls and solids."""
        fs = self.fields
        f = fs.distributions()
        post = self.scratch.ensure("post_collision", f.shape)
        post[:] = f
        nx, ny, nz = self._extents()
        stream_kernel(f, post, fs.obstacle, self.c, self.opp, nx, ny, nz)

    def apply_boundaries(self) -> None:
        fs = self.fields
        apply_lbm_inlet_outlet(
            fs.view("lbm_distribution"),
            [fs.view(name) for name in self._velocity_names],
            fs.view("density"), self.freestream, self.c, self.w)

    def _advance(self) -> None:
        if self.state.iterations == 0:
            self.lift_history.clear()
        self.collide()
        self.stream()
        self.apply_boundaries()
        self.compute_vorticity()
        self.update_loads()

    def update_loads(self) -> None:
        fs = self.fields
        params = self.state.params
        obstacle = fs.view("obstacle")
        coeffs = lattice_coefficients(fs.view("pressure"), fs.view("velocity_x"),
                                      obstacle, params.density0,
                                      self.freestream.u)
        self.lift_history.append(coeffs.lift)
        strouhal = self.lift_history.strouhal(frontal_extent(obstacle),
                                              self.freestream.u)
        self._publish(coeffs.drag, coeffs.lift, coeffs.lift_to_drag,
                      strouhal, coeffs.side)


class LBMSolver2D(LatticeBoltzmannSolver):
    """D2Q9 BGK with equilibrium inlet, copy outlet and free-slip walls."""

    kind = LBM_2D
    dimension = DIM_2D
    c = D2Q9_C
    w = D2Q9_W
    opp = D2Q9_OPP

    def apply_boundaries(self) -> None:
        fs = self.fields
        apply_free_slip_walls_2d(fs.view("lbm_distribution"),
                                 fs.view("velocity_x"), fs.view("velocity_y"))
        super().apply_boundaries()

    def compute_vorticity(self) -> None:
        fs = self.fields
        vorticity_2d(fs.view("velocity_x"), fs.view("velocity_y"),
                     fs.view("obstacle"), fs.view("vorticity"))


class LBMSolver3D(LatticeBoltzmannSolver):
    """D3Q19 BGK; lateral faces are closed by bounce-back."""

    kind = LBM_3D
    dimension = DIM_3D
    c = D3Q19_C
    w = D3Q19_W
    opp = D3Q19_OPP
    _velocity_names = ("velocity_x", "velocity_y", "velocity_z")

    def compute_vorticity(self) -> None:
        fs = self.fields
        vorticity_3d(fs.view("velocity_x"), fs.view("velocity_y"),
                     fs.view("velocity_z"), fs.view("obstacle"),
                     fs.view("vorticity"))
