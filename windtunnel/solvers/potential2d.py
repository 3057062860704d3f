"""
Potential flow in 2D by Jacobi relaxation of the perturbation potential.

The total velocity is grad(phi) + (U, 0) with U = 0.4 * Mach. phi is held
at zero on the domain border and inside solids; obstacle faces are made
impermeable through mirrored neighbour values (see
``numerics.relaxation``). The potential persists across steps, so every
step continues the relaxation from where the last one stopped.
"""

import numpy as np

from ..constants import POTENTIAL_2D, DIM_2D
from ..numerics.relaxation import potential_jacobi_kernel, laplace_residual
from ..numerics.forces import pressure_coefficients
from .base import FlowSolver

SWEEPS_PER_STEP = 40


class PotentialFlowSolver2D(FlowSolver):
    """Irrotational, inviscid model; vorticity is identically zero."""

    kind = POTENTIAL_2D
    dimension = DIM_2D

    def _on_new_fields(self) -> None:
        self.scratch.ensure("phi", self.fields.shape)[:] = 0.0

    @property
    def freestream_speed(self) -> float:
        return 0.4 * self.state.params.mach

    @property
    def potential(self) -> np.ndarray:
        """Perturbation potential, shape (ny, nx)."""
        return self.scratch.ensure("phi", self.fields.shape)

    def relax(self, sweeps: int = SWEEPS_PER_STEP) -> None:
        """Run ``sweeps`` Jacobi sweeps on the stored potential."""
        fs = self.fields
        phi = self.potential
        phi_tmp = self.scratch.ensure("phi_tmp", fs.shape)
        potential_jacobi_kernel(phi, phi_tmp, fs.view("obstacle"),
                                self.freestream_speed, sweeps)

    def residual(self) -> float:
        """L2 residual of the discrete Laplace equation for the stored potential."""
        return laplace_residual(self.potential, self.fields.view("obstacle"),
                                self.freestream_speed)

    def _advance(self) -> None:
        fs = self.fields
        self.relax()

        phi = self.potential
        solid = fs.view("obstacle") != 0
        u = fs.view("velocity_x")
        v = fs.view("velocity_y")
        U = self.freestream_speed

        u[1:-1, 1:-1] = 0.5 * (phi[1:-1, 2:] - phi[1:-1, :-2]) + U
        v[1:-1, 1:-1] = 0.5 * (phi[2:, 1:-1] - phi[:-2, 1:-1])
        u[solid] = 0.0
        v[solid] = 0.0

        p = fs.view("pressure")
        p[1:-1, 1:-1] = 1.0 - 0.5 * (u[1:-1, 1:-1] ** 2 + v[1:-1, 1:-1] ** 2)
        fs.vorticity[:] = 0.0

        coeffs = pressure_coefficients(p, fs.view("obstacle"))
        self._publish(coeffs.drag, coeffs.lift, coeffs.lift_to_drag, 0.0)
