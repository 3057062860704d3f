"""
Semi-Lagrangian incompressible Navier-Stokes in 2D.

Per step:
    1. Advect u and v backward along (u, v) * dt (bilinear sampling)
    2. Implicit diffusion, 8 Gauss-Seidel sweeps with a = dt * nu * nx * ny
    3. Pressure projection, 20 Jacobi iterations
    4. Zero velocity in solids, inlet/outlet/wall boundaries
    5. Pressure field := projection pressure, vorticity

Loads are a prescribed ramp and oscillation in the iteration count; the
solver is meant for qualitative wake pictures, not for force estimates.
"""

import numpy as np

from ..constants import NS_2D, DIM_2D
from ..numerics.relaxation import (
    advect_kernel,
    diffuse_kernel,
    divergence_kernel,
    jacobi_pressure_kernel,
    subtract_gradient_kernel,
)
from ..numerics.gradients import vorticity_2d
from ..numerics.forces import lift_to_drag
from .base import FlowSolver

DIFFUSION_SWEEPS = 8
PRESSURE_ITERATIONS = 20


class NavierStokesSolver2D(FlowSolver):
    """Stable-fluids style solver on the 2D field set."""

    kind = NS_2D
    dimension = DIM_2D

    def _advance(self) -> None:
        fs = self.fields
        params = self.state.params
        shape = fs.shape
        u = fs.view("velocity_x")
        v = fs.view("velocity_y")
        solid = fs.view("obstacle")

        u_new = self.scratch.ensure("u", shape)
        v_new = self.scratch.ensure("v", shape)
        work = self.scratch.ensure("work", shape)

        advect_kernel(u, u, v, solid, params.dt, u_new)
        advect_kernel(v, u, v, solid, params.dt, v_new)

        a = params.dt * params.viscosity * fs.nx * fs.ny
        for comp in (u_new, v_new):
            work[:] = comp
            diffuse_kernel(comp, work, a, DIFFUSION_SWEEPS)

        self.project(u_new, v_new, solid)

        u[:] = np.where(solid != 0, 0.0, u_new)
        v[:] = np.where(solid != 0, 0.0, v_new)
        self.apply_boundaries(u, v)

        fs.view("pressure")[:] = self.scratch.ensure("p", shape)
        vorticity_2d(u, v, solid, fs.view("vorticity"))
        self.update_loads()

    def project(self, u: np.ndarray, v: np.ndarray, solid: np.ndarray) -> None:
        """Remove the discrete divergence of (u, v) in place."""
        shape = u.shape
        div = self.scratch.ensure("div", shape)
        p = self.scratch.ensure("p", shape)
        p_tmp = self.scratch.ensure("p_tmp", shape)

        divergence_kernel(u, v, solid, div)
        jacobi_pressure_kernel(p, p_tmp, div, PRESSURE_ITERATIONS)
        subtract_gradient_kernel(u, v, p)

    def apply_boundaries(self, u: np.ndarray, v: np.ndarray) -> None:
        """Inlet u0 at x = 0; zero-gradient at the outlet and both walls."""
        u0 = self.state.params.inlet_velocity
        u[:, -1] = u[:, -2]
        v[:, -1] = v[:, -2]
        u[0, :] = u[1, :]
        v[0, :] = v[1, :]
        u[-1, :] = u[-2, :]
        v[-1, :] = v[-2, :]
        u[:, 0] = u0
        v[:, 0] = 0.0

    def update_loads(self) -> None:
        n = self.state.iterations
        drag = 0.2 * np.tanh(n / 500.0)
        lift = 0.1 * np.sin(n / 120.0)
        self._publish(drag, lift, lift_to_drag(lift, drag), 0.2 * abs(lift))
