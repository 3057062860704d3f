"""
Compressible Euler solver in 3D.

Normalized freestream: rho = 1, p = 1/gamma (unit sound speed), u = Mach.
The primitive fields live in the 3D field set; total energy is kept in a
private buffer. The update kernel runs in JAX (float64); the field set is
written back after every step.

Loads are not integrated for this solver: drag, lift, L/D and Strouhal are
reported as zero.
"""

import numpy as np
from loguru import logger

from windtunnel.physics.jax_config import jnp
from ..constants import EULER_3D, DIM_3D, GAMMA
from ..numerics.euler import euler_update, max_wave_speed, cfl_time_step
from ..numerics.gradients import vorticity_3d
from .base import FlowSolver
from .boundary_conditions import FreestreamConditions, apply_euler_inlet_outlet

CFL = 0.5
ARTIFICIAL_VISCOSITY = 0.1


class EulerSolver3D(FlowSolver):
    """Central flux difference with second-difference artificial viscosity."""

    kind = EULER_3D
    dimension = DIM_3D

    def _on_new_fields(self) -> None:
        self.initialize()

    @property
    def freestream(self) -> FreestreamConditions:
        return FreestreamConditions.compressible(self.state.params.mach)

    @property
    def energy(self) -> np.ndarray:
        """Total energy, shape (nz, ny, nx)."""
        return self.scratch.ensure("energy", self.fields.shape)

    def initialize(self) -> None:
        """Write the uniform freestream into the 3D fields; solids at rest."""
        fs = self.fields
        fr = self.freestream
        solid = fs.obstacle != 0

        fs.density[:] = fr.rho
        fs.pressure[:] = fr.p
        fs.velocity_x[:] = np.where(solid, 0.0, fr.u)
        fs.velocity_y[:] = 0.0
        fs.velocity_z[:] = 0.0
        fs.vorticity[:] = 0.0

        E = self.energy.reshape(-1)
        E[:] = np.where(solid, fr.p / (GAMMA - 1.0), fr.energy)
        logger.debug(f"Euler freestream: rho={fr.rho}, p={fr.p:.4f}, u={fr.u}")

    def time_step(self) -> float:
        fs = self.fields
        speed = max_wave_speed(fs.density, fs.velocity_x, fs.velocity_y,
                               fs.velocity_z, fs.pressure)
        return cfl_time_step(speed, CFL)

    def _advance(self) -> None:
        fs = self.fields
        dt = self.time_step()

        names = ("density", "velocity_x", "velocity_y", "velocity_z", "pressure")
        views = [fs.view(name) for name in names]
        E = self.energy
        fluid = jnp.asarray(fs.view("obstacle") == 0)

        result = euler_update(*(jnp.asarray(a) for a in views), jnp.asarray(E),
                              fluid, dt, ARTIFICIAL_VISCOSITY)
        for view, new in zip(views + [E], result):
            view[:] = np.asarray(new)

        apply_euler_inlet_outlet(*views, E, self.freestream)
        vorticity_3d(fs.view("velocity_x"), fs.view("velocity_y"),
                     fs.view("velocity_z"), fs.view("obstacle"),
                     fs.view("vorticity"))
        self._publish(0.0, 0.0, 0.0, 0.0)
