"""
Vortex-sheet shedding model in 2D.

A sheet of point vortices sits on the row j_s = ny // 2. Each step the
station strengths relax towards a travelling sine,

    gamma_i <- 0.95 * gamma_i + 0.05 * sin(0.05 * n + 0.01 * i),

and the induced vertical velocity of every interior cell is summed over the
stations within a window of +-12 columns:

    v(i, j) = sum_s gamma_s / (4 * pi * d),
    d = sign(j - j_s) * sqrt((i - s)^2 + dy^2),   dy = j - j_s (0 -> 0.5).

The streamwise velocity is the uniform 0.7 * Mach. Loads are prescribed
functions of the iteration count and do not depend on the flow field.
"""

import numpy as np

from ..constants import VORTEX_2D, DIM_2D
from ..numerics.forces import lift_to_drag
from .base import FlowSolver

WINDOW = 12
MARGIN = 2


class VortexSheetSolver2D(FlowSolver):
    """Prescribed vortex sheet with Biot-Savart style induced velocity."""

    kind = VORTEX_2D
    dimension = DIM_2D

    def _on_new_fields(self) -> None:
        self.scratch.ensure("gamma", (self.fields.nx,))[:] = 0.0

    @property
    def sheet_row(self) -> int:
        return self.fields.ny // 2

    @property
    def strengths(self) -> np.ndarray:
        """Vortex strength per column (zero outside the shedding stations)."""
        return self.scratch.ensure("gamma", (self.fields.nx,))

    def shed(self) -> None:
        n = self.state.iterations
        gamma = self.strengths
        i = np.arange(MARGIN, len(gamma) - MARGIN)
        gamma[i] = 0.95 * gamma[i] + 0.05 * np.sin(n * 0.05 + i * 0.01)

    def induced_velocity(self) -> np.ndarray:
        """Vertical velocity induced by the sheet on the whole (ny, nx) grid."""
        fs = self.fields
        ny, nx = fs.shape
        gamma = self.strengths

        dy = np.arange(ny, dtype=np.float64) - self.sheet_row
        sign = np.where(dy < 0, -1.0, 1.0)
        dy[dy == 0] = 0.5

        v = np.zeros((ny, nx))
        padded = np.pad(gamma, WINDOW)
        for dx in range(-WINDOW, WINDOW + 1):
            g = padded[WINDOW + dx: WINDOW + dx + nx]
            d = sign[:, None] * np.sqrt(dx * dx + dy[:, None] ** 2)
            v += g[None, :] / (4.0 * np.pi * d)
        return v

    def _advance(self) -> None:
        fs = self.fields
        self.shed()
        v_ind = self.induced_velocity()

        u = fs.view("velocity_x")
        v = fs.view("velocity_y")
        w = fs.view("vorticity")
        solid = fs.view("obstacle") != 0
        inner = (slice(MARGIN, -MARGIN), slice(MARGIN, -MARGIN))

        u[inner] = 0.7 * self.state.params.mach
        v[inner] = v_ind[inner]
        w[inner] = 0.6 * v_ind[inner]

        interior_solid = np.zeros_like(solid)
        interior_solid[inner] = solid[inner]
        u[interior_solid] = 0.0
        v[interior_solid] = 0.0
        w[interior_solid] = 0.0

        self.update_loads()

    def update_loads(self) -> None:
        n = self.state.iterations
        drag = 0.01 + 0.02 * abs(np.sin(n / 80.0))
        lift = 0.6 * np.sin(n / 100.0)
        self._publish(drag, lift, lift_to_drag(lift, drag), 0.2)
