"""
Aerodynamic load estimates on voxelized obstacles.

There is no resolved body surface on a voxel grid, so loads are estimated
from field differences across every interior solid cell: the pressure
jump between the +x and -x neighbours drives drag, the jump between the
+y and -y neighbours drives lift (and +z/-z the side force in 3D).

Grid-shaped views are used throughout: axis -1 is x, axis -2 is y and,
for 3D grids, axis 0 is z.
"""

from collections import deque
from typing import NamedTuple, Iterable, Optional

import numpy as np


class AeroCoefficients(NamedTuple):
    """Aerodynamic load coefficients."""
    drag: float
    lift: float
    side: float          # Zero on 2D grids
    lift_to_drag: float


def interior_solid_mask(obstacle: np.ndarray) -> np.ndarray:
    """Solid cells at least one layer away from every domain face."""
    inner = tuple(slice(1, -1) for _ in range(obstacle.ndim))
    return obstacle[inner] != 0


def neighbour_difference_sum(field: np.ndarray, solid_inner: np.ndarray,
                             axis: int) -> float:
    """Sum of f[+1] - f[-1] along ``axis`` over interior solid cells."""
    ndim = field.ndim
    axis = axis % ndim
    plus = [slice(1, -1)] * ndim
    minus = [slice(1, -1)] * ndim
    plus[axis] = slice(2, None)
    minus[axis] = slice(None, -2)
    diff = field[tuple(plus)] - field[tuple(minus)]
    return float(diff[solid_inner].sum())


def lift_to_drag(lift: float, drag: float) -> float:
    """L/D with a zero guard on drag."""
    if drag == 0.0:
        return 0.0
    return lift / drag


def lattice_coefficients(pressure: np.ndarray, velocity_x: np.ndarray,
                         obstacle: np.ndarray, rho0: float,
                         u0: float) -> AeroCoefficients:
    """
    Drag/lift/side coefficients used by the lattice Boltzmann solvers.

    drag = sum of 0.5*dp_x + 0.02*du_x, lift = sum of 0.5*dp_y and
    side = sum of 0.5*dp_z over interior solid cells, normalized by the
    dynamic pressure 0.5*rho0*u0^2 times max(solid count, 1).
    """
    solid = interior_solid_mask(obstacle)
    area = int(solid.sum())

    drag = (0.5 * neighbour_difference_sum(pressure, solid, axis=-1)
            + 0.02 * neighbour_difference_sum(velocity_x, solid, axis=-1))
    lift = 0.5 * neighbour_difference_sum(pressure, solid, axis=-2)
    side = 0.0
    if pressure.ndim == 3:
        side = 0.5 * neighbour_difference_sum(pressure, solid, axis=0)

    dyn = 0.5 * rho0 * u0 * u0 * max(area, 1)
    if dyn == 0.0:
        return AeroCoefficients(0.0, 0.0, 0.0, 0.0)
    cd, cl, cs = drag / dyn, lift / dyn, side / dyn
    return AeroCoefficients(cd, cl, cs, lift_to_drag(cl, cd))


def pressure_coefficients(pressure: np.ndarray,
                          obstacle: np.ndarray) -> AeroCoefficients:
    """Mean pressure jump across interior solid cells (x for drag, y for lift)."""
    solid = interior_solid_mask(obstacle)
    norm = max(int(solid.sum()), 1)
    drag = neighbour_difference_sum(pressure, solid, axis=-1) / norm
    lift = neighbour_difference_sum(pressure, solid, axis=-2) / norm
    return AeroCoefficients(drag, lift, 0.0, lift_to_drag(lift, drag))


def frontal_extent(obstacle: np.ndarray) -> int:
    """Number of distinct y rows that contain a solid cell."""
    other_axes = tuple(a for a in range(obstacle.ndim) if a != obstacle.ndim - 2)
    rows = np.any(obstacle != 0, axis=other_axes)
    return int(rows.sum())


# =============================================================================
# Strouhal number
# =============================================================================

def strouhal_from_history(samples: Iterable[float], length: float,
                          speed: float, min_samples: int = 8) -> float:
    """
    Shedding frequency from zero crossings of the lift signal.

    Parameters
    ----------
    samples : iterable of float
        Lift coefficient history, one sample per step.
    length : float
        Reference length in cells (obstacle frontal extent).
    speed : float
        Reference speed in lattice units per step.

    Returns
    -------
    St : float
        f * length / speed clipped to [0, 1], where f is half the number of
        sign changes of (lift - mean) per sample. 0 when the history is too
        short or the speed is zero.
    """
    x = np.asarray(list(samples), dtype=np.float64)
    if x.size < min_samples or speed == 0.0:
        return 0.0
    s = np.sign(x - x.mean())
    s = s[s != 0]
    crossings = int(np.count_nonzero(s[1:] != s[:-1]))
    freq = crossings / (2.0 * x.size)
    return float(np.clip(freq * length / speed, 0.0, 1.0))


class LiftHistory:
    """Rolling window of lift samples for the Strouhal estimate."""

    def __init__(self, maxlen: int = 512):
        self._samples = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, lift: float) -> None:
        if np.isfinite(lift):
            self._samples.append(float(lift))

    def clear(self) -> None:
        self._samples.clear()

    def strouhal(self, length: float, speed: float,
                 min_samples: Optional[int] = None) -> float:
        if min_samples is None:
            return strouhal_from_history(self._samples, length, speed)
        return strouhal_from_history(self._samples, length, speed, min_samples)
