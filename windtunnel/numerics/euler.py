"""
Compressible Euler equations in 3D: fluxes and explicit update.

Conserved variables are stacked along a leading axis,
U = [rho, rho*u, rho*v, rho*w, E], each of shape (nz, ny, nx).
Axis order of the spatial block is z, y, x.

Update (unit spacing):
    U_new = U - 0.5*dt * sum_d (F_d[+1] - F_d[-1]) + eps * (sum6 - 6U)

applied to interior fluid cells only; every other cell keeps its value.
"""

from typing import Tuple

import numpy as np

from windtunnel.physics.jax_config import jax, jnp
from ..constants import GAMMA
from .dissipation import artificial_viscosity, interior_slices

DENSITY_FLOOR = 1e-6
PRESSURE_FLOOR = 1e-6


def total_energy(rho, u, v, w, p, gamma: float = GAMMA):
    """E = p/(gamma-1) + 0.5*rho*|u|^2."""
    return p / (gamma - 1.0) + 0.5 * rho * (u * u + v * v + w * w)


def conserved_from_primitives(rho, u, v, w, E) -> jnp.ndarray:
    """Stack (rho, rho*u, rho*v, rho*w, E) into a (5, nz, ny, nx) array."""
    return jnp.stack([rho, rho * u, rho * v, rho * w, E])


def primitives_from_conserved(U: jnp.ndarray, gamma: float = GAMMA):
    """
    Recover (rho, u, v, w, p, E) with density and pressure floors.

    Returns
    -------
    rho, u, v, w, p, E : jnp.ndarray (nz, ny, nx)
    """
    rho = jnp.maximum(U[0], DENSITY_FLOOR)
    u = U[1] / rho
    v = U[2] / rho
    w = U[3] / rho
    E = U[4]
    p = (gamma - 1.0) * (E - 0.5 * rho * (u * u + v * v + w * w))
    p = jnp.maximum(p, PRESSURE_FLOOR)
    return rho, u, v, w, p, E


def euler_fluxes(rho, u, v, w, p, E) -> Tuple[jnp.ndarray, jnp.ndarray, jnp.ndarray]:
    """
    Inviscid fluxes in x, y and z.

    Returns
    -------
    F, G, H : jnp.ndarray (5, nz, ny, nx)
    """
    F = jnp.stack([rho * u, rho * u * u + p, rho * u * v, rho * u * w, (E + p) * u])
    G = jnp.stack([rho * v, rho * v * u, rho * v * v + p, rho * v * w, (E + p) * v])
    H = jnp.stack([rho * w, rho * w * u, rho * w * v, rho * w * w + p, (E + p) * w])
    return F, G, H


def flux_difference(F: jnp.ndarray, G: jnp.ndarray, H: jnp.ndarray) -> jnp.ndarray:
    """Sum of central flux differences on the interior block."""
    return ((F[..., 1:-1, 1:-1, 2:] - F[..., 1:-1, 1:-1, :-2])
            + (G[..., 1:-1, 2:, 1:-1] - G[..., 1:-1, :-2, 1:-1])
            + (H[..., 2:, 1:-1, 1:-1] - H[..., :-2, 1:-1, 1:-1]))


@jax.jit
def euler_update(rho, u, v, w, p, E, fluid, dt, eps):
    """
    One explicit step of the central-flux scheme with artificial viscosity.

    Parameters
    ----------
    rho, u, v, w, p, E : jnp.ndarray (nz, ny, nx)
        Current primitive fields and total energy.
    fluid : jnp.ndarray (nz, ny, nx), bool
        True on fluid cells.
    dt : float
        Time step.
    eps : float
        Artificial viscosity coefficient.

    Returns
    -------
    rho, u, v, w, p, E : jnp.ndarray (nz, ny, nx)
        Updated fields; cells outside the interior fluid region are returned
        unchanged.
    """
    U = conserved_from_primitives(rho, u, v, w, E)
    F, G, H = euler_fluxes(rho, u, v, w, p, E)

    inner = interior_slices()
    dU = jnp.zeros_like(U).at[inner].set(-0.5 * dt * flux_difference(F, G, H))
    dU = dU + artificial_viscosity(U, eps)

    interior = jnp.zeros(fluid.shape, dtype=bool).at[1:-1, 1:-1, 1:-1].set(True)
    active = interior & fluid
    U_new = jnp.where(active[None], U + dU, U)

    rho_n, u_n, v_n, w_n, p_n, E_n = primitives_from_conserved(U_new)
    # Inactive cells keep their stored primitives exactly
    keep = ~active
    return (jnp.where(keep, rho, rho_n), jnp.where(keep, u, u_n),
            jnp.where(keep, v, v_n), jnp.where(keep, w, w_n),
            jnp.where(keep, p, p_n), jnp.where(keep, E, E_n))


def max_wave_speed(rho: np.ndarray, u: np.ndarray, v: np.ndarray,
                   w: np.ndarray, p: np.ndarray, stride: int = 100,
                   gamma: float = GAMMA) -> float:
    """Largest |u| + c over every ``stride``-th cell of the flat fields."""
    r = np.maximum(rho[::stride], DENSITY_FLOOR)
    c = np.sqrt(gamma * np.maximum(p[::stride], 0.0) / r)
    q = np.sqrt(u[::stride] ** 2 + v[::stride] ** 2 + w[::stride] ** 2)
    return float(np.max(q + c)) if r.size else 0.0


def cfl_time_step(max_speed: float, cfl: float = 0.5) -> float:
    """dt = CFL / (max wave speed + 1e-6), unit spacing."""
    return cfl / (max_speed + 1e-6)
