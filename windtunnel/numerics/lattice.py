"""
Lattice-Boltzmann kernels (BGK collision and streaming).

The kernels are written once for any DdQq stencil: the lattice velocities
``c`` have shape (Q, D) and distributions are stored per cell with shape
(n_cells, Q). Cells are numbered ``(z * ny + y) * nx + x``; 2D grids use
``nz = 1``.

Streaming is pull-free and mass-conserving: a population leaving a fluid
cell either lands in exactly one fluid neighbour or is reflected into the
opposite slot of its source cell (bounce-back). Cells outside the domain
are treated like solid cells, so a collide/stream cycle without open
boundaries conserves the total density exactly.
"""

import numpy as np
from numba import njit


def relaxation_rate(viscosity: float) -> float:
    """BGK relaxation rate omega = 1 / (3 nu + 1/2)."""
    return 1.0 / (3.0 * viscosity + 0.5)


def equilibrium(rho, velocities, c: np.ndarray, w: np.ndarray) -> np.ndarray:
    """
    Second-order equilibrium distribution.

    Parameters
    ----------
    rho : ndarray or float
        Density, any shape S.
    velocities : sequence of ndarray or float
        One velocity component per lattice dimension, each broadcastable to S.
    c : ndarray, shape (Q, D)
        Lattice velocities.
    w : ndarray, shape (Q,)
        Lattice weights.

    Returns
    -------
    f_eq : ndarray, shape S + (Q,)
    """
    rho = np.asarray(rho, dtype=np.float64)
    u = [np.broadcast_to(np.asarray(v, dtype=np.float64), rho.shape) for v in velocities]
    u2 = sum(ui * ui for ui in u)
    f_eq = np.empty(rho.shape + (c.shape[0],), dtype=np.float64)
    for k in range(c.shape[0]):
        cu = sum(c[k, d] * u[d] for d in range(c.shape[1]))
        f_eq[..., k] = w[k] * rho * (1.0 + 3.0 * cu + 4.5 * cu * cu - 1.5 * u2)
    return f_eq


@njit(cache=True)
def collide_kernel(f, solid, c, w, omega, rho, pressure, u):
    """
    BGK collision on every fluid cell, in place.

    Parameters
    ----------
    f : ndarray, shape (n_cells, Q)
        Distributions, relaxed in place.
    solid : ndarray, shape (n_cells,)
        Obstacle mask (non-zero = solid, skipped).
    c : ndarray, shape (Q, D)
        Lattice velocities.
    w : ndarray, shape (Q,)
        Lattice weights.
    omega : float
        Relaxation rate.
    rho, pressure : ndarray, shape (n_cells,)
        Output density and lattice pressure (p = rho in lattice units).
    u : tuple of D ndarrays, shape (n_cells,)
        Output velocity components.
    """
    n_cells = f.shape[0]
    q = f.shape[1]
    dim = c.shape[1]
    vel = np.zeros(dim)

    for idx in range(n_cells):
        if solid[idx]:
            continue

        r = 0.0
        for d in range(dim):
            vel[d] = 0.0
        for k in range(q):
            fk = f[idx, k]
            r += fk
            for d in range(dim):
                vel[d] += fk * c[k, d]

        if r <= 1e-12:
            continue

        u2 = 0.0
        for d in range(dim):
            vel[d] /= r
            u[d][idx] = vel[d]
            u2 += vel[d] * vel[d]
        rho[idx] = r
        pressure[idx] = r

        for k in range(q):
            cu = 0.0
            for d in range(dim):
                cu += c[k, d] * vel[d]
            feq = w[k] * r * (1.0 + 3.0 * cu + 4.5 * cu * cu - 1.5 * u2)
            f[idx, k] -= omega * (f[idx, k] - feq)


@njit(cache=True)
def stream_kernel(f, f_post, solid, c, opp, nx, ny, nz):
    """
    Stream post-collision populations with bounce-back at solid cells.

    Parameters
    ----------
    f : ndarray, shape (n_cells, Q)
        Destination distributions (every slot is overwritten).
    f_post : ndarray, shape (n_cells, Q)
        Post-collision distributions (read only).
    solid : ndarray, shape (n_cells,)
        Obstacle mask.
    c : ndarray, shape (Q, D)
        Lattice velocities, D = 2 or 3.
    opp : ndarray, shape (Q,)
        Opposite-direction table.
    nx, ny, nz : int
        Grid extents (nz = 1 for 2D).
    """
    q = c.shape[0]
    dim = c.shape[1]

    for z in range(nz):
        for y in range(ny):
            for x in range(nx):
                idx = (z * ny + y) * nx + x

                # Solid cells hold their populations
                if solid[idx]:
                    for k in range(q):
                        f[idx, k] = f_post[idx, k]
                    continue

                for k in range(q):
                    tx = x + c[k, 0]
                    ty = y + c[k, 1]
                    tz = z
                    if dim == 3:
                        tz = z + c[k, 2]

                    inside = (0 <= tx < nx) and (0 <= ty < ny) and (0 <= tz < nz)
                    if inside:
                        target = (tz * ny + ty) * nx + tx
                        if not solid[target]:
                            f[target, k] = f_post[idx, k]
                            continue

                    f[idx, opp[k]] = f_post[idx, k]
