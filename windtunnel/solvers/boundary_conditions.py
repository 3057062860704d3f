"""
Boundary conditions for the uniform wind-tunnel grids.

Layout (x is the streamwise direction, last array axis):

        y = ny-1  ═══════════════════════════  wall (2D free slip)
                  │                         │
        x = 0  →  │  inlet        outlet    │  ← x = nx-1
                  │                         │
        y = 0     ═══════════════════════════  wall (2D free slip)

Inlet: Dirichlet freestream. Outlet: zero-gradient copy of the first
interior column. In 3D the lattice solver leaves the four lateral faces to
bounce-back; the Euler solver leaves them at their stored values.

All functions take grid-shaped views ((ny, nx[, Q]) or (nz, ny, nx[, Q]))
and modify them in place.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..constants import CS, GAMMA, D2Q9_C
from ..numerics.lattice import equilibrium
from ..numerics.euler import total_energy


@dataclass
class FreestreamConditions:
    """Freestream state imposed at the inlet."""

    rho: float = 1.0        # Density
    u: float = 0.0          # Streamwise velocity
    p: float = 1.0          # Pressure (lattice: p = rho)

    @classmethod
    def lattice(cls, mach: float, rho0: float = 1.0) -> 'FreestreamConditions':
        """Lattice units: u0 = Mach * c_s, p = rho."""
        return cls(rho=rho0, u=mach * CS, p=rho0)

    @classmethod
    def compressible(cls, mach: float) -> 'FreestreamConditions':
        """Normalized gas state with unit sound speed: rho=1, p=1/gamma, u=Mach."""
        return cls(rho=1.0, u=mach, p=1.0 / GAMMA)

    @property
    def energy(self) -> float:
        return total_energy(self.rho, self.u, 0.0, 0.0, self.p)


# =============================================================================
# Lattice Boltzmann
# =============================================================================

def apply_lbm_inlet_outlet(f: np.ndarray, velocities: Sequence[np.ndarray],
                           density: np.ndarray, freestream: FreestreamConditions,
                           c: np.ndarray, w: np.ndarray) -> None:
    """
    Equilibrium inlet at x = 0 and copy outlet at x = nx-1.

    Parameters
    ----------
    f : ndarray, shape spatial + (Q,)
        Distribution view.
    velocities : sequence of ndarray, each of spatial shape
        Velocity views (x component first).
    density : ndarray
        Density view.
    freestream : FreestreamConditions
    c, w : ndarray
        Lattice velocities and weights.
    """
    dim = c.shape[1]
    u_in = (freestream.u,) + (0.0,) * (dim - 1)
    f[..., 0, :] = equilibrium(freestream.rho, u_in, c, w)
    for comp, value in zip(velocities, u_in):
        comp[..., 0] = value
    density[..., 0] = freestream.rho

    f[..., -1, :] = f[..., -2, :]
    for comp in velocities:
        comp[..., -1] = comp[..., -2]
    density[..., -1] = density[..., -2]


def _mirror_pairs(c: np.ndarray, axis: int):
    """(k, k') pairs where c[k'] is c[k] with component ``axis`` negated."""
    pairs = []
    for k in range(c.shape[0]):
        if c[k, axis] > 0:
            target = c[k].copy()
            target[axis] = -target[axis]
            k_mirror = int(np.where((c == target).all(axis=1))[0][0])
            pairs.append((k, k_mirror))
    return pairs


_D2Q9_Y_PAIRS = _mirror_pairs(D2Q9_C, axis=1)


def apply_free_slip_walls_2d(f: np.ndarray, ux: np.ndarray, uy: np.ndarray) -> None:
    """
    Free-slip walls on the bottom (y = 0) and top (y = ny-1) rows.

    Each wall row takes the populations of its neighbouring row, then the
    populations pointing into the domain are replaced by the specular
    reflection of those pointing out of it. Normal velocity is zeroed.

    Parameters
    ----------
    f : ndarray, shape (ny, nx, 9)
        D2Q9 distribution view.
    ux, uy : ndarray, shape (ny, nx)
    """
    f[0] = f[1]
    f[-1] = f[-2]
    for up, down in _D2Q9_Y_PAIRS:
        f[0, :, up] = f[0, :, down]
        f[-1, :, down] = f[-1, :, up]

    ux[0] = ux[1]
    ux[-1] = ux[-2]
    uy[0] = 0.0
    uy[-1] = 0.0


# =============================================================================
# Compressible Euler
# =============================================================================

def apply_euler_inlet_outlet(rho: np.ndarray, u: np.ndarray, v: np.ndarray,
                             w: np.ndarray, p: np.ndarray, E: np.ndarray,
                             freestream: FreestreamConditions) -> None:
    """Dirichlet freestream at x = 0, zero-gradient copy at x = nx-1 (3D views)."""
    rho[..., 0] = freestream.rho
    u[..., 0] = freestream.u
    v[..., 0] = 0.0
    w[..., 0] = 0.0
    p[..., 0] = freestream.p
    E[..., 0] = freestream.energy

    for arr in (rho, u, v, w, p, E):
        arr[..., -1] = arr[..., -2]
