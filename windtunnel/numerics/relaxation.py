"""
Stencil kernels for the incompressible 2D solvers.

All kernels take grid-shaped arrays indexed ``[j, i]`` (shape (ny, nx),
unit spacing) and update only interior cells unless stated otherwise.

Semi-Lagrangian advection, Gauss-Seidel diffusion, Jacobi pressure
projection and the Jacobi relaxation of the perturbation potential.
Jacobi kernels are double-buffered: a sweep reads one buffer and writes
the other, so no cell sees a value from the sweep it belongs to.
"""

import numpy as np
from numba import njit


# =============================================================================
# Semi-Lagrangian advection
# =============================================================================

@njit(cache=True)
def bilinear_sample(field, x, y):
    """Bilinear interpolation of ``field`` at fractional position (x, y)."""
    i0 = int(np.floor(x))
    j0 = int(np.floor(y))
    s1 = x - i0
    s0 = 1.0 - s1
    t1 = y - j0
    t0 = 1.0 - t1
    return (s0 * (t0 * field[j0, i0] + t1 * field[j0 + 1, i0])
            + s1 * (t0 * field[j0, i0 + 1] + t1 * field[j0 + 1, i0 + 1]))


@njit(cache=True)
def advect_kernel(src, u, v, solid, dt, out):
    """
    Trace each interior fluid cell back along (u, v)*dt and sample ``src``.

    Departure points are clamped to [0.5, n - 1.5]. Solid cells get 0 and
    boundary cells copy ``src``.
    """
    ny, nx = src.shape
    for j in range(ny):
        for i in range(nx):
            if j == 0 or j == ny - 1 or i == 0 or i == nx - 1:
                out[j, i] = src[j, i]
                continue
            if solid[j, i]:
                out[j, i] = 0.0
                continue
            x = min(max(i - dt * u[j, i], 0.5), nx - 1.5)
            y = min(max(j - dt * v[j, i], 0.5), ny - 1.5)
            out[j, i] = bilinear_sample(src, x, y)


# =============================================================================
# Diffusion
# =============================================================================

@njit(cache=True)
def diffuse_kernel(field, field0, a, sweeps):
    """
    Implicit diffusion by in-place Gauss-Seidel sweeps.

    Solves (1 + 4a) x - a * sum(neighbours) = x0 approximately, with
    ``field0`` holding x0 and ``field`` the running iterate.
    """
    ny, nx = field.shape
    denom = 1.0 + 4.0 * a
    for _ in range(sweeps):
        for j in range(1, ny - 1):
            for i in range(1, nx - 1):
                field[j, i] = (field0[j, i]
                               + a * (field[j, i - 1] + field[j, i + 1]
                                      + field[j - 1, i] + field[j + 1, i])) / denom


# =============================================================================
# Pressure projection
# =============================================================================

@njit(cache=True)
def divergence_kernel(u, v, solid, div):
    """div = -0.5 * (du/dx + dv/dy) on interior fluid cells, 0 elsewhere."""
    ny, nx = u.shape
    div[:, :] = 0.0
    for j in range(1, ny - 1):
        for i in range(1, nx - 1):
            if solid[j, i]:
                continue
            div[j, i] = -0.5 * (u[j, i + 1] - u[j, i - 1]
                                + v[j + 1, i] - v[j - 1, i])


@njit(cache=True)
def jacobi_pressure_kernel(p, p_tmp, div, iterations):
    """
    Jacobi iterations for the pressure Poisson equation.

    Pressure starts at zero and stays zero on the boundary. The result is
    left in ``p``; ``p_tmp`` is scratch.
    """
    ny, nx = p.shape
    p[:, :] = 0.0
    p_tmp[:, :] = 0.0
    src = p
    dst = p_tmp
    for _ in range(iterations):
        for j in range(1, ny - 1):
            for i in range(1, nx - 1):
                dst[j, i] = 0.25 * (div[j, i] + src[j, i - 1] + src[j, i + 1]
                                    + src[j - 1, i] + src[j + 1, i])
        src, dst = dst, src
    if iterations % 2 == 1:
        p[:, :] = p_tmp


@njit(cache=True)
def subtract_gradient_kernel(u, v, p):
    """Remove 0.5 * central pressure gradient from (u, v) on interior cells."""
    ny, nx = u.shape
    for j in range(1, ny - 1):
        for i in range(1, nx - 1):
            u[j, i] -= 0.5 * (p[j, i + 1] - p[j, i - 1])
            v[j, i] -= 0.5 * (p[j + 1, i] - p[j - 1, i])


# =============================================================================
# Perturbation potential
# =============================================================================
#
# Unknowns are the interior fluid cells. Border cells are Dirichlet (phi = 0).
# A solid neighbour is replaced by the mirrored value that makes the total
# normal velocity (grad phi + U) vanish on that face:
#   +x solid: phi_self - U     -x solid: phi_self + U     +-y solid: phi_self

@njit(cache=True)
def _neighbour_sum(phi, solid, j, i, u_inf):
    c = phi[j, i]
    total = 0.0
    total += c - u_inf if solid[j, i + 1] else phi[j, i + 1]
    total += c + u_inf if solid[j, i - 1] else phi[j, i - 1]
    total += c if solid[j + 1, i] else phi[j + 1, i]
    total += c if solid[j - 1, i] else phi[j - 1, i]
    return total


@njit(cache=True)
def potential_jacobi_kernel(phi, phi_tmp, solid, u_inf, sweeps):
    """
    Jacobi sweeps of the 4-point average for the perturbation potential.

    Solid and border cells are held at zero. Result is left in ``phi``.
    """
    ny, nx = phi.shape
    for j in range(ny):
        for i in range(nx):
            if solid[j, i] or j == 0 or j == ny - 1 or i == 0 or i == nx - 1:
                phi[j, i] = 0.0
    phi_tmp[:, :] = phi

    src = phi
    dst = phi_tmp
    for _ in range(sweeps):
        for j in range(1, ny - 1):
            for i in range(1, nx - 1):
                if solid[j, i]:
                    continue
                dst[j, i] = 0.25 * _neighbour_sum(src, solid, j, i, u_inf)
        src, dst = dst, src
    if sweeps % 2 == 1:
        phi[:, :] = phi_tmp


@njit(cache=True)
def laplace_residual(phi, solid, u_inf):
    """L2 norm of (neighbour sum - 4 phi) over interior fluid cells."""
    ny, nx = phi.shape
    acc = 0.0
    for j in range(1, ny - 1):
        for i in range(1, nx - 1):
            if solid[j, i]:
                continue
            r = _neighbour_sum(phi, solid, j, i, u_inf) - 4.0 * phi[j, i]
            acc += r * r
    return np.sqrt(acc)
