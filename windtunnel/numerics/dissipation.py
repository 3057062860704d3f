"""
Artificial viscosity for the central-flux Euler scheme.

The central flux difference alone has no damping of odd-even modes, so a
second-difference term eps * (sum of the six face neighbours - 6 U) is
added to every conserved variable on interior cells.
"""

from windtunnel.physics.jax_config import jax, jnp


def interior_slices(ndim_spatial: int = 3) -> tuple:
    """Slice tuple selecting the interior block of a (..., nz, ny, nx) array."""
    return (Ellipsis,) + (slice(1, -1),) * ndim_spatial


def neighbour_sum_3d(U: jnp.ndarray) -> jnp.ndarray:
    """
    Sum of the six face neighbours on the interior block.

    Parameters
    ----------
    U : jnp.ndarray (..., nz, ny, nx)

    Returns
    -------
    jnp.ndarray (..., nz-2, ny-2, nx-2)
    """
    return (U[..., 1:-1, 1:-1, 2:] + U[..., 1:-1, 1:-1, :-2]
            + U[..., 1:-1, 2:, 1:-1] + U[..., 1:-1, :-2, 1:-1]
            + U[..., 2:, 1:-1, 1:-1] + U[..., :-2, 1:-1, 1:-1])


@jax.jit
def artificial_viscosity(U: jnp.ndarray, eps: float) -> jnp.ndarray:
    """
    eps * discrete Laplacian of U on the interior block (zero on the border).

    Parameters
    ----------
    U : jnp.ndarray (n_vars, nz, ny, nx)
        Conserved variables.
    eps : float
        Dissipation coefficient.

    Returns
    -------
    D : jnp.ndarray (n_vars, nz, ny, nx)
    """
    lap = neighbour_sum_3d(U) - 6.0 * U[interior_slices()]
    return jnp.zeros_like(U).at[interior_slices()].set(eps * lap)
