"""
Tests for the compressible Euler kernels (JAX).
"""

import numpy as np
import pytest

from windtunnel.constants import GAMMA
from windtunnel.physics.jax_config import jnp
from windtunnel.numerics.euler import (
    total_energy,
    conserved_from_primitives,
    primitives_from_conserved,
    euler_update,
    max_wave_speed,
    cfl_time_step,
    DENSITY_FLOOR,
    PRESSURE_FLOOR,
)
from windtunnel.numerics.dissipation import artificial_viscosity


def freestream_fields(shape, mach=0.3):
    rho = np.ones(shape)
    u = np.full(shape, mach)
    v = np.zeros(shape)
    w = np.zeros(shape)
    p = np.full(shape, 1.0 / GAMMA)
    E = total_energy(rho, u, v, w, p)
    return rho, u, v, w, p, E


class TestConversions:
    """Primitive and conserved variables."""

    def test_round_trip(self):
        rho, u, v, w, p, E = freestream_fields((4, 5, 6))
        v = v + 0.1
        E = total_energy(rho, u, v, w, p)
        U = conserved_from_primitives(*(jnp.asarray(a) for a in (rho, u, v, w, E)))
        assert U.shape == (5, 4, 5, 6)
        rho2, u2, v2, w2, p2, E2 = primitives_from_conserved(U)
        np.testing.assert_allclose(np.asarray(p2), p)
        np.testing.assert_allclose(np.asarray(v2), v)

    def test_floors(self):
        U = jnp.zeros((5, 3, 3, 3))
        rho, u, v, w, p, E = primitives_from_conserved(U)
        assert float(rho.min()) == DENSITY_FLOOR
        assert float(p.min()) == PRESSURE_FLOOR

    def test_total_energy(self):
        assert total_energy(1.0, 0.5, 0.0, 0.0, 1.0) == pytest.approx(1.0 / 0.4 + 0.125)


class TestUpdate:
    """Explicit central-flux step."""

    def test_uniform_flow_is_steady(self):
        shape = (6, 7, 8)
        fields = freestream_fields(shape)
        fluid = jnp.ones(shape, dtype=bool)
        out = euler_update(*(jnp.asarray(a) for a in fields), fluid, 0.4, 0.1)
        for before, after in zip(fields, out):
            np.testing.assert_allclose(np.asarray(after), before, atol=1e-14)

    def test_inactive_cells_unchanged(self):
        shape = (6, 6, 6)
        rho, u, v, w, p, E = freestream_fields(shape)
        rng = np.random.default_rng(3)
        rho = rho + 0.05 * rng.random(shape)
        E = total_energy(rho, u, v, w, p)
        fluid = np.ones(shape, dtype=bool)
        fluid[3, 3, 3] = False

        out = euler_update(*(jnp.asarray(a) for a in (rho, u, v, w, p, E)),
                           jnp.asarray(fluid), 0.3, 0.1)
        rho_new = np.asarray(out[0])
        assert rho_new[3, 3, 3] == rho[3, 3, 3]
        np.testing.assert_array_equal(rho_new[0], rho[0])
        np.testing.assert_array_equal(rho_new[:, :, -1], rho[:, :, -1])
        assert not np.array_equal(rho_new[1:-1, 1:-1, 1:-1], rho[1:-1, 1:-1, 1:-1])
        assert np.all(np.isfinite(rho_new))

    def test_artificial_viscosity_zero_on_border(self):
        U = jnp.asarray(np.random.default_rng(1).random((5, 4, 4, 4)))
        D = np.asarray(artificial_viscosity(U, 0.1))
        assert np.all(D[:, 0] == 0.0)
        assert np.all(D[..., -1] == 0.0)


class TestTimeStep:
    """CFL time step."""

    def test_wave_speed(self):
        rho, u, v, w, p, E = freestream_fields((10,), mach=0.5)
        # Unit sound speed for p = 1/gamma, rho = 1
        assert max_wave_speed(rho, u, v, w, p, stride=1) == pytest.approx(1.5)

    def test_cfl(self):
        assert cfl_time_step(1.5, 0.5) == pytest.approx(0.5 / 1.5, rel=1e-5)
        assert np.isfinite(cfl_time_step(0.0))
