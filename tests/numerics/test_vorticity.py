"""
Tests for central-difference vorticity.
"""

import numpy as np
import pytest

from windtunnel.numerics.gradients import vorticity_2d, vorticity_3d


class TestVorticity2D:

    def test_solid_body_rotation(self):
        ny, nx = 10, 12
        j, i = np.indices((ny, nx), dtype=np.float64)
        u = -(j - ny / 2)
        v = i - nx / 2
        out = np.full((ny, nx), -7.0)
        vorticity_2d(u, v, np.zeros((ny, nx), dtype=np.uint8), out)
        np.testing.assert_allclose(out[1:-1, 1:-1], 2.0)
        # Border keeps its previous value
        assert np.all(out[0] == -7.0)

    def test_solid_cells_zero(self):
        ny, nx = 8, 8
        j, i = np.indices((ny, nx), dtype=np.float64)
        obstacle = np.zeros((ny, nx), dtype=np.uint8)
        obstacle[4, 4] = 1
        out = np.zeros((ny, nx))
        vorticity_2d(-j, i, obstacle, out)
        assert out[4, 4] == 0.0
        assert out[3, 3] == pytest.approx(2.0)


class TestVorticity3D:

    def test_rotation_about_z(self):
        shape = (6, 7, 8)
        z, y, x = np.indices(shape, dtype=np.float64)
        out = np.zeros(shape)
        vorticity_3d(-y, x, np.zeros(shape), np.zeros(shape, dtype=np.uint8), out)
        np.testing.assert_allclose(out[1:-1, 1:-1, 1:-1], 2.0)

    def test_uniform_flow(self):
        shape = (5, 5, 5)
        out = np.ones(shape)
        vorticity_3d(np.full(shape, 0.3), np.zeros(shape), np.zeros(shape),
                     np.zeros(shape, dtype=np.uint8), out)
        np.testing.assert_allclose(out[1:-1, 1:-1, 1:-1], 0.0)
