"""
Tests for the obstacle voxelizer.

Tests verify:
1. Every geometry kind produces a non-empty mask in 2D and 3D
2. Masks are deterministic
3. Obstacles stay clear of the domain faces
4. Custom meshes, bounds and the blob fallback are dispatched correctly
"""

import numpy as np
import pytest

from windtunnel.grid.state import GeometryKind
from windtunnel.grid.stl import MeshBounds
from windtunnel.grid.voxelizer import (
    build_obstacle,
    build_2d_obstacle,
    build_3d_obstacle,
    naca_thickness,
    _parity_fill,
)

PRIMITIVES = [GeometryKind.CYLINDER, GeometryKind.AIRFOIL,
              GeometryKind.WING, GeometryKind.SPHERE]


class TestPrimitives:
    """Analytic shapes."""

    @pytest.mark.parametrize("kind", PRIMITIVES)
    def test_2d_mask_not_empty(self, make_state, kind):
        state = make_state(96, 48, 16, kind=kind, angle=4.0)
        mask = build_2d_obstacle(state)
        assert mask.shape == (96 * 48,)
        assert mask.sum() > 0

    @pytest.mark.parametrize("kind", PRIMITIVES)
    def test_3d_mask_not_empty(self, make_state, kind):
        state = make_state(48, 32, 24, kind=kind, angle=8.0)
        mask = build_3d_obstacle(state)
        assert mask.shape == (48 * 32 * 24,)
        assert mask.sum() > 0

    @pytest.mark.parametrize("n", [4, 5, 6, 7, 8])
    @pytest.mark.parametrize("kind", PRIMITIVES)
    def test_small_grids_not_empty(self, make_state, kind, n):
        state = make_state(n, n, n, kind=kind, angle=4.0)
        assert build_2d_obstacle(state).sum() > 0
        assert build_3d_obstacle(state).sum() > 0

    def test_small_grid_anchor_cell(self, make_state):
        state = make_state(4, 4, 4, kind=GeometryKind.WING)
        mask2d = state.fields2d.view("obstacle")
        build_2d_obstacle(state)
        assert mask2d.sum() == 1
        assert mask2d[2, 1] == 1

    @pytest.mark.parametrize("kind", PRIMITIVES + [GeometryKind.CUSTOM])
    def test_deterministic(self, make_state, kind):
        state = make_state(64, 32, 20, kind=kind, angle=6.0)
        first_2d = build_2d_obstacle(state).copy()
        first_3d = build_3d_obstacle(state).copy()
        np.testing.assert_array_equal(build_2d_obstacle(state), first_2d)
        np.testing.assert_array_equal(build_3d_obstacle(state), first_3d)

    @pytest.mark.parametrize("kind", [GeometryKind.AIRFOIL, GeometryKind.WING])
    def test_clear_of_domain_faces(self, make_state, kind):
        state = make_state(64, 32, 20, kind=kind, angle=30.0)
        mask2d = state.fields2d.view("obstacle")
        build_2d_obstacle(state)
        assert not mask2d[:2].any() and not mask2d[-2:].any()
        assert not mask2d[:, :2].any() and not mask2d[:, -2:].any()

        mask3d = state.fields3d.view("obstacle")
        build_3d_obstacle(state)
        assert not mask3d[:2].any() and not mask3d[-2:].any()

    def test_cylinder_is_round(self, make_state):
        state = make_state(100, 50, 8, kind=GeometryKind.CYLINDER)
        mask = state.fields2d.view("obstacle")
        build_2d_obstacle(state)
        rows = np.nonzero(mask.any(axis=1))[0]
        cols = np.nonzero(mask.any(axis=0))[0]
        # Radius 0.08 * 50 = 4 cells around (30, 25)
        assert rows.min() == 21 and rows.max() == 29
        assert cols.min() == 26 and cols.max() == 34

    def test_rebuild_clears_previous_shape(self, make_state):
        state = make_state(64, 32, 8, kind=GeometryKind.AIRFOIL)
        airfoil = build_2d_obstacle(state).copy()
        state.update_geometry(kind="cylinder")
        cylinder = build_2d_obstacle(state)
        assert not np.array_equal(cylinder, airfoil)

    def test_build_obstacle_follows_dimension(self, make_state):
        state = make_state(32, 16, 12, dimension="3d")
        mask = build_obstacle(state)
        assert mask is state.fields3d.obstacle


class TestCustomGeometry:
    """Meshes, bounds and the blob fallback."""

    def test_mesh_2d_and_3d(self, make_state, cube_ascii_text):
        state = make_state(64, 32, 24)
        assert state.load_mesh(cube_ascii_text)
        assert build_2d_obstacle(state).sum() > 0
        assert build_3d_obstacle(state).sum() > 0

    def test_mesh_placement(self, make_state, cube_binary_bytes):
        state = make_state(80, 40, 8)
        state.load_mesh(cube_binary_bytes)
        mask = state.fields2d.view("obstacle")
        build_2d_obstacle(state)
        rows = np.nonzero(mask.any(axis=1))[0]
        cols = np.nonzero(mask.any(axis=0))[0]
        # Unit cube scaled by min(0.35 * 80, 0.55 * 40) = 22 around (25, 20),
        # plus the one-cell stamp; the fill only extends rows towards +x
        assert (rows.min(), rows.max()) == (8, 32)
        assert cols.min() == 13

    def test_bounds_only(self, make_state):
        state = make_state(64, 32, 24)
        state.update_geometry(kind="custom", custom_bounds=MeshBounds(0, 0, 0, 2, 1, 1))
        mask2d = build_2d_obstacle(state)
        mask3d = build_3d_obstacle(state)
        assert mask2d.sum() > 0
        assert mask3d.sum() > 0

    def test_blob_fallback_3d(self, make_state):
        state = make_state(64, 40, 24, kind=GeometryKind.CUSTOM)
        assert build_3d_obstacle(state).sum() > 0

    def test_custom_without_mesh_uses_sphere_slice_2d(self, make_state):
        custom = make_state(64, 32, 8, kind=GeometryKind.CUSTOM)
        sphere = make_state(64, 32, 8, kind=GeometryKind.SPHERE)
        np.testing.assert_array_equal(build_2d_obstacle(custom),
                                      build_2d_obstacle(sphere))


class TestHelpers:
    """Thickness law and parity fill."""

    def test_naca_thickness(self):
        assert naca_thickness(0.0) == pytest.approx(0.0)
        # Maximum half-thickness of a 12% section is ~0.06 near x = 0.3
        assert naca_thickness(0.3) == pytest.approx(0.06, abs=2e-3)
        assert naca_thickness(1.0) == pytest.approx(0.00126, abs=1e-4)

    def test_parity_fill_toggles_per_cell(self):
        mask = np.zeros((3, 9), dtype=np.uint8)
        mask[0, [0, 1, 4, 7]] = 1
        mask[1, [2, 5]] = 1
        mask[2, [3]] = 1
        _parity_fill(mask)
        # Two adjacent solid cells enter and leave again
        np.testing.assert_array_equal(mask[0], [1, 1, 0, 0, 1, 1, 1, 1, 0])
        np.testing.assert_array_equal(mask[1], [0, 0, 1, 1, 1, 1, 0, 0, 0])
        # An unmatched crossing fills to the end of the row
        np.testing.assert_array_equal(mask[2], [0, 0, 0, 1, 1, 1, 1, 1, 1])

    def test_parity_fill_even_thickness_outline(self):
        mask = np.array([[1, 1, 0, 0, 1, 0]], dtype=np.uint8)
        _parity_fill(mask)
        np.testing.assert_array_equal(mask[0, :4], [1, 1, 0, 0])
