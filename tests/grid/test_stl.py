"""
Tests for the STL reader.
"""

import numpy as np
import pytest

from windtunnel.grid.stl import MeshBounds, read_stl


def facet_text(*vertices) -> str:
    lines = ["solid one", "  facet normal 0 0 1", "    outer loop"]
    lines += [f"      vertex {v}" for v in vertices]
    lines += ["    endloop", "  endfacet", "endsolid one"]
    return "\n".join(lines) + "\n"


class TestAscii:
    """ASCII STL input."""

    def test_cube(self, cube_ascii_text):
        mesh = read_stl(cube_ascii_text)
        assert mesh is not None
        assert mesh.n_triangles == 12
        assert mesh.vertices.dtype == np.float64
        assert mesh.vertices.shape == (12 * 9,)
        assert mesh.bounds == MeshBounds(0.0, 0.0, 0.0, 1.0, 1.0, 1.0)

    def test_triangle_order_kept(self):
        mesh = read_stl(facet_text("3 0 0", "0 2 0", "0 0 5"))
        np.testing.assert_allclose(mesh.vertices, [3, 0, 0, 0, 2, 0, 0, 0, 5])
        assert mesh.bounds.depth == pytest.approx(5.0)

    def test_no_facets(self):
        assert read_stl("solid empty\nendsolid empty\n") is None

    def test_non_finite_rejected(self):
        assert read_stl(facet_text("1e999 0 0", "1 0 0", "0 1 0")) is None


class TestBinary:
    """Binary STL input."""

    def test_cube(self, cube_binary_bytes):
        mesh = read_stl(cube_binary_bytes)
        assert mesh is not None
        assert mesh.n_triangles == 12
        assert mesh.bounds.width == pytest.approx(1.0)
        assert mesh.bounds.center == pytest.approx((0.5, 0.5, 0.5))

    def test_truncated(self, cube_binary_bytes):
        assert read_stl(cube_binary_bytes[:100]) is None

    def test_header_starting_with_solid(self, cube_binary_bytes):
        data = b"solid but binary".ljust(80, b" ") + cube_binary_bytes[80:]
        mesh = read_stl(data)
        assert mesh is not None
        assert mesh.n_triangles == 12


class TestReadStl:
    """Source dispatch of read_stl."""

    def test_text_and_bytes_agree(self, cube_ascii_text, cube_binary_bytes):
        from_text = read_stl(cube_ascii_text)
        from_bytes = read_stl(cube_binary_bytes)
        np.testing.assert_allclose(from_text.vertices, from_bytes.vertices)

    def test_ascii_bytes(self, cube_ascii_text):
        mesh = read_stl(cube_ascii_text.encode())
        assert mesh.n_triangles == 12

    def test_path_and_filename(self, cube_stl_file):
        assert read_stl(cube_stl_file).n_triangles == 12
        assert read_stl(str(cube_stl_file)).n_triangles == 12

    def test_bounds_from_corners(self):
        bounds = MeshBounds.from_corners([[-1, 0, 2], [1, 4, 3]])
        assert (bounds.width, bounds.height, bounds.depth) == (2.0, 4.0, 1.0)
        assert bounds.center == (0.0, 2.0, 2.5)

    @pytest.mark.parametrize("garbage", [
        b"",
        b"short",
        b"\x00\x01\x02 definitely not a mesh",
        "hello wind tunnel",
    ])
    def test_garbage_returns_none(self, garbage):
        assert read_stl(garbage) is None
