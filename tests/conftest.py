"""
Shared pytest fixtures for the test suite.

This module provides small grids and triangle meshes so that every solver
can be stepped in well under a second.
"""

import struct

import numpy as np
import pytest

from windtunnel.grid.state import (
    SimulationState, SimulationParams, GeometryDescriptor, GeometryKind,
)


# =============================================================================
# Unit cube mesh
# =============================================================================

CUBE_TRIANGLES = [
    # -z / +z
    ((0, 0, 0), (1, 1, 0), (1, 0, 0)), ((0, 0, 0), (0, 1, 0), (1, 1, 0)),
    ((0, 0, 1), (1, 0, 1), (1, 1, 1)), ((0, 0, 1), (1, 1, 1), (0, 1, 1)),
    # -y / +y
    ((0, 0, 0), (1, 0, 0), (1, 0, 1)), ((0, 0, 0), (1, 0, 1), (0, 0, 1)),
    ((0, 1, 0), (1, 1, 1), (1, 1, 0)), ((0, 1, 0), (0, 1, 1), (1, 1, 1)),
    # -x / +x
    ((0, 0, 0), (0, 0, 1), (0, 1, 1)), ((0, 0, 0), (0, 1, 1), (0, 1, 0)),
    ((1, 0, 0), (1, 1, 0), (1, 1, 1)), ((1, 0, 0), (1, 1, 1), (1, 0, 1)),
]


def cube_ascii() -> str:
    lines = ["solid cube"]
    for tri in CUBE_TRIANGLES:
        lines.append("  facet normal 0 0 0")
        lines.append("    outer loop")
        for x, y, z in tri:
            lines.append(f"      vertex {x:.6e} {y:.6e} {z:.6e}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append("endsolid cube")
    return "\n".join(lines) + "\n"


def cube_binary() -> bytes:
    parts = [b"binary cube".ljust(80, b" "), struct.pack("<I", len(CUBE_TRIANGLES))]
    for tri in CUBE_TRIANGLES:
        values = [0.0, 0.0, 0.0] + [float(c) for vertex in tri for c in vertex]
        parts.append(struct.pack("<12f", *values))
        parts.append(struct.pack("<H", 0))
    return b"".join(parts)


@pytest.fixture
def cube_ascii_text():
    return cube_ascii()


@pytest.fixture
def cube_binary_bytes():
    return cube_binary()


@pytest.fixture
def cube_stl_file(tmp_path):
    path = tmp_path / "cube.stl"
    path.write_bytes(cube_binary())
    return path


# =============================================================================
# Small simulation states
# =============================================================================

def build_state(nx=64, ny=32, nz=16, kind=GeometryKind.CYLINDER, angle=0.0,
                **params) -> SimulationState:
    """SimulationState on a small grid; extra keywords go to SimulationParams."""
    return SimulationState(
        SimulationParams(nx=nx, ny=ny, nz=nz, **params),
        GeometryDescriptor(kind=kind, angle=angle),
    )


@pytest.fixture
def state_2d():
    """64 x 32 cylinder state with a fixed lattice viscosity."""
    return build_state(viscosity=0.02)


@pytest.fixture
def state_3d():
    """48 x 32 x 24 sphere state in 3D."""
    return build_state(48, 32, 24, kind=GeometryKind.SPHERE,
                       dimension="3d", viscosity=0.02)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def make_state():
    """Factory for small states: make_state(nx, ny, nz, kind=..., **params)."""
    return build_state
