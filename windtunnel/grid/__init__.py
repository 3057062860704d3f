"""
Grid state and obstacle geometry.

This module provides tools for:
- Holding parameters, geometry, field buffers and diagnostics (SimulationState)
- Reading triangle meshes from ASCII and binary STL
- Voxelizing primitive shapes and meshes into obstacle masks
"""

from .state import (
    SimulationState,
    SimulationParams,
    GeometryDescriptor,
    GeometryKind,
    Diagnostics,
    FieldSet,
    FieldSet2D,
    FieldSet3D,
    viscosity_from_reynolds,
)

from .stl import (
    MeshBounds,
    TriangleMesh,
    read_stl,
)

from .voxelizer import (
    build_obstacle,
    build_2d_obstacle,
    build_3d_obstacle,
    naca_thickness,
)

__all__ = [
    # State
    'SimulationState',
    'SimulationParams',
    'GeometryDescriptor',
    'GeometryKind',
    'Diagnostics',
    'FieldSet',
    'FieldSet2D',
    'FieldSet3D',
    'viscosity_from_reynolds',
    # Mesh input
    'MeshBounds',
    'TriangleMesh',
    'read_stl',
    # Voxelizer
    'build_obstacle',
    'build_2d_obstacle',
    'build_3d_obstacle',
    'naca_thickness',
]
