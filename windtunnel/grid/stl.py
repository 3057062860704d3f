"""
STL Triangle Mesh Reader.

This module loads ASCII and binary STL data with trimesh and flattens it
into a vertex array (x0, y0, z0, x1, y1, z1, ...) with three vertices per
triangle, plus the axis-aligned bounding box used by the voxelizer to
place the mesh.
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, NamedTuple, Union

import numpy as np
import trimesh
from loguru import logger


@dataclass
class MeshBounds:
    """Axis-aligned bounding box of a mesh."""
    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def depth(self) -> float:
        return self.max_z - self.min_z

    @property
    def center(self) -> tuple:
        return (0.5 * (self.min_x + self.max_x),
                0.5 * (self.min_y + self.max_y),
                0.5 * (self.min_z + self.max_z))

    @classmethod
    def from_corners(cls, corners) -> 'MeshBounds':
        """From a (2, 3) array of [min, max] corners, as ``Trimesh.bounds``."""
        lo, hi = np.asarray(corners, dtype=np.float64)
        return cls(float(lo[0]), float(lo[1]), float(lo[2]),
                   float(hi[0]), float(hi[1]), float(hi[2]))

    @classmethod
    def from_vertices(cls, vertices: np.ndarray) -> 'MeshBounds':
        pts = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        return cls.from_corners((pts.min(axis=0), pts.max(axis=0)))


class TriangleMesh(NamedTuple):
    """Parsed triangle soup."""
    vertices: np.ndarray    # Flat float64 array, 9 values per triangle
    bounds: MeshBounds

    @property
    def n_triangles(self) -> int:
        return len(self.vertices) // 9


def _load_trimesh(data: bytes) -> Optional[trimesh.Trimesh]:
    """Run the trimesh STL loader on an in-memory buffer."""
    try:
        # process=False keeps the triangle soup in file order
        mesh = trimesh.load(io.BytesIO(data), file_type="stl",
                            force="mesh", process=False)
    except Exception as exc:
        logger.debug(f"trimesh could not parse STL data: {exc}")
        return None
    if not isinstance(mesh, trimesh.Trimesh):
        return None
    return mesh


def _read_source(source) -> bytes:
    if isinstance(source, Path) or (isinstance(source, str) and _is_file(source)):
        path = Path(source)
        logger.debug(f"Reading STL file {path}")
        return path.read_bytes()
    if isinstance(source, str):
        return source.encode("utf-8")
    return bytes(source)


def read_stl(source: Union[str, Path, bytes, bytearray]) -> Optional[TriangleMesh]:
    """
    Read an STL mesh from a file path, raw bytes or ASCII text.

    A ``str`` naming an existing file is read from disk; any other ``str``
    is treated as ASCII STL text. trimesh tells ASCII from binary data
    itself, including binary files whose header begins with ``solid``.

    Returns
    -------
    mesh : TriangleMesh or None
        None on unparseable input, on a mesh without triangles and on
        non-finite coordinates; callers treat that as "no geometry".
    """
    data = _read_source(source)
    if not data:
        return None

    mesh = _load_trimesh(data)
    if mesh is None or len(mesh.faces) == 0:
        return None

    vertices = np.ascontiguousarray(mesh.triangles, dtype=np.float64).reshape(-1)
    if not np.all(np.isfinite(vertices)):
        logger.debug("STL data has non-finite coordinates")
        return None
    return TriangleMesh(vertices, MeshBounds.from_corners(mesh.bounds))


def _is_file(text: str) -> bool:
    if "\n" in text or len(text) > 4096:
        return False
    try:
        return Path(text).is_file()
    except OSError:
        return False
