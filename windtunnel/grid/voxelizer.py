"""
Obstacle Voxelizer.

Rasterizes the geometry descriptor of a ``SimulationState`` into the 0/1
obstacle mask of its 2D or 3D field set. Analytic shapes are sampled on
unit-spaced local coordinates, rotated by the angle of attack and floored
onto the grid; triangle meshes are stamped vertex by vertex and closed
with a scanline parity fill.

The mask is a pure function of the descriptor and the grid extents, so
two calls with the same inputs give bit-identical masks.
"""

import numpy as np
from numba import njit
from loguru import logger

from ..constants import DIM_3D
from .state import GeometryKind
from .stl import MeshBounds


# =============================================================================
# Helpers
# =============================================================================

def naca_thickness(x, t: float = 0.12):
    """NACA 4-digit half-thickness distribution at chord fraction x."""
    x = np.maximum(x, 0.0)
    return 5.0 * t * (0.2969 * np.sqrt(x) - 0.126 * x - 0.3516 * x**2
                      + 0.2843 * x**3 - 0.1015 * x**4)


def _span(start: float, stop: float, inclusive: bool = False) -> np.ndarray:
    """Unit-spaced samples start, start+1, ... below (or up to) stop."""
    if inclusive:
        count = int(np.floor(stop - start)) + 1 if stop >= start else 0
    else:
        count = max(0, int(np.ceil(stop - start)))
    return start + np.arange(count, dtype=np.float64)


def _mark(mask: np.ndarray, coords, lower: int, upper_margin: int) -> None:
    """
    Set mask cells at the floored coordinates that satisfy
    ``lower <= c < n - upper_margin`` on every axis.

    ``coords`` is ordered like the mask axes ((y, x) or (z, y, x)).
    """
    idx = [np.floor(c).astype(np.int64) for c in coords]
    keep = np.ones(idx[0].shape, dtype=bool)
    for axis, c in enumerate(idx):
        keep &= (c >= lower) & (c < mask.shape[axis] - upper_margin)
    mask[tuple(c[keep] for c in idx)] = 1


def _mark_strict(mask: np.ndarray, coords) -> None:
    """Set cells with 2 < c < n - 2 on every axis."""
    _mark(mask, coords, lower=3, upper_margin=2)


def _rotate(xi, yi, angle_deg: float):
    a = np.deg2rad(angle_deg)
    return (np.cos(a) * xi - np.sin(a) * yi,
            np.sin(a) * xi + np.cos(a) * yi)


@njit(cache=True)
def _parity_fill(mask):
    """
    Close stamped outlines along x, in place.

    Every solid cell met along a row toggles the inside state; empty cells
    met while inside become solid.
    """
    n_rows, nx = mask.shape
    for r in range(n_rows):
        inside = False
        for x in range(nx):
            if mask[r, x]:
                inside = not inside
            elif inside:
                mask[r, x] = 1


def _ensure_solid(mask, anchor_x: float = 0.3) -> None:
    """
    Mark the anchor cell when a primitive rasterized to nothing.

    Small grids can floor every sample outside the kept range; the anchor
    is clamped to one cell inside each face.
    """
    if mask.any():
        return
    fractions = (0.5,) * (mask.ndim - 1) + (anchor_x,)
    cell = tuple(min(max(int(f * n), 1), n - 2)
                 for f, n in zip(fractions, mask.shape))
    mask[cell] = 1
    logger.debug(f"Primitive empty on {mask.shape[::-1]} grid; marked cell {cell[::-1]}")


def _mesh_arrays(geometry):
    vertices = np.asarray(geometry.custom_mesh, dtype=np.float64).ravel()
    vertices = vertices[: len(vertices) - len(vertices) % 3].reshape(-1, 3)
    n_tri = len(vertices) // 3
    centroids = vertices[: 3 * n_tri].reshape(n_tri, 3, 3).mean(axis=1)
    return np.concatenate([vertices, centroids])


def _mesh_placement(geometry, points: np.ndarray, extents):
    """Scale and translate mesh points onto the grid (axis order x, y[, z])."""
    bounds = geometry.custom_bounds or MeshBounds.from_vertices(points)
    sizes = (bounds.width, bounds.height, bounds.depth)
    targets = (0.35, 0.55, 0.55)
    anchors = (0.32, 0.5, 0.5)
    dim = len(extents)

    scale = min(targets[d] * extents[d] / max(sizes[d], 1e-3) for d in range(dim))
    center = bounds.center
    return [np.floor(np.floor(anchors[d] * extents[d])
                     + scale * (points[:, d] - center[d]))
            for d in range(dim)]


def _stamp(mask: np.ndarray, coords) -> None:
    """3x3(x3) stamp around each point, keeping cells with 1 < c < n - 1."""
    base = [c.astype(np.int64) for c in coords]
    offsets = np.array(np.meshgrid(*[[-1, 0, 1]] * len(base), indexing="ij"))
    offsets = offsets.reshape(len(base), -1).T
    for off in offsets:
        shifted = [b + o for b, o in zip(base, off)]
        keep = np.ones(base[0].shape, dtype=bool)
        for axis, c in enumerate(shifted):
            keep &= (c > 1) & (c < mask.shape[axis] - 1)
        mask[tuple(c[keep] for c in shifted)] = 1


# =============================================================================
# 2D primitives, mask shape (ny, nx)
# =============================================================================

def _disk_2d(mask, nx, ny, radius2):
    cx, cy = int(nx * 0.3), int(ny * 0.5)
    j, i = np.indices((ny, nx))
    mask[(i - cx) ** 2 + (j - cy) ** 2 <= radius2] = 1


def voxelize_cylinder_2d(mask, nx, ny):
    r = min(nx, ny) * 0.08
    _disk_2d(mask, nx, ny, r * r)


def voxelize_sphere_slice_2d(mask, nx, ny):
    r = min(nx, ny) * 0.12
    _disk_2d(mask, nx, ny, r * r * 0.8)


def voxelize_airfoil_2d(mask, nx, ny, angle):
    cx, cy = int(nx * 0.3), int(ny * 0.5)
    chord = int(nx * 0.4)
    thickness = ny * 0.15

    xs, ys = [], []
    for xi in range(chord):
        half = naca_thickness(xi / chord) * thickness
        yi = _span(-half, half, inclusive=True)
        xs.append(np.full_like(yi, xi - chord / 2))
        ys.append(yi)
    if not xs:
        return
    rx, ry = _rotate(np.concatenate(xs), np.concatenate(ys), angle)
    _mark(mask, (cy + ry, cx + rx), lower=2, upper_margin=2)


def voxelize_wing_2d(mask, nx, ny, angle):
    cx, cy = int(nx * 0.28), int(ny * 0.5)
    span = int(ny * 0.35)
    half_chord = int(nx * 0.35) / 2

    xs, ys = [], []
    for xi in _span(-half_chord, half_chord):
        local_span = span * (1 - abs(xi) / half_chord)
        yi = _span(-local_span, local_span, inclusive=True)
        xs.append(np.full_like(yi, xi))
        ys.append(yi)
    if not xs:
        return
    rx, ry = _rotate(np.concatenate(xs), np.concatenate(ys), angle)
    _mark(mask, (cy + ry, cx + rx), lower=2, upper_margin=2)


def voxelize_bounds_2d(mask, nx, ny):
    half_w = max(4, int(nx * 0.35 / 2))
    half_h = max(4, int(ny * 0.4 / 2))
    cx, cy = int(nx * 0.3), int(ny * 0.5)
    y, x = np.mgrid[-half_h:half_h + 1, -half_w:half_w + 1]
    _mark_strict(mask, (cy + y, cx + x))


def voxelize_mesh_2d(mask, nx, ny, geometry):
    points = _mesh_arrays(geometry)
    gx, gy = _mesh_placement(geometry, points, (nx, ny))
    _stamp(mask, (gy, gx))
    _parity_fill(mask)


# =============================================================================
# 3D primitives, mask shape (nz, ny, nx)
# =============================================================================

def place_sphere(mask, nx, ny, nz):
    r = min(nx, ny, nz) * 0.12
    cx, cy, cz = int(nx * 0.28), int(ny * 0.5), int(nz * 0.5)
    z, y, x = np.indices((nz, ny, nx))
    mask[(x - cx) ** 2 + (y - cy) ** 2 + (z - cz) ** 2 <= r * r] = 1


def place_wing(mask, nx, ny, nz, angle):
    a = np.deg2rad(angle)
    cx, cy = int(nx * 0.28), int(ny * 0.5)
    half_span = ny * 0.4 / 2
    chord = nx * 0.4
    thickness = max(2, int(nz * 0.1))
    zi = np.arange(-thickness, thickness + 1, dtype=np.float64)

    for y in _span(-half_span, half_span):
        local_chord = chord * (1 - abs(y) / half_span)
        xs = _span(-local_chord / 2, local_chord / 2)
        if xs.size == 0:
            continue
        x, z = np.meshgrid(xs, zi, indexing="ij")
        gx = cx + np.cos(a) * x - np.sin(a) * z
        gz = nz / 2 + np.sin(a) * x + np.cos(a) * z
        _mark(mask, (gz, np.full_like(gx, cy + y), gx), lower=2, upper_margin=2)


def place_airfoil_volume(mask, nx, ny, nz, angle):
    cx, cy = int(nx * 0.3), int(ny * 0.5)
    half_chord = nx * 0.35 / 2
    thickness = ny * 0.12
    depth = max(4, int(nz * 0.2))

    xs, ys = [], []
    for xi in _span(-half_chord, half_chord):
        local = thickness * (1 - abs(xi) / half_chord)
        yi = _span(-local, local, inclusive=True)
        xs.append(np.full_like(yi, xi))
        ys.append(yi)
    if not xs:
        return
    rx, ry = _rotate(np.concatenate(xs), np.concatenate(ys), angle)
    section = np.zeros((ny, nx), dtype=mask.dtype)
    _mark(section, (cy + ry, cx + rx), lower=2, upper_margin=2)

    zs = np.floor(nz / 2 + np.arange(-depth, depth + 1)).astype(np.int64)
    zs = zs[(zs >= 2) & (zs < nz - 2)]
    mask[zs] |= section


def place_cylinder(mask, nx, ny, nz):
    r = min(ny, nz) * 0.15
    cx, cy, cz = int(nx * 0.35), int(ny * 0.5), int(nz * 0.5)
    z, y = np.indices((nz, ny))
    disk = (y - cy) ** 2 + (z - cz) ** 2 <= r * r
    gx = np.floor(_span(cx - r, cx + r)).astype(np.int64)
    gx = gx[(gx >= 2) & (gx < nx - 2)]
    zz, yy = np.nonzero(disk)
    mask[zz[:, None], yy[:, None], gx[None, :]] = 1


def place_blob(mask, nx, ny, nz):
    cx, cy, cz = int(nx * 0.3), int(ny * 0.5), int(nz * 0.5)
    z, y, x = np.mgrid[-8:9, -12:13, -20:21]
    gx = cx + x + np.sin(z * 0.3) * 3
    gy = cy + y + np.cos(x * 0.1) * 2
    gz = cz + z
    _mark_strict(mask, (gz, gy, gx))


def place_bounds(mask, nx, ny, nz):
    half_w = max(3, int(nx * 0.35 / 2))
    half_h = max(3, int(ny * 0.35 / 2))
    half_d = max(3, int(nz * 0.35 / 2))
    cx, cy, cz = int(nx * 0.32), int(ny * 0.5), int(nz * 0.5)
    z, y, x = np.mgrid[-half_d:half_d + 1, -half_h:half_h + 1, -half_w:half_w + 1]
    _mark_strict(mask, (cz + z, cy + y, cx + x))


def place_mesh(mask, nx, ny, nz, geometry):
    points = _mesh_arrays(geometry)
    gx, gy, gz = _mesh_placement(geometry, points, (nx, ny, nz))
    _stamp(mask, (gz, gy, gx))
    _parity_fill(mask.reshape(nz * ny, nx))


# =============================================================================
# Entry points
# =============================================================================

def _has_mesh(geometry) -> bool:
    return geometry.custom_mesh is not None and len(geometry.custom_mesh) >= 3


def build_2d_obstacle(state) -> np.ndarray:
    """Rebuild ``state.fields2d.obstacle`` from the geometry descriptor."""
    fs = state.fields2d
    nx, ny = fs.nx, fs.ny
    geometry = state.geometry
    mask = fs.view("obstacle")
    mask[:] = 0

    kind = GeometryKind(geometry.kind)
    if kind is GeometryKind.AIRFOIL:
        voxelize_airfoil_2d(mask, nx, ny, geometry.angle)
    elif kind is GeometryKind.CYLINDER:
        voxelize_cylinder_2d(mask, nx, ny)
    elif kind is GeometryKind.WING:
        voxelize_wing_2d(mask, nx, ny, geometry.angle)
    elif kind is GeometryKind.CUSTOM and _has_mesh(geometry):
        voxelize_mesh_2d(mask, nx, ny, geometry)
    elif kind is GeometryKind.CUSTOM and geometry.custom_bounds is not None:
        voxelize_bounds_2d(mask, nx, ny)
    else:
        voxelize_sphere_slice_2d(mask, nx, ny)

    if kind is not GeometryKind.CUSTOM:
        _ensure_solid(mask)

    logger.debug(f"2D obstacle ({kind.value}): {int(fs.obstacle.sum())} solid cells")
    return fs.obstacle


def build_3d_obstacle(state) -> np.ndarray:
    """Rebuild ``state.fields3d.obstacle`` from the geometry descriptor."""
    fs = state.fields3d
    nx, ny, nz = fs.nx, fs.ny, fs.nz
    geometry = state.geometry
    mask = fs.view("obstacle")
    mask[:] = 0

    kind = GeometryKind(geometry.kind)
    if kind is GeometryKind.WING:
        place_wing(mask, nx, ny, nz, geometry.angle)
    elif kind is GeometryKind.AIRFOIL:
        place_airfoil_volume(mask, nx, ny, nz, geometry.angle)
    elif kind is GeometryKind.CYLINDER:
        place_cylinder(mask, nx, ny, nz)
    elif kind is GeometryKind.CUSTOM and _has_mesh(geometry):
        place_mesh(mask, nx, ny, nz, geometry)
    elif kind is GeometryKind.CUSTOM and geometry.custom_bounds is not None:
        place_bounds(mask, nx, ny, nz)
    elif kind is GeometryKind.CUSTOM:
        place_blob(mask, nx, ny, nz)
    else:
        place_sphere(mask, nx, ny, nz)

    if kind is not GeometryKind.CUSTOM:
        _ensure_solid(mask)

    logger.debug(f"3D obstacle ({kind.value}): {int(fs.obstacle.sum())} solid cells")
    return fs.obstacle


def build_obstacle(state) -> np.ndarray:
    """Rebuild the obstacle mask of the active dimension."""
    if state.params.dimension == DIM_3D:
        return build_3d_obstacle(state)
    return build_2d_obstacle(state)
