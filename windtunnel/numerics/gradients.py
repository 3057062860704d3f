"""
Central-Difference Vorticity on Uniform Grids.

Operates on grid-shaped views ((ny, nx) or (nz, ny, nx)) with unit
spacing. Derivatives use the two-point central stencil, so only interior
cells (one layer away from every face) are written; boundary cells keep
their previous value. Solid cells get zero vorticity.
"""

import numpy as np


def _central(f: np.ndarray, axis: int) -> np.ndarray:
    """0.5 * (f[i+1] - f[i-1]) along ``axis`` on the interior block."""
    ndim = f.ndim
    plus = [slice(1, -1)] * ndim
    minus = [slice(1, -1)] * ndim
    plus[axis] = slice(2, None)
    minus[axis] = slice(None, -2)
    return 0.5 * (f[tuple(plus)] - f[tuple(minus)])


def vorticity_2d(u: np.ndarray, v: np.ndarray, obstacle: np.ndarray,
                 out: np.ndarray) -> np.ndarray:
    """
    Scalar vorticity dv/dx - du/dy on a (ny, nx) grid, written into ``out``.

    Parameters
    ----------
    u, v : ndarray, shape (ny, nx)
        Velocity components.
    obstacle : ndarray, shape (ny, nx)
        Solid mask.
    out : ndarray, shape (ny, nx)
        Vorticity view, interior updated in place.
    """
    w = _central(v, axis=1) - _central(u, axis=0)
    w[obstacle[1:-1, 1:-1] != 0] = 0.0
    out[1:-1, 1:-1] = w
    return out


def vorticity_3d(u: np.ndarray, v: np.ndarray, w: np.ndarray,
                 obstacle: np.ndarray, out: np.ndarray) -> np.ndarray:
    """
    Vorticity magnitude |curl(u, v, w)| on a (nz, ny, nx) grid.

    Axis 0 is z, axis 1 is y, axis 2 is x.
    """
    wx = _central(w, axis=1) - _central(v, axis=0)
    wy = _central(u, axis=0) - _central(w, axis=2)
    wz = _central(v, axis=2) - _central(u, axis=1)
    mag = np.sqrt(wx * wx + wy * wy + wz * wz)
    mag[obstacle[1:-1, 1:-1, 1:-1] != 0] = 0.0
    out[1:-1, 1:-1, 1:-1] = mag
    return out
