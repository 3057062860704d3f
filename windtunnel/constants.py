"""
Global constants for the wind-tunnel solvers.

This module defines the lattice stencils, gas properties and grid limits
shared by every solver, so that array shapes and population indexing stay
consistent across the codebase.
"""

import numpy as np

# Smallest grid extent along any axis (central stencils need i-1 and i+1
# plus one boundary layer on each side)
MIN_EXTENT = 4

# Ratio of specific heats for the compressible solver (ideal diatomic gas)
GAMMA = 1.4

# Lattice speed of sound, c_s = 1/sqrt(3) in lattice units
CS = 1.0 / np.sqrt(3.0)

# Solver keys
LBM_2D = "lbm2d"
NS_2D = "ns2d"
POTENTIAL_2D = "potential2d"
VORTEX_2D = "vortex2d"
LBM_3D = "lbm3d"
EULER_3D = "euler3d"

DIM_2D = "2d"
DIM_3D = "3d"


def _opposite(c: np.ndarray) -> np.ndarray:
    """Index of the reversed lattice velocity for every direction."""
    q = c.shape[0]
    opp = np.empty(q, dtype=np.int64)
    for k in range(q):
        matches = np.where((c == -c[k]).all(axis=1))[0]
        opp[k] = matches[0]
    return opp


# =============================================================================
# D2Q9 lattice
# =============================================================================
#
#   6   2   5
#     \ | /
#   3 - 0 - 1
#     / | \
#   7   4   8

D2Q9_C = np.array([
    [0, 0], [1, 0], [0, 1], [-1, 0], [0, -1],
    [1, 1], [-1, 1], [-1, -1], [1, -1],
], dtype=np.int64)

D2Q9_W = np.array([
    4.0 / 9.0,
    1.0 / 9.0, 1.0 / 9.0, 1.0 / 9.0, 1.0 / 9.0,
    1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0,
])

D2Q9_OPP = _opposite(D2Q9_C)

Q9 = 9


# =============================================================================
# D3Q19 lattice
# =============================================================================
# Rest particle, 6 face neighbours, 12 edge neighbours.

D3Q19_C = np.array([
    [0, 0, 0],
    [1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1], [0, 0, -1],
    [1, 1, 0], [-1, -1, 0], [1, -1, 0], [-1, 1, 0],
    [1, 0, 1], [-1, 0, -1], [1, 0, -1], [-1, 0, 1],
    [0, 1, 1], [0, -1, -1], [0, 1, -1], [0, -1, 1],
], dtype=np.int64)

D3Q19_W = np.array([
    1.0 / 3.0,
    1.0 / 18.0, 1.0 / 18.0, 1.0 / 18.0, 1.0 / 18.0, 1.0 / 18.0, 1.0 / 18.0,
    1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0,
    1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0, 1.0 / 36.0,
])

D3Q19_OPP = _opposite(D3Q19_C)

Q19 = 19
