"""Virtual wind tunnel: interchangeable 2D and 3D flow solvers on uniform grids."""

__version__ = "0.1.0"
