"""
Numerical kernels for the wind-tunnel solvers.

This module provides:
- Lattice-Boltzmann equilibrium, collision and streaming kernels
- Central-difference vorticity
- Relaxation kernels (advection, diffusion, projection, potential)
- Euler fluxes with artificial viscosity
- Load and Strouhal estimators
"""

from .lattice import (
    relaxation_rate,
    equilibrium,
    collide_kernel,
    stream_kernel,
)

from .gradients import (
    vorticity_2d,
    vorticity_3d,
)

from .relaxation import (
    advect_kernel,
    diffuse_kernel,
    divergence_kernel,
    jacobi_pressure_kernel,
    subtract_gradient_kernel,
    potential_jacobi_kernel,
    laplace_residual,
)

from .euler import (
    euler_update,
    max_wave_speed,
    cfl_time_step,
    total_energy,
)

from .forces import (
    lattice_coefficients,
    pressure_coefficients,
    lift_to_drag,
    frontal_extent,
    strouhal_from_history,
    LiftHistory,
    AeroCoefficients,
)

__all__ = [
    # Lattice Boltzmann
    'relaxation_rate',
    'equilibrium',
    'collide_kernel',
    'stream_kernel',
    # Vorticity
    'vorticity_2d',
    'vorticity_3d',
    # Relaxation
    'advect_kernel',
    'diffuse_kernel',
    'divergence_kernel',
    'jacobi_pressure_kernel',
    'subtract_gradient_kernel',
    'potential_jacobi_kernel',
    'laplace_residual',
    # Euler
    'euler_update',
    'max_wave_speed',
    'cfl_time_step',
    'total_energy',
    # Loads
    'lattice_coefficients',
    'pressure_coefficients',
    'lift_to_drag',
    'frontal_extent',
    'strouhal_from_history',
    'LiftHistory',
    'AeroCoefficients',
]
