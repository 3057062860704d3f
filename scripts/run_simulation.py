#!/usr/bin/env python3
"""
Wind-tunnel runner - step one solver on one geometry and save the fields.

Usage:
    python scripts/run_simulation.py --config config/examples/cylinder.yaml
    python scripts/run_simulation.py --scenario wing --steps 500

Examples:
    # Using YAML config (recommended)
    python scripts/run_simulation.py --config config/examples/cylinder.yaml

    # Named scenario with overrides
    python scripts/run_simulation.py --scenario airfoil --angle 8 --steps 1000

    # Custom STL obstacle in 3D
    python scripts/run_simulation.py --solver lbm3d --mesh model.stl --nx 128 --ny 64 --nz 64
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import device selection BEFORE any JAX computation
from windtunnel.physics.jax_config import select_device, get_device_info
from loguru import logger


def parse_args():
    parser = argparse.ArgumentParser(
        description="Run a wind-tunnel simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    # Configuration source
    parser.add_argument('--config', '-c', help="YAML config file")
    parser.add_argument('--scenario', '-s',
                        help="Named scenario: cylinder, airfoil, wing, cavity")
    parser.add_argument('--save-config', help="Write the resolved configuration to this YAML file")

    # Solver
    parser.add_argument('--solver', help="lbm2d, ns2d, potential2d, vortex2d, lbm3d or euler3d")
    parser.add_argument('--steps', '-n', type=int, help="Number of steps")
    parser.add_argument('--print-freq', type=int, help="Print frequency")

    # Flow conditions
    parser.add_argument('--mach', '-M', type=float, help="Mach number")
    parser.add_argument('--reynolds', '-Re', type=float, help="Reynolds number")
    parser.add_argument('--viscosity', type=float,
                        help="Lattice viscosity (default: derived from Reynolds)")

    # Grid
    parser.add_argument('--nx', type=int, help="Cells along x")
    parser.add_argument('--ny', type=int, help="Cells along y")
    parser.add_argument('--nz', type=int, help="Cells along z (3D solvers)")

    # Geometry
    parser.add_argument('--geometry', '-g', help="cylinder, airfoil, wing, sphere or custom")
    parser.add_argument('--angle', '-a', type=float, help="Angle of attack [deg]")
    parser.add_argument('--mesh', help="STL file for a custom obstacle")

    # Output
    parser.add_argument('--output-dir', '-o', help="Output directory")
    parser.add_argument('--case-name', help="Base name of the .npz snapshot")
    parser.add_argument('--no-save', action='store_true', help="Do not write a snapshot")
    parser.add_argument('--log-level', help="DEBUG, INFO, WARNING, ...")
    parser.add_argument('--log-file', help="Also write the log to this file")

    # Device selection
    parser.add_argument('--device', '-d', type=str, default=None,
                        help="JAX device: 'auto' (default), 'cpu' or 'gpu'")

    return parser.parse_args()


def main():
    args = parse_args()

    from windtunnel.config import SimulationConfig, load_yaml, from_dict, apply_cli_overrides, save_yaml
    from windtunnel.solvers import run_simulation
    from windtunnel.utils.logging import setup_logging_from_config

    if args.config:
        config = load_yaml(args.config)
    elif args.scenario:
        config = from_dict({'scenario': args.scenario})
    else:
        config = SimulationConfig()
    config = apply_cli_overrides(config, args)

    setup_logging_from_config(config)
    select_device(config.device.device)
    logger.info(get_device_info())

    if args.save_config:
        save_yaml(config, args.save_config)
        logger.info(f"Configuration written to {args.save_config}")

    state = run_simulation(config)

    d = state.diagnostics
    logger.info(f"Done after {state.iterations} steps: drag={d.drag:.5f} lift={d.lift:.5f} "
                f"L/D={d.lift_to_drag:.3f} St={d.strouhal:.4f}")


if __name__ == "__main__":
    main()
