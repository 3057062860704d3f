"""
Batch driver: build the state from a configuration, step the solver and
save the final fields.
"""

from pathlib import Path

import numpy as np
from loguru import logger

from ..grid.state import GeometryKind
from .factory import configure_state


def _fields_finite(state) -> bool:
    fs = state.active_fields
    return bool(np.isfinite(fs.velocity_x).all() and np.isfinite(fs.pressure).all())


def save_snapshot(state, path) -> Path:
    """Write ``state.snapshot()`` to an ``.npz`` archive."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez(path, **state.snapshot())
    logger.info(f"Snapshot written to {path}")
    return path


def run_simulation(config, state=None):
    """
    Run ``config.solver.steps`` steps of the configured solver.

    Parameters
    ----------
    config : SimulationConfig
        Complete configuration.
    state : SimulationState, optional
        Existing state to drive; built from ``config`` when omitted.

    Returns
    -------
    SimulationState
        The state after the last step.
    """
    if state is None:
        state = config.build_state()
    solver = configure_state(config.solver.kind, state)

    steps = config.solver.steps
    print_freq = max(1, config.solver.print_freq)
    p = state.params

    logger.info(f"{'='*60}")
    logger.info(f"Solver: {solver.kind}  Geometry: {GeometryKind(state.geometry.kind).value} "
                f"(angle {state.geometry.angle:.1f} deg)")
    logger.info(f"Mach: {p.mach}  Reynolds: {p.reynolds:.3g}  Viscosity: {p.viscosity:.4f}")
    logger.info(f"Steps: {steps}")
    logger.info(f"{'='*60}")
    logger.info(f"{'Iter':>8} {'Drag':>10} {'Lift':>10} {'L/D':>10} {'St':>8}")
    logger.info(f"{'-'*50}")

    for _ in range(steps):
        solver.step()

        if state.iterations % print_freq == 0 or state.iterations == 1:
            d = state.diagnostics
            logger.info(f"{state.iterations:>8d} {d.drag:>10.5f} {d.lift:>10.5f} "
                        f"{d.lift_to_drag:>10.3f} {d.strouhal:>8.4f}")
            if not _fields_finite(state):
                logger.warning(f"DIVERGED at iteration {state.iterations}: "
                               f"non-finite velocity or pressure")
                break

    if config.output.save_snapshot:
        path = Path(config.output.directory) / f"{config.output.case_name}.npz"
        save_snapshot(state, path)

    return state
