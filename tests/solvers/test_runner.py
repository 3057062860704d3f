"""
Tests for the batch driver.
"""

import numpy as np
import pytest

from windtunnel.config import from_dict
from windtunnel.solvers import run_simulation, save_snapshot


def small_config(tmp_path, solver='lbm2d', steps=3, save=True):
    return from_dict({
        'grid': {'nx': 32, 'ny': 16, 'nz': 12},
        'flow': {'viscosity': 0.05},
        'geometry': {'kind': 'cylinder'},
        'solver': {'kind': solver, 'steps': steps, 'print_freq': 1},
        'output': {'directory': str(tmp_path / "out"), 'case_name': 'case',
                   'save_snapshot': save},
    })


class TestRunSimulation:

    def test_writes_snapshot(self, tmp_path):
        state = run_simulation(small_config(tmp_path))
        assert state.iterations == 3

        path = tmp_path / "out" / "case.npz"
        assert path.exists()
        with np.load(path) as data:
            assert int(data['iterations']) == 3
            assert tuple(data['shape']) == (16, 32)
            assert data['velocity_x'].shape == (32 * 16,)
            assert np.isfinite(data['drag'])

    def test_no_snapshot(self, tmp_path):
        run_simulation(small_config(tmp_path, save=False))
        assert not (tmp_path / "out").exists()

    @pytest.mark.parametrize("solver", ["ns2d", "vortex2d", "lbm3d", "euler3d"])
    def test_other_solvers(self, tmp_path, solver):
        state = run_simulation(small_config(tmp_path, solver=solver, steps=2,
                                            save=False))
        assert state.iterations == 2
        assert state.params.solver == solver

    def test_existing_state(self, tmp_path, make_state):
        state = make_state(32, 16, 8, viscosity=0.05)
        result = run_simulation(small_config(tmp_path, save=False), state=state)
        assert result is state
        assert state.iterations == 3

    def test_zero_steps(self, tmp_path):
        state = run_simulation(small_config(tmp_path, steps=0, save=False))
        assert state.iterations == 0


def test_save_snapshot_3d(tmp_path, state_3d):
    path = save_snapshot(state_3d, tmp_path / "deep" / "s.npz")
    with np.load(path) as data:
        assert tuple(data['shape']) == (24, 32, 48)
        assert 'velocity_z' in data.files
