"""
Tests for the YAML/dataclass configuration layer.
"""

import argparse

import pytest
import yaml

from windtunnel.config import (
    SimulationConfig,
    SCENARIOS,
    load_yaml,
    from_dict,
    apply_cli_overrides,
    save_yaml,
)
from windtunnel.grid.state import GeometryKind


def cli_args(**overrides):
    """Namespace with every CLI option unset, as argparse produces it."""
    names = [
        'solver', 'steps', 'print_freq', 'mach', 'reynolds', 'viscosity',
        'nx', 'ny', 'nz', 'geometry', 'angle', 'mesh', 'output_dir',
        'case_name', 'log_level', 'log_file', 'device',
    ]
    values = {name: None for name in names}
    values['no_save'] = False
    values.update(overrides)
    return argparse.Namespace(**values)


class TestDefaults:

    def test_default_sections(self):
        config = SimulationConfig()
        assert config.solver.kind == "lbm2d"
        assert config.grid.nx == 256
        assert config.grid.ny == 128
        assert config.flow.viscosity is None
        assert config.geometry.kind == "airfoil"
        assert config.output.save_snapshot is True
        config.validate()

    def test_empty_dict(self):
        assert from_dict({}) == SimulationConfig()


class TestFromDict:

    def test_sections_and_coercion(self):
        config = from_dict({
            'grid': {'nx': "64", 'ny': 32},
            'flow': {'reynolds': "1.0e5", 'mach': 1},
            'solver': {'kind': 'ns2d', 'steps': 10},
        })
        assert config.grid.nx == 64
        assert config.flow.reynolds == 1.0e5
        assert isinstance(config.flow.mach, float)
        assert config.solver.kind == 'ns2d'
        assert config.grid.nz == 64

    def test_optional_fields_coerced(self):
        config = from_dict({'flow': {'viscosity': "0.03"},
                            'geometry': {'mesh_file': "body.stl", 'kind': 'custom'},
                            'logging': {'file': None}})
        assert config.flow.viscosity == 0.03
        assert isinstance(config.flow.viscosity, float)
        assert config.geometry.mesh_file == "body.stl"
        assert config.logging.file is None

    def test_unknown_field_ignored(self):
        config = from_dict({'grid': {'nx': 40, 'spacing': 3}})
        assert config.grid.nx == 40
        assert not hasattr(config.grid, 'spacing')

    def test_unknown_section_ignored(self):
        config = from_dict({'turbulence': {'model': 'sa'}})
        assert config == SimulationConfig()

    @pytest.mark.parametrize("name", sorted(SCENARIOS))
    def test_scenarios(self, name):
        config = from_dict({'scenario': name})
        expected = SCENARIOS[name]
        assert config.grid.nx == expected['grid']['nx']
        assert config.flow.mach == expected['flow']['mach']
        assert config.geometry.kind == expected['geometry']['kind']
        assert config.solver.kind == expected['solver']['kind']

    def test_scenario_overridden_by_sections(self):
        config = from_dict({'scenario': 'wing', 'geometry': {'angle': 2.0},
                            'solver': {'steps': 5}})
        assert config.geometry.kind == 'wing'
        assert config.geometry.angle == 2.0
        assert config.solver.kind == 'lbm3d'
        assert config.solver.steps == 5
        # The scenario table itself is not modified
        assert SCENARIOS['wing']['geometry']['angle'] == 8.0

    def test_unknown_scenario(self):
        with pytest.raises(ValueError, match="Unknown scenario"):
            from_dict({'scenario': 'tunnel'})

    def test_unknown_solver(self):
        with pytest.raises(ValueError, match="Unknown solver"):
            from_dict({'solver': {'kind': 'rans'}})

    def test_unknown_geometry(self):
        with pytest.raises(ValueError, match="Unknown geometry kind"):
            from_dict({'geometry': {'kind': 'cow'}})


class TestYaml:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == SimulationConfig()

    def test_save_and_load(self, tmp_path):
        config = from_dict({'scenario': 'airfoil', 'flow': {'viscosity': 0.03}})
        path = tmp_path / "nested" / "airfoil.yaml"
        save_yaml(config, path)

        with open(path) as f:
            raw = yaml.safe_load(f)
        assert list(raw) == ['grid', 'flow', 'geometry', 'solver', 'output',
                             'logging', 'device']
        assert load_yaml(path) == config

    def test_load_scenario_file(self, tmp_path):
        path = tmp_path / "case.yaml"
        path.write_text("scenario: cylinder\nsolver:\n  steps: 12\n")
        config = load_yaml(path)
        assert config.geometry.kind == 'cylinder'
        assert config.solver.steps == 12


class TestCliOverrides:

    def test_unset_values_keep_config(self):
        config = from_dict({'scenario': 'cylinder'})
        assert apply_cli_overrides(config, cli_args()) == config

    def test_overrides(self):
        config = apply_cli_overrides(SimulationConfig(), cli_args(
            solver='euler3d', steps=7, mach=0.3, nx=48, nz=16,
            geometry='sphere', angle=3.0, output_dir='out', case_name='c1',
            log_level='DEBUG', log_file='out/run.log', device='cpu', no_save=True))
        assert config.solver.kind == 'euler3d'
        assert config.solver.steps == 7
        assert config.flow.mach == 0.3
        assert config.grid.nx == 48
        assert config.grid.nz == 16
        assert config.geometry.kind == 'sphere'
        assert config.geometry.angle == 3.0
        assert config.output.directory == 'out'
        assert config.output.case_name == 'c1'
        assert config.output.save_snapshot is False
        assert config.logging.level == 'DEBUG'
        assert config.device.device == 'cpu'
        assert config.logging.file == 'out/run.log'

    def test_mesh_forces_custom(self):
        config = apply_cli_overrides(SimulationConfig(), cli_args(mesh='body.stl'))
        assert config.geometry.kind == 'custom'
        assert config.geometry.mesh_file == 'body.stl'

    def test_invalid_solver_rejected(self):
        with pytest.raises(ValueError):
            apply_cli_overrides(SimulationConfig(), cli_args(solver='lbm4d'))


class TestBuildState:

    def test_dimension_and_viscosity(self):
        config = from_dict({'scenario': 'wing'})
        state = config.build_state()
        assert state.params.dimension == "3d"
        assert state.params.solver == "lbm3d"
        assert state.params.viscosity == pytest.approx(0.2)
        assert state.geometry.kind is GeometryKind.WING
        assert state.geometry.angle == 8.0

    def test_viscosity_clamped(self):
        state = from_dict({'scenario': 'airfoil'}).build_state()
        assert state.params.viscosity == pytest.approx(0.05)

    def test_explicit_viscosity(self):
        config = from_dict({'grid': {'nx': 32, 'ny': 16},
                            'flow': {'viscosity': 0.07}})
        state = config.build_state()
        assert state.params.viscosity == 0.07
        assert state.params.dimension == "2d"
        assert state.fields2d.velocity_x.size == 32 * 16

    def test_mesh_file(self, tmp_path, cube_ascii_text):
        path = tmp_path / "cube.stl"
        path.write_text(cube_ascii_text)
        config = from_dict({'grid': {'nx': 32, 'ny': 16, 'nz': 8},
                            'geometry': {'kind': 'custom', 'mesh_file': str(path),
                                         'preset_id': 'cube'}})
        state = config.build_state()
        assert state.geometry.kind is GeometryKind.CUSTOM
        assert state.geometry.custom_mesh is not None
        assert state.geometry.preset_id == 'cube'

    def test_missing_mesh_file(self, tmp_path):
        config = from_dict({'geometry': {'kind': 'custom',
                                         'mesh_file': str(tmp_path / "none.stl")}})
        with pytest.raises(FileNotFoundError):
            config.build_state()
