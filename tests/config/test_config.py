"""
Tests for the YAML configuration layer.
"""

import pytest
import yaml

from oceanfv.config import (
    GridConfig, SimulationConfig, apply_overrides, coarse_preset, from_dict, load_yaml,
    production_preset, save_yaml,
)
from oceanfv.errors import ConfigurationError


class TestFromDict:

    def test_empty_gives_defaults(self):
        assert from_dict({}) == SimulationConfig()

    def test_nested_sections(self):
        config = from_dict({"grid": {"size": [8, 8, 2]}, "free_surface": {"type": "explicit"}})
        assert config.grid.size == [8, 8, 2]
        assert config.grid.halo == GridConfig().halo
        assert config.free_surface.type == "explicit"
        assert config.advection.momentum == "vector_invariant"

    def test_numeric_strings_are_coerced(self):
        config = from_dict({
            "grid": {"extent": ["1e5", "2.0e5", 500]},
            "free_surface": {"reltol": "1e-8", "substeps": "12"},
            "time_stepping": {"dt": 30},
        })
        assert config.grid.extent == [1e5, 2e5, 500.0]
        assert all(isinstance(L, float) for L in config.grid.extent)
        assert config.free_surface.reltol == 1e-8
        assert config.free_surface.substeps == 12
        assert isinstance(config.time_stepping.dt, float)

    def test_unknown_keys_are_ignored(self):
        config = from_dict({"grid": {"size": [4, 4, 1], "stretching": 1.1}})
        assert config.grid.size == [4, 4, 1]
        assert not hasattr(config.grid, "stretching")

    def test_input_not_mutated(self):
        data = {"preset": "coarse", "grid": {"halo": [2, 2, 2]}}
        from_dict(data)
        assert data == {"preset": "coarse", "grid": {"halo": [2, 2, 2]}}

    def test_non_mapping_raises(self):
        with pytest.raises(ConfigurationError):
            from_dict([1, 2, 3])


class TestPresets:

    def test_coarse(self):
        config = from_dict({"preset": "coarse"})
        assert config.grid == coarse_preset()

    def test_production(self):
        assert from_dict({"preset": "production"}).grid == production_preset()

    def test_explicit_grid_entries_override_preset(self):
        config = from_dict({"preset": "coarse", "grid": {"halo": [2, 2, 2]}})
        assert config.grid.size == coarse_preset().size
        assert config.grid.halo == [2, 2, 2]

    def test_unknown_preset_raises(self):
        with pytest.raises(ConfigurationError):
            from_dict({"preset": "global"})


class TestOverrides:

    def test_dotted_paths(self):
        base = SimulationConfig()
        config = apply_overrides(base, {
            "grid.size": [64, 64, 8],
            "free_surface.type": "split_explicit",
            "time_stepping.dt": "120",
        })
        assert config.grid.size == [64, 64, 8]
        assert config.free_surface.type == "split_explicit"
        assert config.time_stepping.dt == 120.0
        assert base.grid.size == GridConfig().size

    def test_none_values_skipped(self):
        config = apply_overrides(SimulationConfig(), {"time_stepping.dt": None})
        assert config.time_stepping.dt == SimulationConfig().time_stepping.dt

    def test_top_level_key(self):
        config = apply_overrides(SimulationConfig(), {"tracers": ["T", "S"]})
        assert config.tracers == ["T", "S"]

    @pytest.mark.parametrize("path", ["grid.spacing", "solver.cfl", "grid.size.x"])
    def test_invalid_path_raises(self, path):
        with pytest.raises(ConfigurationError):
            apply_overrides(SimulationConfig(), {path: 1})


class TestYAML:

    def test_round_trip(self, tmp_path):
        config = from_dict({"preset": "coarse", "free_surface": {"type": "split_explicit", "cfl": 0.5},
                            "tracers": ["T", "S"]})
        path = tmp_path / "nested" / "config.yaml"
        save_yaml(config, path)
        assert load_yaml(path) == config

    def test_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "preset: coarse\n"
            "grid:\n"
            "  extent: [1.0e5, 1.0e5, 5.0e2]\n"
            "advection:\n"
            "  momentum: weno_vector_invariant\n"
            "  vorticity_order: 5\n"
            "time_stepping:\n"
            "  dt: 1e2\n"
        )
        config = load_yaml(path)
        assert config.grid.size == coarse_preset().size
        assert config.grid.extent == [1e5, 1e5, 500.0]
        assert config.advection.vorticity_order == 5
        assert config.time_stepping.dt == 100.0

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == SimulationConfig()

    def test_saved_file_is_plain_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        save_yaml(SimulationConfig(), path)
        data = yaml.safe_load(path.read_text())
        assert data["free_surface"]["type"] == "implicit"
        assert data["grid"]["topology"] == ["Periodic", "Periodic", "Bounded"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")
