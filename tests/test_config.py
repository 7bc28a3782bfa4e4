"""
Tests for posecover.config module.
"""

import pytest
import numpy as np


class TestPlannerConfig:
    """Tests for PlannerConfig."""

    def test_defaults_are_valid(self):
        """Test default configuration passes validation."""
        from posecover.config import PlannerConfig

        config = PlannerConfig()
        assert config.validate() == []
        assert config.relaxation.max_iterations == 200
        assert config.discretization.cell_size == 5
        config.check()

    def test_validation_errors(self):
        """Every invalid field is reported."""
        from posecover.config import PlannerConfig

        config = PlannerConfig()
        config.discretization.cell_size = 0
        config.discretization.region = ((10, 0), (5, 5))
        config.relaxation.max_iterations = 500
        config.visibility.n_workers = 0

        errors = config.validate()
        assert len(errors) == 4
        with pytest.raises(ValueError, match="max_iterations"):
            config.check()

    def test_dict_roundtrip(self):
        """Test to_dict/from_dict restores nested dataclasses."""
        from posecover.config import PlannerConfig

        config = PlannerConfig()
        config.discretization.region = ((1, 2), (30, 40))
        config.allow_partial_coverage = True

        restored = PlannerConfig.from_dict(config.to_dict())
        assert restored.discretization.region == ((1, 2), (30, 40))
        assert restored.visualization.figsize == (10, 8)
        assert restored.allow_partial_coverage
        assert restored.footprint.points == config.footprint.points

    def test_yaml_roundtrip(self, tmp_path):
        """Test saving and loading YAML."""
        from posecover.config import PlannerConfig, load_config

        config = PlannerConfig.for_camera()
        path = tmp_path / "planner.yaml"
        config.to_yaml(path)

        loaded = load_config(path)
        assert loaded.discretization.cell_size == 10
        assert loaded.discretization.delta_theta == pytest.approx(np.pi / 4)
        np.testing.assert_allclose(loaded.footprint.points, config.footprint.points)

    def test_json_roundtrip(self, tmp_path):
        """Test saving and loading JSON."""
        from posecover.config import PlannerConfig, load_config

        config = PlannerConfig.for_cleaning_robot()
        config.map_origin = (-2.0, 1.5)
        path = tmp_path / "planner.json"
        config.to_json(path)

        loaded = load_config(path)
        assert loaded.relaxation.sparsity_check_range == 10
        assert loaded.map_origin == (-2.0, 1.5)

    def test_empty_yaml(self, tmp_path):
        """An empty YAML file gives defaults."""
        from posecover.config import PlannerConfig

        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert PlannerConfig.from_yaml(path) == PlannerConfig()


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_path(self):
        from posecover.config import PlannerConfig, load_config

        assert load_config() == PlannerConfig()

    def test_missing_file(self, tmp_path):
        from posecover.config import load_config

        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_suffix(self, tmp_path):
        from posecover.config import load_config

        path = tmp_path / "planner.toml"
        path.write_text("cell_size = 5\n")
        with pytest.raises(ValueError, match="Unsupported"):
            load_config(path)


class TestFootprintConfig:
    """Tests for FootprintConfig."""

    def test_default_footprint(self):
        """Default is a 0.5 m square centered on the agent."""
        from posecover.config import FootprintConfig

        footprint = FootprintConfig().to_footprint()
        assert footprint.origin_inside
        assert footprint.min_radius == 0.0
        assert footprint.max_half_angle == pytest.approx(np.pi)

    def test_overrides_pass_through(self):
        """Explicit derived values replace computed ones."""
        from posecover.config import FootprintConfig

        config = FootprintConfig(
            points=[[0.5, -0.5], [2.0, -1.0], [2.0, 1.0], [0.5, 0.5]],
            max_radius=1.5,
        )
        footprint = config.to_footprint()
        assert footprint.max_radius == 1.5
        assert footprint.min_radius == pytest.approx(0.5)

    def test_camera_preset_footprint(self):
        """Camera preset gates at 45 degrees from the heading."""
        from posecover.config import PlannerConfig

        footprint = PlannerConfig.for_camera().footprint.to_footprint()
        assert not footprint.origin_inside
        assert footprint.max_half_angle == pytest.approx(np.pi / 4)
