"""
Unit tests for job configuration management.
"""

import pytest

from layerpath.core.config import (
    ConfigManager,
    ContourConfig,
    JobConfig,
    PrinterConfig,
    SlicerConfig,
    VariableConfig,
    load_job_config,
)
from layerpath.core.exceptions import ConfigurationError
from layerpath.enumerations import InterpolationType, ProgramType, parse_enum


@pytest.mark.unit
class TestContourConfig:
    """Tests for ContourConfig model."""

    def test_defaults(self):
        """Test the default contour is a radius 100 circle."""
        config = ContourConfig()
        assert config.type == "circle"
        assert config.radius == 100.0
        assert config.center == [0.0, 0.0, 0.0]

    def test_type_is_case_insensitive(self):
        config = ContourConfig(type="Polyline", points=[[0, 0, 0], [1, 0, 0]])
        assert config.type == "polyline"

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            ContourConfig(type="spiral")

    def test_polyline_needs_points(self):
        """Test a non-circle contour needs at least two points."""
        with pytest.raises(ValueError):
            ContourConfig(type="line", points=[[0, 0, 0]])

    def test_circle_radius_positive(self):
        with pytest.raises(ValueError):
            ContourConfig(radius=0.0)


@pytest.mark.unit
class TestSlicerConfig:
    """Tests for SlicerConfig model."""

    def test_explicit_heights(self):
        config = SlicerConfig(heights=[0.0, 5.0, 12.0])
        assert config.resolved_heights() == [0.0, 5.0, 12.0]

    def test_heights_from_layer_height(self):
        """Test layer_height and layers give cumulative offsets."""
        config = SlicerConfig(layer_height=2.5, layers=4)
        assert config.resolved_heights() == pytest.approx([0.0, 2.5, 5.0, 7.5])

    def test_heights_required(self):
        with pytest.raises(ValueError):
            SlicerConfig(layer_height=2.5)

    def test_negative_keep(self):
        with pytest.raises(ValueError):
            SlicerConfig(heights=[0.0], keep=-1)

    def test_policy_values_are_kept_raw(self):
        """Test unknown transition names are left for later resolution."""
        config = SlicerConfig(heights=[0.0], transition="zigzag")
        assert config.transition == "zigzag"
        assert config.use_layer_loop is False

    def test_numeric_policy_values_are_kept_raw(self):
        printer = PrinterConfig(program_type=1.0, interpolation=0.5)
        assert parse_enum(ProgramType, printer.program_type) is ProgramType.MARLIN
        assert parse_enum(InterpolationType, printer.interpolation) is None


@pytest.mark.unit
class TestJobConfig:
    """Tests for JobConfig model and loading."""

    def test_from_dict(self):
        job = JobConfig.from_dict({"contour": {"radius": 50}, "slicer": {"heights": [0]}})
        assert job.name == "layerpath_job"
        assert job.printer.program_type == "sinumerik"
        assert job.variables == []

    def test_from_dict_invalid(self):
        with pytest.raises(ConfigurationError) as exc_info:
            JobConfig.from_dict({"contour": {"radius": 50}})
        assert "error" in exc_info.value.details

    def test_load_job_config(self, job_file):
        """Test loading the sample job file."""
        job = load_job_config(job_file)
        assert job.name == "cylinder"
        assert job.slicer.resolved_heights() == pytest.approx([0.0, 10.0, 20.0])
        assert job.feed_rate == 1500
        assert job.variables == [VariableConfig(prefix="E", method="displacement", factor=0.5)]

    def test_name_defaults_to_file_stem(self, temp_dir):
        path = temp_dir / "tower.yaml"
        path.write_text("contour: {radius: 10}\nslicer: {heights: [0]}\n")
        assert load_job_config(path).name == "tower"

    def test_job_wrapper_key(self, temp_dir):
        path = temp_dir / "wrapped.yaml"
        path.write_text("job:\n  contour: {radius: 10}\n  slicer: {heights: [0, 1]}\n")
        job = load_job_config(path)
        assert job.name == "wrapped"
        assert job.slicer.heights == [0, 1]

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError):
            load_job_config(temp_dir / "missing.yaml")

    def test_malformed_yaml(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("contour: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_job_config(path)

    def test_not_a_mapping(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_job_config(path)


@pytest.mark.unit
class TestConfigManager:
    """Tests for ConfigManager."""

    def test_init_with_valid_dir(self, jobs_dir):
        """Test initialization with valid directory."""
        manager = ConfigManager(jobs_dir)
        assert manager.config_dir == jobs_dir

    def test_init_with_invalid_dir(self, temp_dir):
        """Test initialization with non-existent directory."""
        with pytest.raises(ConfigurationError):
            ConfigManager(temp_dir / "nonexistent")

    def test_list_jobs(self, jobs_dir):
        manager = ConfigManager(jobs_dir)
        assert manager.list_jobs() == ["cylinder", "wall"]

    def test_get_job(self, jobs_dir):
        """Test getting a specific job configuration."""
        job = ConfigManager(jobs_dir).get_job("wall")
        assert job.name == "wall"
        assert job.slicer.type == "open_planar_2d"
        assert job.printer.program_type == "marlin"

    def test_get_job_not_found(self, jobs_dir):
        """Test getting a non-existent job."""
        manager = ConfigManager(jobs_dir)
        with pytest.raises(ConfigurationError) as exc_info:
            manager.get_job("nonexistent")
        assert "available" in exc_info.value.details
