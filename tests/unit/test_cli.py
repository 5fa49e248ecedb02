"""
Tests for the command-line interface.
"""

import logging

import pytest
import structlog
from click.testing import CliRunner

from layerpath import __version__
from layerpath.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    logging.basicConfig(force=True, handlers=[logging.NullHandler()])


@pytest.fixture
def failing_job(temp_dir):
    path = temp_dir / "broken.yaml"
    path.write_text(
        """
contour: {type: circle, radius: 10}
slicer: {seam_length: 500, distance: 5, heights: [0]}
"""
    )
    return path


@pytest.mark.unit
class TestCli:
    """Tests for the layerpath commands."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_validate(self, runner, job_file):
        result = runner.invoke(main, ["validate", str(job_file)])
        assert result.exit_code == 0
        assert "Job 'cylinder' is valid" in result.output

    def test_validate_invalid(self, runner, temp_dir):
        path = temp_dir / "invalid.yaml"
        path.write_text("contour: {radius: 10}\n")
        result = runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid job file" in result.output

    def test_slice_default_output(self, runner, job_file):
        result = runner.invoke(main, ["slice", str(job_file)])
        assert result.exit_code == 0, result.output
        program = job_file.with_suffix(".mpf")
        assert program.exists()
        lines = program.read_text().splitlines()
        assert lines[1].startswith("; This program was generated by LayerPath")
        assert "M30" in lines
        assert "Wrote" in result.output

    def test_slice_explicit_output(self, runner, job_file, temp_dir):
        target = temp_dir / "programs" / "out.mpf"
        result = runner.invoke(main, ["slice", str(job_file), "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert target.exists()

    def test_slice_marlin_suffix(self, runner, jobs_dir):
        result = runner.invoke(main, ["slice", str(jobs_dir / "wall.yaml")])
        assert result.exit_code == 0, result.output
        program = (jobs_dir / "wall.gcode").read_text()
        assert "; G-Code flavor: Marlin" in program

    def test_slice_failure(self, runner, failing_job):
        result = runner.invoke(main, ["slice", str(failing_job)])
        assert result.exit_code == 1
        assert "failed" in result.output
        assert not failing_job.with_suffix(".mpf").exists()

    def test_info(self, runner, job_file):
        result = runner.invoke(main, ["info", str(job_file)])
        assert result.exit_code == 0, result.output
        assert "ClosedPlanar2DSlicer" in result.output
        assert "Steps" in result.output
        assert not job_file.with_suffix(".mpf").exists()

    def test_warnings_are_printed(self, runner, temp_dir):
        path = temp_dir / "warn.yaml"
        path.write_text(
            """
contour: {type: circle, radius: 50}
slicer: {seam_length: 20, distance: 10, heights: [0]}
printer: {program_type: klipper}
"""
        )
        result = runner.invoke(main, ["--log-level", "ERROR", "info", str(path)])
        assert result.exit_code == 0, result.output
        assert "[printer_settings] Invalid ProgramType value 'klipper'" in result.output

    def test_jobs(self, runner, jobs_dir):
        result = runner.invoke(main, ["jobs", str(jobs_dir)])
        assert result.exit_code == 0
        assert "cylinder" in result.output
        assert "open_planar_2d" in result.output

    def test_jobs_empty(self, runner, temp_dir):
        result = runner.invoke(main, ["jobs", str(temp_dir)])
        assert result.exit_code == 0
        assert "No job configurations found." in result.output
