"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from layerpath.geometry.kernel import Curve


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def unit_circle():
    """Counter-clockwise unit circle in XY starting at (1, 0, 0)."""
    return Curve.from_circle([0, 0, 0], 1.0)


@pytest.fixture
def circle():
    """Circle of radius 100 mm (length ~628 mm)."""
    return Curve.from_circle([0, 0, 0], 100.0)


@pytest.fixture
def line():
    """100 mm line along X."""
    return Curve.from_line([0, 0, 0], [100, 0, 0])


@pytest.fixture
def square():
    """Closed 100 x 100 mm polyline square."""
    return Curve.from_polyline([[0, 0, 0], [100, 0, 0], [100, 100, 0], [0, 100, 0]], closed=True)


JOB_YAML = """
name: cylinder
contour:
  type: circle
  center: [0, 0, 0]
  radius: 100
slicer:
  type: closed_planar_2d
  seam_location: 0.0
  seam_length: 50
  distance: 20
  layer_height: 10
  layers: 3
printer:
  program_type: sinumerik
  interpolation: spline
feed_rate: 1500
prefix_lines:
  - "; prepared by test"
variables:
  - prefix: E
    method: displacement
    factor: 0.5
"""


@pytest.fixture
def job_file(temp_dir):
    """Valid closed-planar job on a radius 100 circle."""
    path = temp_dir / "cylinder.yaml"
    path.write_text(JOB_YAML)
    return path


@pytest.fixture
def jobs_dir(temp_dir):
    """Directory holding two job files."""
    directory = temp_dir / "jobs"
    directory.mkdir()
    (directory / "cylinder.yaml").write_text(JOB_YAML)
    (directory / "wall.yaml").write_text(
        """
contour:
  type: line
  points: [[0, 0, 0], [200, 0, 0]]
slicer:
  type: open_planar_2d
  distance: 25
  heights: [0, 10]
printer:
  program_type: marlin
  interpolation: linear
"""
    )
    return directory
