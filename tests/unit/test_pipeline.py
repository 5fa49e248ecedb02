"""
Tests for the pipeline orchestrator.

Jobs are built from plain dictionaries; a failing step is provoked either with
inconsistent parameters or by patching the program generator.
"""

from unittest.mock import patch

import pytest

from layerpath.core.config import ContourConfig, JobConfig, SlicerConfig, load_job_config
from layerpath.core.diagnostics import Diagnostics
from layerpath.pipeline import (
    Pipeline,
    PipelineResult,
    build_contour,
    build_slicer,
    run_job,
)
from layerpath.slicing import (
    ClosedPlanar2DSlicer,
    ContoursTransitionsSlicer,
    CurveSlicer,
    OpenPlanar2DSlicer,
)

STEPS = ["contour", "slicer", "slice", "variables", "program"]


def _job(**overrides):
    data = {
        "name": "test_job",
        "contour": {"type": "circle", "radius": 50.0},
        "slicer": {"type": "closed_planar_2d", "seam_length": 20.0, "distance": 10.0, "heights": [0.0, 5.0]},
    }
    data.update(overrides)
    return JobConfig.from_dict(data)


@pytest.mark.unit
class TestBuilders:
    """Tests for the contour, transition and slicer builders."""

    def test_circle(self):
        curve = build_contour(ContourConfig(radius=10.0, center=[1, 2, 3]))
        assert curve.is_closed
        assert curve.point_at_start.tolist() == pytest.approx([11, 2, 3])

    def test_line(self):
        curve = build_contour(ContourConfig(type="line", points=[[0, 0, 0], [5, 0, 0], [10, 0, 0]]))
        assert curve.get_length() == pytest.approx(10.0)
        assert not curve.is_closed

    def test_closed_polyline(self):
        config = ContourConfig(type="polyline", points=[[0, 0, 0], [10, 0, 0], [10, 10, 0]], closed=True)
        curve = build_contour(config)
        assert curve.is_closed
        assert curve.get_length() == pytest.approx(20.0 + 200 ** 0.5)

    def test_interpolated(self):
        points = [[0, 0, 0], [10, 5, 0], [20, 0, 0], [30, 5, 0]]
        curve = build_contour(ContourConfig(type="interpolated", points=points))
        assert curve.point_at_end.tolist() == pytest.approx([30, 5, 0])

    @pytest.mark.parametrize(
        "slicer_type, cls",
        [
            ("closed_planar_2d", ClosedPlanar2DSlicer),
            ("contours_transitions", ContoursTransitionsSlicer),
            ("curve", CurveSlicer),
        ],
    )
    def test_build_slicer(self, circle, slicer_type, cls):
        config = SlicerConfig(type=slicer_type, seam_length=20.0, heights=[0.0, 5.0])
        assert isinstance(build_slicer(circle, config), cls)

    def test_build_open_slicer(self, line):
        slicer = build_slicer(line, SlicerConfig(type="open-planar-2d", layer_height=2.0, layers=3))
        assert isinstance(slicer, OpenPlanar2DSlicer)
        assert slicer.heights == pytest.approx([0.0, 2.0, 4.0])

    def test_custom_slicer_with_interpolated_transitions(self, circle):
        config = SlicerConfig(
            type="contours_transitions", heights=[0.0, 5.0], seam_length=40.0, distance=10.0, transition="interpolated"
        )
        slicer = build_slicer(circle, config).slice()
        assert len(slicer.input_transitions) == 1
        assert slicer.contours[0].get_length() == pytest.approx(circle.get_length() - 40.0, rel=1e-6)

    def test_custom_slicer_with_unknown_transition(self, line):
        diagnostics = Diagnostics()
        config = SlicerConfig(type="contours_transitions", heights=[0.0, 5.0], transition="zigzag")
        slicer = build_slicer(line, config, diagnostics)
        assert len(diagnostics) == 1
        assert slicer.input_transitions[0].get_length() == pytest.approx((100.0 ** 2 + 5.0 ** 2) ** 0.5)


@pytest.mark.unit
class TestPipeline:
    """Tests for Pipeline.run."""

    def test_successful_run(self):
        result = Pipeline(_job()).run()
        assert result.success
        assert [step.name for step in result.steps] == STEPS
        assert result.step_completed == "program"
        assert set(result.timings) == set(STEPS)
        assert result.errors == []
        assert isinstance(result.slicer, ClosedPlanar2DSlicer)
        assert result.program[-5:] == [" ", "M30", " ", " ", " "]

    def test_job_file(self, job_file):
        result = run_job(load_job_config(job_file))
        assert result.success
        lines = result.program
        feed = lines.index("F1500 ; Feedrate in mm/min")
        prefix = lines.index("; prepared by test")
        header = next(i for i, line in enumerate(lines) if line.startswith("; 2.5D CLOSED PLANAR OBJECT - 3 LAYERS"))
        assert feed < prefix < header
        assert lines[header + 3:header + 5] == [" ", "; LAYER 1"]
        assert lines[header + 5].endswith(" E0")

    def test_summary(self, job_file):
        summary = run_job(load_job_config(job_file)).summary()
        assert summary["job"] == "cylinder"
        assert summary["slicer"] == "ClosedPlanar2DSlicer"
        assert summary["layers"] == 3
        assert summary["variables"] == ["E"]
        assert summary["warnings"] == 0
        assert summary["length_mm"] > 3 * 500.0

    def test_layer_loop(self):
        slicer = {"seam_length": 20.0, "distance": 10.0, "heights": [0.0, 5.0, 10.0], "use_layer_loop": True}
        result = Pipeline(_job(slicer=slicer)).run()
        assert "LINE1:" in result.program

    def test_open_planar_marlin(self):
        job = _job(
            contour={"type": "line", "points": [[0, 0, 0], [100, 0, 0]]},
            slicer={"type": "open_planar_2d", "distance": 30.0, "heights": [0.0, 10.0]},
            printer={"program_type": "marlin", "interpolation": "linear", "hot_end_temperature": 200},
            variables=[{"prefix": "E", "method": "layer_distance"}],
        )
        result = Pipeline(job).run()
        assert result.success
        assert "; LAYER 2, 5 Points" in result.program
        assert "G1 X100 Y0 Z10 E10" in result.program
        assert "M104 S0; Set hotend temperature to 0" in result.program

    def test_contours_transitions(self):
        slicer = {
            "type": "contours_transitions",
            "seam_length": 20.0,
            "distance": 10.0,
            "heights": [0.0, 5.0],
            "transition": "interpolated",
        }
        result = Pipeline(_job(slicer=slicer)).run()
        assert result.success
        assert len(result.slicer.path) == 3
        header = next(line for line in result.program if line.startswith("; CUSTOM SLICER OBJECT - "))
        assert "LAYERS" not in header

    def test_invalid_enumerations_are_warnings(self):
        job = _job(
            printer={"program_type": "klipper", "interpolation": 7},
            variables=[{"prefix": "E", "method": "volume"}],
        )
        result = Pipeline(job).run()
        assert result.success
        assert len(result.diagnostics) == 3
        assert "; G-Code flavor: Sinumerik" in result.program
        assert result.slicer.added_variables["E"][0][0] == pytest.approx(0.0)

    def test_slice_failure(self):
        slicer = {"seam_length": 1000.0, "distance": 10.0, "heights": [0.0]}
        result = Pipeline(_job(slicer=slicer)).run()
        assert not result.success
        assert result.step_completed == "slicer"
        assert result.slicer is None
        assert result.errors[0].startswith("Step 'slice' failed: The seam length")
        assert result.program == []
        assert result.summary() == {"job": "test_job", "success": False}

    def test_unknown_slicer(self):
        result = Pipeline(_job(slicer={"type": "spiral", "heights": [0.0]})).run()
        assert not result.success
        assert result.step_completed == "contour"
        assert "Unknown slicer 'spiral'" in result.errors[0]

    def test_variables_failure(self):
        job = _job(
            slicer={"seam_length": 20.0, "distance": 10.0, "heights": [0.0]},
            variables=[{"prefix": "H", "method": "layer_distance"}],
        )
        result = Pipeline(job).run()
        assert not result.success
        assert result.step_completed == "slice"
        assert result.slicer is not None

    def test_program_failure(self):
        with patch("layerpath.pipeline.ProgramGenerator.create_program", side_effect=RuntimeError("disk full")):
            result = Pipeline(_job()).run()
        assert not result.success
        assert result.steps[-1].name == "program"
        assert result.steps[-1].error == "disk full"
        assert result.errors == ["Step 'program' failed: disk full"]


@pytest.mark.unit
class TestPipelineResult:
    """Tests for PipelineResult output helpers."""

    def test_empty_program_text(self):
        assert PipelineResult(success=False).program_text == ""

    def test_write_program(self, temp_dir):
        result = PipelineResult(success=True, program=["G1 X0", "M30"])
        path = result.write_program(temp_dir / "out" / "job.mpf")
        assert path.read_text(encoding="utf-8") == "G1 X0\nM30\n"
