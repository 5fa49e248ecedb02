"""
Unit tests for the curve slicer, the custom contours slicer and the slicer factory.
"""

import numpy as np
import pytest

from layerpath.core.exceptions import ArgumentError, ConfigurationError
from layerpath.geometry.kernel import Curve
from layerpath.geometry.transitions import linear_transitions
from layerpath.postprocessor import ProgramGenerator
from layerpath.slicing import (
    SLICER_REGISTRY,
    ClosedPlanar2DSlicer,
    ContoursTransitionsSlicer,
    CurveSlicer,
    OpenPlanar2DSlicer,
    get_slicer,
)


@pytest.fixture
def rows():
    return [Curve.from_line([0, 0, 0], [100, 0, 0]), Curve.from_line([100, 10, 0], [0, 10, 0])]


@pytest.mark.unit
@pytest.mark.slicing
class TestCurveSlicer:
    """Tests for CurveSlicer."""

    def test_single_layer(self, line):
        slicer = CurveSlicer(line, distance=30.0).slice()
        assert len(slicer.frames_by_layer) == 1
        assert len(slicer.frames) == 5
        assert slicer.get_length() == pytest.approx(100.0)

    def test_closed_curve(self, unit_circle):
        slicer = CurveSlicer(unit_circle, distance=0.5).slice()
        assert np.allclose(slicer.frame_at_start.xyz, slicer.frame_at_end.xyz)

    @pytest.mark.parametrize("distance", [0.0, -1.0, 200.0])
    def test_invalid_distance(self, line, distance):
        with pytest.raises(ConfigurationError):
            CurveSlicer(line, distance=distance).slice()

    def test_program_header_has_no_layer_count(self, line):
        slicer = CurveSlicer(line, distance=30.0).slice()
        lines = ProgramGenerator().create_program([slicer])
        assert "; CURVE SLICER OBJECT - 0.1 METER" in lines
        assert "; LAYER 1" in lines
        assert "; NO PROGRAM SETTINGS DEFINED" in lines


@pytest.mark.unit
@pytest.mark.slicing
class TestContoursTransitionsSlicer:
    """Tests for slicing user supplied contours and transitions."""

    def test_layers(self, rows):
        slicer = ContoursTransitionsSlicer(rows, linear_transitions(rows), distance=30.0).slice()
        assert [len(layer) for layer in slicer.frames_by_layer] == [5, 5]
        assert len(slicer.path) == 3
        assert slicer.get_length() == pytest.approx(210.0)

    def test_transition_frames_without_ends(self, rows):
        slicer = ContoursTransitionsSlicer(rows, linear_transitions(rows), distance=4.0).slice()
        first = slicer.frames_by_layer[0]
        # Two inner frames on the 10 mm connector
        assert [f.xyz[1] for f in first[-2:]] == pytest.approx([10 / 3, 20 / 3])
        assert first[-3].xyz[0] == pytest.approx(100.0)

    def test_without_transitions(self, rows):
        slicer = ContoursTransitionsSlicer(rows, [], distance=30.0).slice()
        assert len(slicer.path) == 2
        assert slicer.get_length() == pytest.approx(200.0)

    def test_no_contours(self):
        with pytest.raises(ArgumentError):
            ContoursTransitionsSlicer([], [], distance=30.0).slice()

    def test_too_many_transitions(self, rows):
        transitions = linear_transitions(rows) * 3
        with pytest.raises(ArgumentError):
            ContoursTransitionsSlicer(rows, transitions).slice()

    def test_invalid_distance(self, rows):
        with pytest.raises(ConfigurationError):
            ContoursTransitionsSlicer(rows, [], distance=0.0).slice()

    def test_transformed_inputs(self, rows):
        slicer = ContoursTransitionsSlicer(rows, linear_transitions(rows), distance=30.0).slice()
        matrix = np.identity(4)
        matrix[:3, 3] = [0.0, 0.0, 3.0]
        moved = slicer.transformed(matrix)
        assert moved.input_contours[0].point_at_start[2] == pytest.approx(3.0)
        assert moved.input_transitions[0].point_at_start[2] == pytest.approx(3.0)
        assert slicer.input_contours[0].point_at_start[2] == pytest.approx(0.0)

    def test_program_header(self, rows):
        slicer = ContoursTransitionsSlicer(rows, linear_transitions(rows), distance=30.0).slice()
        lines = ProgramGenerator().create_program([slicer])
        assert "; CUSTOM SLICER OBJECT - 0.21 METER" in lines
        assert "; LAYER 2" in lines


@pytest.mark.unit
@pytest.mark.slicing
class TestSlicerFactory:
    """Tests for get_slicer and the registry."""

    def test_registry(self):
        assert set(SLICER_REGISTRY) == {"closed_planar_2d", "open_planar_2d", "curve", "contours_transitions"}

    def test_get_closed_planar(self, circle):
        slicer = get_slicer("closed_planar_2d", curve=circle, seam_length=50.0, heights=[0.0, 5.0])
        assert isinstance(slicer, ClosedPlanar2DSlicer)
        assert slicer.heights == [0.0, 5.0]

    def test_name_is_normalized(self, line):
        assert isinstance(get_slicer(" Open-Planar_2D ", curve=line), OpenPlanar2DSlicer)
        assert isinstance(get_slicer("CURVE", curve=line), CurveSlicer)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown slicer 'spiral'"):
            get_slicer("spiral")
