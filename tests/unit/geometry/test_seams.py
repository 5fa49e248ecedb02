"""
Unit tests for seam placement on closed contours.
"""

import math

import numpy as np
import pytest

from layerpath.core.exceptions import InvalidGeometryError, NoIntersectionError, RangeError
from layerpath.geometry.kernel import Curve
from layerpath.geometry.seams import (
    align_seams_along_closest_plane_intersection,
    align_seams_along_curve,
    align_seams_by_closest_point,
    seam_at_closest_plane_intersection,
    seam_at_closest_point,
    seam_at_length,
    seam_at_param,
    seam_closest_to_curve,
)


@pytest.mark.unit
@pytest.mark.geometry
class TestSeamPlacement:
    """Tests for single-curve seam placement."""

    def test_seam_at_normalized_length(self, unit_circle):
        moved = seam_at_length(unit_circle, 0.25, normalized=True)
        assert np.allclose(moved.point_at_start, [0, 1, 0], atol=1e-9)
        assert moved.domain[0] == 0.0

    def test_seam_at_length(self, square):
        moved = seam_at_length(square, 150.0)
        assert np.allclose(moved.point_at_start, [100, 50, 0])
        assert moved.get_length() == pytest.approx(400.0)

    def test_seam_is_idempotent(self, circle):
        once = seam_at_length(circle, 0.3, normalized=True)
        twice = seam_at_length(once, 0.0, normalized=True)
        assert np.allclose(twice.point_at_start, once.point_at_start)
        assert twice.get_length() == pytest.approx(once.get_length(), rel=1e-9)

    def test_length_is_invariant(self, square):
        for factor in (0.1, 0.5, 0.9):
            moved = seam_at_length(square, factor, normalized=True)
            assert moved.get_length() == pytest.approx(square.get_length(), rel=1e-9)

    def test_seam_on_open_curve(self, line):
        with pytest.raises(InvalidGeometryError):
            seam_at_length(line, 10.0)
        with pytest.raises(InvalidGeometryError):
            seam_at_param(line, 10.0)

    def test_seam_length_out_of_range(self, unit_circle):
        with pytest.raises(RangeError):
            seam_at_length(unit_circle, 1.5, normalized=True)
        with pytest.raises(RangeError):
            seam_at_length(unit_circle, -1.0)
        with pytest.raises(RangeError):
            seam_at_length(unit_circle, 10.0)

    def test_seam_at_param(self, unit_circle):
        moved = seam_at_param(unit_circle, math.pi)
        assert np.allclose(moved.point_at_start, [-1, 0, 0])

    def test_seam_at_reparametrized_param(self, unit_circle):
        moved = seam_at_param(unit_circle, 0.5, reparametrize=True)
        assert np.allclose(moved.point_at_start, [-1, 0, 0])

    def test_seam_at_param_outside_domain(self, unit_circle):
        with pytest.raises(RangeError):
            seam_at_param(unit_circle, 7.0)

    def test_seam_at_closest_point(self, unit_circle):
        moved = seam_at_closest_point(unit_circle, [0, -3, 0])
        assert np.allclose(moved.point_at_start, [0, -1, 0], atol=1e-7)

    def test_seam_closest_to_curve(self, unit_circle):
        guide = Curve.from_line([-3, -1, 0], [-3, 1, 0])
        moved = seam_closest_to_curve(unit_circle, guide)
        assert np.allclose(moved.point_at_start, [-1, 0, 0], atol=1e-5)

    def test_seam_at_closest_plane_intersection(self, unit_circle):
        moved = seam_at_closest_plane_intersection(unit_circle, ([0, 2, 0], [1, 0, 0]))
        assert np.allclose(moved.point_at_start, [0, 1, 0], atol=1e-7)

    def test_no_plane_intersection(self, unit_circle):
        with pytest.raises(NoIntersectionError):
            seam_at_closest_plane_intersection(unit_circle, ([5, 0, 0], [1, 0, 0]))


@pytest.mark.unit
@pytest.mark.geometry
class TestSeamAlignment:
    """Tests for aligning the seams of stacked contours."""

    def _stack(self):
        return [
            Curve.from_arc([0, 0, z], 1.0, 2 * math.pi, start_angle=angle)
            for z, angle in ((0, 0.0), (1, math.pi / 2), (2, math.pi))
        ]

    def test_align_by_closest_point(self):
        contours = self._stack()
        aligned = align_seams_by_closest_point(contours)
        assert aligned[0] is contours[0]
        assert np.allclose(aligned[1].point_at_start, [1, 0, 1], atol=1e-7)
        assert np.allclose(aligned[2].point_at_start, [1, 0, 2], atol=1e-7)

    def test_inputs_are_not_modified(self):
        contours = self._stack()
        align_seams_by_closest_point(contours)
        assert np.allclose(contours[1].point_at_start, [0, 1, 1])

    def test_align_along_curve(self):
        guide = Curve.from_line([0, -3, 0], [0, -3, 2])
        aligned = align_seams_along_curve(self._stack(), guide)
        for z, contour in enumerate(aligned):
            assert np.allclose(contour.point_at_start, [0, -1, z], atol=1e-5)

    def test_align_along_plane_intersection(self):
        aligned = align_seams_along_closest_plane_intersection(self._stack(), ([-5, 0, 0], [0, 1, 0]))
        for z, contour in enumerate(aligned):
            assert np.allclose(contour.point_at_start, [-1, 0, z], atol=1e-7)

    def test_empty(self):
        assert align_seams_by_closest_point([]) == []
