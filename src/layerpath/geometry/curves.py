"""
Curve utilities: domains, blending, weaving, splitting and direction alignment.
"""

from typing import List, Optional, Sequence

import numpy as np

from layerpath.core.exceptions import ArgumentError, GeometryError, RangeError
from layerpath.geometry.frames import Frame, frame_at
from layerpath.geometry.kernel import TOLERANCE, Curve, join_curves

_ORIENTATION_SAMPLES = 64


def reset_domain(curve: Curve) -> Curve:
    """Shift the domain so that it starts at zero."""
    return curve.reset_domain()


def number_closed(curves: Sequence[Curve]) -> int:
    return sum(1 for curve in curves if curve.is_closed)


def alternate_curves(curves: Sequence[Curve]) -> List[Curve]:
    """Reverse every other curve, starting with the second."""
    return [curve.reversed() if i % 2 == 1 else curve for i, curve in enumerate(curves)]


def start_frames(curves: Sequence[Curve]) -> List[Frame]:
    return [frame_at(curve, curve.domain[0]) for curve in curves]


def end_frames(curves: Sequence[Curve]) -> List[Frame]:
    return [frame_at(curve, curve.domain[1]) for curve in curves]


def weave_curves(curves: Sequence[Curve], transitions: Sequence[Curve]) -> List[Curve]:
    """Interleave ``curves[0], transitions[0], curves[1], ...``; the longer list finishes alone."""
    result: List[Curve] = []
    for i in range(max(len(curves), len(transitions))):
        if i < len(curves):
            result.append(curves[i])
        if i < len(transitions):
            result.append(transitions[i])
    return result


def merge_curves(curves: Sequence[Curve], transitions: Sequence[Curve]) -> Curve:
    """
    Weave contours and transitions and join them into one curve.

    Raises:
        GeometryError: If the pieces do not form one contiguous curve
    """
    joined = join_curves(weave_curves(curves, transitions))
    if len(joined) != 1:
        raise GeometryError(
            "Contours and transitions do not join into a single curve",
            details={"pieces": len(joined)},
        )
    return joined[0]


def split_at_length(curve: Curve, length: float) -> List[Curve]:
    """
    Split a curve at an arc length from its start.

    Returns the curve itself when the length is exactly at either end.

    Raises:
        RangeError: If length is outside [0, curve length]
    """
    total = curve.get_length()
    if length < 0.0 or length > total:
        raise RangeError("Split length lies outside the curve", value=length, bounds=(0.0, total))
    if length <= TOLERANCE or length >= total - TOLERANCE:
        return [curve]
    return list(curve.split(curve.length_parameter(length)))


def _orientation(curve: Curve) -> np.ndarray:
    """Newell normal of the polygon through samples of a closed curve."""
    d0, d1 = curve.domain
    points = curve.points_at(np.linspace(d0, d1, _ORIENTATION_SAMPLES + 1))
    return 0.5 * np.sum(np.cross(points[:-1], points[1:]), axis=0)


def do_directions_match(curve1: Curve, curve2: Curve) -> bool:
    """True when two curves run in (roughly) the same direction."""
    if curve1.is_closed and curve2.is_closed:
        return bool(_orientation(curve1) @ _orientation(curve2) >= 0.0)

    same = (
        np.linalg.norm(curve1.point_at_start - curve2.point_at_start)
        + np.linalg.norm(curve1.point_at_end - curve2.point_at_end)
    )
    opposite = (
        np.linalg.norm(curve1.point_at_start - curve2.point_at_end)
        + np.linalg.norm(curve1.point_at_end - curve2.point_at_start)
    )
    return bool(same <= opposite)


def align_curve(curve: Curve, reference: Curve) -> Curve:
    """Reverse ``curve`` (keeping its domain) if it runs against ``reference``."""
    if do_directions_match(curve, reference):
        return curve
    return curve.reversed()


def align_curves(curves: Sequence[Curve]) -> List[Curve]:
    """Align each curve with its (already aligned) predecessor."""
    result: List[Curve] = list(curves[:1])
    for curve in curves[1:]:
        result.append(align_curve(curve, result[-1]))
    return result


def interpolate_curves(
    curve1: Curve,
    curve2: Curve,
    tolerance: float = 1.0,
    count: Optional[int] = None,
) -> Curve:
    """
    Blend from ``curve1`` into ``curve2``.

    Both curves are divided into N equal-length pieces; point i of the result
    lies a fraction i/N of the way from curve1's point i to curve2's point i.
    The result starts at curve1's start and ends at curve2's end.

    Args:
        curve1: Curve the blend starts on.
        curve2: Curve the blend ends on.
        tolerance: Target distance between interpolation points.
        count: Explicit number of pieces (overrides tolerance).
    """
    if count is None:
        if tolerance <= 0:
            raise ArgumentError("Interpolation tolerance must be positive", details={"tolerance": tolerance})
        length = max(curve1.get_length(), curve2.get_length())
        n = max(int(round(length / tolerance)), 8)
    else:
        n = max(int(count), 8)

    points1 = curve1.points_at(curve1.divide_by_count(n))
    points2 = curve2.points_at(curve2.divide_by_count(n))
    factors = (np.arange(n + 1) / n)[:, None]
    return Curve.interpolate(points1 + factors * (points2 - points1), degree=3)
