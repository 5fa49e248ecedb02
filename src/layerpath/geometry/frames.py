"""
Frames sampled along curves.

A frame is an oriented point on the toolpath: the origin, the curve tangent
(x axis), the in-plane binormal (y axis) and the normal (z axis). Sampling is
done at equal arc-length spacing and then thinned where the curve is straight.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np
from compas.geometry import Frame as CompasFrame
from compas.geometry import Point, Vector
from scipy.interpolate import splprep

from layerpath.core.config import SQRT_EPSILON
from layerpath.core.exceptions import ArgumentError
from layerpath.core.logging import get_logger
from layerpath.geometry.kernel import (
    TOLERANCE,
    Curve,
    as_matrix,
    as_point,
    as_points,
)

logger = get_logger(__name__)

_WORLD_Z = np.array([0.0, 0.0, 1.0])
_WORLD_X = np.array([1.0, 0.0, 0.0])
_FIT_SAMPLES = 200


def _orientation(tangents: np.ndarray) -> tuple:
    """Unit binormals (tangent x Z, or tangent x X when vertical) and normals."""
    binormals = np.cross(tangents, _WORLD_Z)
    lengths = np.linalg.norm(binormals, axis=1)
    vertical = lengths < 1e-9
    if np.any(vertical):
        binormals[vertical] = np.cross(tangents[vertical], _WORLD_X)
        lengths[vertical] = np.linalg.norm(binormals[vertical], axis=1)
    binormals = binormals / np.where(lengths > 0, lengths, 1.0)[:, None]
    return binormals, np.cross(tangents, binormals)


@dataclass
class Frame:
    """Oriented sample point on a toolpath."""

    origin: Point
    tangent: Vector
    normal: Vector
    binormal: Vector

    @classmethod
    def from_point_tangent(cls, point: Any, tangent: Any) -> "Frame":
        return _build_frames(as_points([point]), as_points([tangent]))[0]

    @property
    def xyz(self) -> np.ndarray:
        return as_point(self.origin)

    def to_compas(self) -> CompasFrame:
        """Frame with the tangent as x axis and the binormal as y axis."""
        return CompasFrame(self.origin, self.tangent, self.binormal)

    def transformed(self, transformation: Any) -> "Frame":
        matrix = as_matrix(transformation)
        linear = matrix[:3, :3]
        origin = matrix @ np.append(self.xyz, 1.0)
        return Frame(
            origin=Point(*(origin[:3] / origin[3])),
            tangent=Vector(*(linear @ as_point(self.tangent))),
            normal=Vector(*(linear @ as_point(self.normal))),
            binormal=Vector(*(linear @ as_point(self.binormal))),
        )

    def to_dict(self) -> Dict[str, List[float]]:
        return {
            "origin": list(self.origin),
            "tangent": list(self.tangent),
            "normal": list(self.normal),
            "binormal": list(self.binormal),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Frame":
        return cls(
            origin=Point(*data["origin"]),
            tangent=Vector(*data["tangent"]),
            normal=Vector(*data["normal"]),
            binormal=Vector(*data["binormal"]),
        )


def _build_frames(points: np.ndarray, tangents: np.ndarray) -> List[Frame]:
    binormals, normals = _orientation(tangents)
    return [
        Frame(Point(*map(float, p)), Vector(*map(float, t)), Vector(*map(float, n)), Vector(*map(float, b)))
        for p, t, n, b in zip(points, tangents, normals, binormals)
    ]


def origins(frames: Sequence[Frame]) -> np.ndarray:
    """Frame origins as an (N, 3) array."""
    return as_points([frame.origin for frame in frames])


def frames_at(curve: Curve, params: Any) -> List[Frame]:
    params = np.atleast_1d(np.asarray(params, dtype=float))
    if params.size == 0:
        return []
    return _build_frames(curve.points_at(params), curve.tangents_at(params))


def frame_at(curve: Curve, t: float) -> Frame:
    return frames_at(curve, [t])[0]


def interpolate_frames(frame1: Frame, frame2: Frame) -> Frame:
    """Component-wise mean of two frames (axes are not renormalized)."""

    def mean(a: Any, b: Any) -> List[float]:
        return list(0.5 * (as_point(a) + as_point(b)))

    return Frame(
        origin=Point(*mean(frame1.origin, frame2.origin)),
        tangent=Vector(*mean(frame1.tangent, frame2.tangent)),
        normal=Vector(*mean(frame1.normal, frame2.normal)),
        binormal=Vector(*mean(frame1.binormal, frame2.binormal)),
    )


def apply_end_flags(frames: List[Frame], include_start: bool, include_end: bool) -> List[Frame]:
    """Drop the first and/or last frame."""
    if include_start and include_end:
        return frames
    if not include_start and not include_end:
        if len(frames) == 2:
            return []
        return frames[1:-1]
    if include_start:
        return frames[:-1]
    return frames[1:]


def reduce_by_curvature(
    frames: List[Frame],
    curve: Curve,
    keep: int = 5,
    threshold: float = SQRT_EPSILON,
) -> List[Frame]:
    """
    Remove frames where the curve is (nearly) straight.

    The first and last ``keep`` frames always survive, and every frame within
    ``keep`` positions of a curved sample survives too.
    """
    n = len(frames)
    if n == 0:
        return []

    params = curve.closest_parameters(origins(frames))
    curvature = np.linalg.norm(curve.curvatures_at(params), axis=1)

    index = np.arange(n)
    interior = (index >= keep) & (index <= n - keep - 1)
    remove = interior & (curvature < threshold)

    marked = remove.copy()
    for i in range(keep, n - keep - 1):
        if not marked[i]:
            remove[i - keep:i + keep + 2] = False

    result = [frame for frame, drop in zip(frames, remove) if not drop]
    logger.debug("frames_reduced", before=n, after=len(result))
    return result


def frames_by_distance(
    curve: Curve,
    distance: float,
    include_start: bool = True,
    include_end: bool = True,
    keep: int = 5,
    threshold: float = SQRT_EPSILON,
) -> List[Frame]:
    """
    Frames at (approximately) equal arc-length spacing.

    Args:
        curve: Curve to sample.
        distance: Target spacing between frames.
        include_start: Keep the frame at the curve start.
        include_end: Keep the frame at the curve end.
        keep: Frames protected around curved samples and at both ends.
        threshold: Curvature below which a sample counts as straight.

    Returns:
        Frames ordered along the curve, or an empty list for a degenerate curve.
    """
    if distance <= 0:
        raise ArgumentError("Frame distance must be positive", details={"distance": distance})

    length = curve.get_length()
    if length < TOLERANCE:
        logger.debug("frames_degenerate_curve", length=length)
        return []

    count = max(int(math.ceil(length / distance)), 1)
    frames = frames_at(curve, curve.divide_by_count(count))
    frames = reduce_by_curvature(frames, curve, keep, threshold)
    return apply_end_flags(frames, include_start, include_end)


def frames_by_distance_and_segment(
    curve: Curve,
    distance: float,
    include_start: bool = True,
    include_end: bool = True,
    keep: int = 5,
    threshold: float = SQRT_EPSILON,
) -> List[Frame]:
    """Frame every segment separately, averaging the frames where segments meet."""
    result: List[Frame] = []
    for segment in curve.duplicate_segments():
        subset = frames_by_distance(segment, distance, True, True, keep, threshold)
        if not subset:
            continue
        if result:
            result[-1] = interpolate_frames(result[-1], subset[0])
            result.extend(subset[1:])
        else:
            result.extend(subset)
    return apply_end_flags(result, include_start, include_end)


def sort_frames_along_curve(frames: List[Frame], curve: Curve) -> List[Frame]:
    """Stable sort by the parameter of each frame's closest curve point."""
    if not frames:
        return []
    params = curve.closest_parameters(origins(frames))
    return [frames[i] for i in np.argsort(params, kind="stable")]


def frames_by_curvature(
    curve: Curve,
    tolerance: float = 0.1,
    include_start: bool = True,
    include_end: bool = True,
) -> List[Frame]:
    """
    Frames concentrated where the curve bends.

    A smoothing cubic spline is fitted within ``tolerance``; the curve is
    framed at the closest points of the fit's inner control points.
    """
    if tolerance <= 0:
        raise ArgumentError("Fit tolerance must be positive", details={"tolerance": tolerance})

    d0, d1 = curve.domain
    samples = curve.points_at(np.linspace(d0, d1, _FIT_SAMPLES))
    tck, _ = splprep(samples.T, k=3, s=len(samples) * tolerance ** 2)
    controls = np.column_stack(tck[1])

    inner = np.sort(curve.closest_parameters(controls[1:-1])) if len(controls) > 2 else []
    # Closed curves: end frame stays last even though it projects onto the start
    frames = frames_at(curve, np.concatenate([[d0], inner, [d1]]))
    return apply_end_flags(frames, include_start, include_end)


def distances_along_frames(frames: Sequence[Frame]) -> List[float]:
    """Cumulative straight-line distance from the first frame."""
    if not frames:
        return []
    points = origins(frames)
    steps = np.linalg.norm(np.diff(points, axis=0), axis=1)
    return [0.0] + list(np.cumsum(steps))
