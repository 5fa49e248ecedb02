"""
Geometry module - curves, frames, seams and transitions.

- kernel: immutable parametric curves (numpy/scipy)
- frames: oriented samples along curves, curvature reduction
- curves: blending, weaving, splitting, direction alignment
- seams: seam placement on closed contours
- transitions: connectors between contours and joins
"""

from layerpath.geometry.kernel import Curve, TOLERANCE, curve_closest_points, join_curves
from layerpath.geometry.frames import (
    Frame,
    frame_at,
    frames_at,
    frames_by_curvature,
    frames_by_distance,
    frames_by_distance_and_segment,
    interpolate_frames,
    reduce_by_curvature,
    sort_frames_along_curve,
)
from layerpath.geometry.curves import (
    align_curve,
    align_curves,
    alternate_curves,
    interpolate_curves,
    merge_curves,
    split_at_length,
    weave_curves,
)
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
from layerpath.geometry.transitions import (
    build_transitions,
    join_bezier,
    join_closed_curves,
    join_interpolated,
    join_linear,
    join_open_curves,
    join_outside_arc,
    trim_curve_from_ends,
)

__all__ = [
    # Kernel
    "Curve",
    "TOLERANCE",
    "curve_closest_points",
    "join_curves",
    # Frames
    "Frame",
    "frame_at",
    "frames_at",
    "frames_by_curvature",
    "frames_by_distance",
    "frames_by_distance_and_segment",
    "interpolate_frames",
    "reduce_by_curvature",
    "sort_frames_along_curve",
    # Curves
    "align_curve",
    "align_curves",
    "alternate_curves",
    "interpolate_curves",
    "merge_curves",
    "split_at_length",
    "weave_curves",
    # Seams
    "align_seams_along_closest_plane_intersection",
    "align_seams_along_curve",
    "align_seams_by_closest_point",
    "seam_at_closest_plane_intersection",
    "seam_at_closest_point",
    "seam_at_length",
    "seam_at_param",
    "seam_closest_to_curve",
    # Transitions
    "build_transitions",
    "join_bezier",
    "join_closed_curves",
    "join_interpolated",
    "join_linear",
    "join_open_curves",
    "join_outside_arc",
    "trim_curve_from_ends",
]
