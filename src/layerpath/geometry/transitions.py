"""
Transitions between contours and joining contours into one toolpath.

A transition runs from the end of contour i to the start of contour i+1.
The ``join_*`` functions build the transitions and merge everything into a
single continuous curve, returning ``(joined, transitions)``.
"""

from typing import List, Optional, Sequence, Tuple

from layerpath.core.diagnostics import Diagnostics
from layerpath.core.exceptions import ArgumentError, RangeError
from layerpath.core.logging import get_logger
from layerpath.enumerations import ClosedTransition, OpenTransition, resolve_enum
from layerpath.geometry.curves import end_frames, interpolate_curves, merge_curves, start_frames
from layerpath.geometry.kernel import Curve, join_curves

logger = get_logger(__name__)

JoinResult = Tuple[Curve, List[Curve]]


# ─── Transitions ─────────────────────────────────────────────────────────────

def linear_transitions(curves: Sequence[Curve]) -> List[Curve]:
    """Straight connectors."""
    ends = end_frames(curves)
    starts = start_frames(curves)
    return [Curve.from_line(ends[i].origin, starts[i + 1].origin) for i in range(len(curves) - 1)]


def outside_arc_transitions(curves: Sequence[Curve]) -> List[Curve]:
    """Arcs leaving each contour along its end tangent."""
    ends = end_frames(curves)
    starts = start_frames(curves)
    return [
        Curve.from_arc_start_tangent_end(ends[i].origin, ends[i].tangent, starts[i + 1].origin)
        for i in range(len(curves) - 1)
    ]


def bezier_transitions(curves: Sequence[Curve]) -> List[Curve]:
    """Cubic connectors tangent to both contours."""
    ends = end_frames(curves)
    starts = start_frames(curves)
    return [
        Curve.interpolate(
            [ends[i].origin, starts[i + 1].origin],
            degree=3,
            start_tangent=ends[i].tangent,
            end_tangent=starts[i + 1].tangent,
        )
        for i in range(len(curves) - 1)
    ]


def trim_curve_from_ends(curve: Curve, length: float) -> Tuple[Curve, Optional[Curve]]:
    """
    Remove ``length / 2`` from both ends of a curve.

    Returns:
        Tuple of (trimmed curve, cut). For a closed curve the cut is the
        removed material joined across the seam (tail then head); for an
        open curve it is None.

    Raises:
        ArgumentError: If length is not positive
        RangeError: If the curve is too short for the requested length
    """
    if length <= 0:
        raise ArgumentError("Trim length must be larger than zero", details={"length": length})
    total = curve.get_length()
    if length >= total:
        raise RangeError("Trim length must be shorter than the curve", value=length, bounds=(0.0, total))

    tail_param = curve.length_parameter(total - 0.5 * length)
    head_and_body, tail = curve.split(tail_param)
    head, trimmed = head_and_body.split(head_and_body.length_parameter(0.5 * length))

    cut = None
    if curve.is_closed:
        cut = join_curves([tail, head])[0]
    return trimmed, cut


def trim_curves_from_ends(curves: Sequence[Curve], length: float) -> Tuple[List[Curve], List[Optional[Curve]]]:
    if length <= 0:
        raise ArgumentError("Trim length must be larger than zero", details={"length": length})
    trimmed: List[Curve] = []
    cuts: List[Optional[Curve]] = []
    for curve in curves:
        result, cut = trim_curve_from_ends(curve, length)
        trimmed.append(result)
        cuts.append(cut)
    return trimmed, cuts


def interpolated_transitions(curves: Sequence[Curve], length: float = 100.0, precision: float = 1.0) -> List[Curve]:
    """
    Blend the cut-away material of consecutive closed contours.

    Each contour is trimmed by ``length``; the transition interpolates from
    cut i into cut i+1 with roughly one sample per ``precision`` of cut length.
    """
    if precision <= 0:
        raise ArgumentError("Transition precision must be positive", details={"precision": precision})
    _, cuts = trim_curves_from_ends(curves, length)
    if any(cut is None for cut in cuts):
        raise ArgumentError("Interpolated transitions require closed contours")

    transitions = []
    for i in range(len(curves) - 1):
        count = max(int(round(cuts[i].get_length() / precision)), 8)
        transitions.append(interpolate_curves(cuts[i], cuts[i + 1], count=count))
    return transitions


# ─── Joins ───────────────────────────────────────────────────────────────────

def join_linear(curves: Sequence[Curve]) -> JoinResult:
    transitions = linear_transitions(curves)
    return merge_curves(curves, transitions), transitions


def join_outside_arc(curves: Sequence[Curve]) -> JoinResult:
    transitions = outside_arc_transitions(curves)
    return merge_curves(curves, transitions), transitions


def join_bezier(curves: Sequence[Curve]) -> JoinResult:
    transitions = bezier_transitions(curves)
    return merge_curves(curves, transitions), transitions


def join_interpolated(curves: Sequence[Curve], length: float = 100.0, precision: float = 1.0) -> JoinResult:
    """Trim the contours and connect them with interpolated transitions."""
    trimmed, _ = trim_curves_from_ends(curves, length)
    transitions = interpolated_transitions(curves, length, precision)
    return merge_curves(trimmed, transitions), transitions


def build_transitions(
    curves: Sequence[Curve],
    transition: object = "linear",
    length: float = 100.0,
    precision: float = 1.0,
    diagnostics: Optional[Diagnostics] = None,
    closed: Optional[bool] = None,
) -> Tuple[List[Curve], List[Curve]]:
    """
    Contours and connectors for a transition type.

    Closed contours accept every ``ClosedTransition``; interpolated transitions
    also trim the contours around their seams by ``length``. Open contours
    accept every ``OpenTransition``. Unknown values are reported to
    ``diagnostics`` and fall back to linear connectors.

    Args:
        curves: Contours in print order.
        transition: Member, name, value or index of the transition type.
        length: Material trimmed around each seam (interpolated only).
        precision: Sample spacing along the cuts (interpolated only).
        diagnostics: Warning channel for unknown transition types.
        closed: Policy family; taken from the first contour when None.

    Returns:
        Tuple of (contours, transitions) ready for ``merge_curves``
    """
    if closed is None:
        closed = bool(curves) and curves[0].is_closed
    if closed:
        policy = resolve_enum(ClosedTransition, transition, ClosedTransition.LINEAR, diagnostics, "transitions")
    else:
        policy = resolve_enum(OpenTransition, transition, OpenTransition.LINEAR, diagnostics, "transitions")
    logger.debug("build_transitions", transition=policy.value, curves=len(curves), closed=closed)

    if policy is ClosedTransition.INTERPOLATED:
        trimmed, _ = trim_curves_from_ends(curves, length)
        return trimmed, interpolated_transitions(curves, length, precision)
    if policy in (ClosedTransition.BEZIER, OpenTransition.BEZIER):
        return list(curves), bezier_transitions(curves)
    return list(curves), linear_transitions(curves)


def join_closed_curves(
    curves: Sequence[Curve],
    transition: object = ClosedTransition.LINEAR,
    length: float = 100.0,
    precision: float = 1.0,
    diagnostics: Optional[Diagnostics] = None,
) -> JoinResult:
    """
    Join closed contours with the requested transition type.

    An unknown ``transition`` is reported to ``diagnostics`` and the contours
    are joined linearly.
    """
    contours, transitions = build_transitions(curves, transition, length, precision, diagnostics, closed=True)
    return merge_curves(contours, transitions), transitions


def join_open_curves(
    curves: Sequence[Curve],
    transition: object = OpenTransition.LINEAR,
    diagnostics: Optional[Diagnostics] = None,
) -> JoinResult:
    """Join open contours with the requested transition type (linear on unknown input)."""
    contours, transitions = build_transitions(curves, transition, diagnostics=diagnostics, closed=False)
    return merge_curves(contours, transitions), transitions
