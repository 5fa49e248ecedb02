"""
Seam placement for closed contours.

The seam is the start/end point of a closed curve, where printing of a layer
begins. Every function returns a new curve whose domain starts at zero; input
curves are never modified.
"""

from typing import Any, List, Sequence

import numpy as np

from layerpath.core.exceptions import InvalidGeometryError, NoIntersectionError, RangeError
from layerpath.core.logging import get_logger
from layerpath.geometry.kernel import Curve, as_plane, curve_closest_points

logger = get_logger(__name__)


def _require_closed(curve: Curve, operation: str) -> None:
    if not curve.is_closed:
        raise InvalidGeometryError(f"{operation} requires a closed curve", requirement="closed")


def seam_at_param(curve: Curve, param: float, reparametrize: bool = False) -> Curve:
    """
    Move the seam to a curve parameter.

    Args:
        curve: Closed curve.
        param: Parameter of the new start point.
        reparametrize: Interpret ``param`` on the normalized domain [0, 1].
    """
    _require_closed(curve, "Seam at parameter")
    if reparametrize:
        curve = curve.with_domain(0.0, 1.0)

    t0, t1 = curve.domain
    if param < t0 or param > t1:
        raise RangeError("Parameter is not inside the curve domain", value=param, bounds=(t0, t1))
    return curve.change_seam(param).reset_domain()


def seam_at_length(curve: Curve, length: float, normalized: bool = False) -> Curve:
    """Move the seam to an arc length (or length factor when ``normalized``) from the start."""
    _require_closed(curve, "Seam at length")
    if length < 0.0:
        raise RangeError("Seam length cannot be negative", value=length)

    if normalized:
        if length > 1.0:
            raise RangeError("Normalized seam length cannot exceed 1", value=length, bounds=(0.0, 1.0))
        param = curve.normalized_length_parameter(length)
    else:
        total = curve.get_length()
        if length > total:
            raise RangeError("Seam length exceeds the curve length", value=length, bounds=(0.0, total))
        param = curve.length_parameter(length)
    return curve.change_seam(param).reset_domain()


def seam_at_closest_point(curve: Curve, point: Any) -> Curve:
    """Move the seam to the curve point closest to ``point``."""
    _require_closed(curve, "Seam at closest point")
    return curve.change_seam(curve.closest_point(point)).reset_domain()


def seam_closest_to_curve(curve: Curve, guide: Curve) -> Curve:
    """Move the seam to the point of ``curve`` closest to a guide curve."""
    _require_closed(curve, "Seam closest to curve")
    t, _ = curve_closest_points(curve, guide)
    return seam_at_closest_point(curve, curve.point_at(t))


def seam_at_closest_plane_intersection(curve: Curve, plane: Any) -> Curve:
    """
    Move the seam to the curve/plane intersection nearest the plane origin.

    Raises:
        NoIntersectionError: If the curve does not meet the plane
    """
    _require_closed(curve, "Seam at closest plane intersection")
    origin, _ = as_plane(plane)
    params = curve.intersect_plane(plane)
    if not params:
        raise NoIntersectionError("No intersections found between the curve and the plane")

    closest = None
    shortest = np.inf
    for point in curve.points_at(params):
        distance = np.linalg.norm(point - origin)
        if distance < shortest:
            shortest = distance
            closest = point
    return seam_at_closest_point(curve, closest)


def align_seams_by_closest_point(curves: Sequence[Curve]) -> List[Curve]:
    """
    Seat each seam at the point closest to the previous contour's seam.

    The parameter is threaded forward: contour i is reseated at its closest
    parameter to contour i-1 evaluated at the previous parameter. The first
    contour is returned unchanged.
    """
    if not curves:
        return []
    result = list(curves)
    t = curves[0].closest_point(curves[0].point_at_start)
    for i in range(1, len(curves)):
        test_point = curves[i - 1].point_at(t)
        t = curves[i].closest_point(test_point)
        result[i] = seam_at_param(curves[i], t)
    logger.debug("seams_aligned", method="closest_point", curves=len(result))
    return result


def align_seams_along_curve(curves: Sequence[Curve], guide: Curve) -> List[Curve]:
    return [seam_closest_to_curve(curve, guide) for curve in curves]


def align_seams_along_closest_plane_intersection(curves: Sequence[Curve], plane: Any) -> List[Curve]:
    return [seam_at_closest_plane_intersection(curve, plane) for curve in curves]
