"""
Parametric curve kernel adapter.

Supplies the small capability set the toolpath engine is written against:
evaluation (point, tangent, curvature), arc-length parametrization,
closest point, split/trim/join, seam change, plane intersection and
interpolated-curve construction. Geometry is evaluated with numpy, splines
come from scipy.interpolate, and root finding / refinement from
scipy.optimize.

Curves are immutable values. A ``Curve`` wraps a native primitive (polyline,
circular arc, B-spline or a chain of curves) together with the sub-span of
the primitive it covers, its public parameter domain and its direction.
Every operation that would change any of these returns a new ``Curve``.
"""

import math
from abc import ABC, abstractmethod
from functools import cached_property
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
from scipy.interpolate import BSpline, make_interp_spline
from scipy.optimize import brentq, minimize
from scipy.spatial import cKDTree

from layerpath.core.exceptions import (
    ArgumentError,
    GeometryError,
    InvalidGeometryError,
    RangeError,
)
from layerpath.core.logging import get_logger

logger = get_logger(__name__)

TOLERANCE = 1e-6
ZERO_TOLERANCE = 1e-12
WORLD_Z = np.array([0.0, 0.0, 1.0])

_GAUSS_NODES, _GAUSS_WEIGHTS = np.polynomial.legendre.leggauss(8)
_SUBDIVISIONS = 8
_SAMPLES_PER_PIECE = 16
_NEWTON_ITERATIONS = 12


# ─── Coercion helpers ────────────────────────────────────────────────────────

def as_point(value: Any) -> np.ndarray:
    """Coerce a 2- or 3-sequence (tuple, ndarray, compas Point/Vector) to a float array."""
    z = float(value[2]) if len(value) > 2 else 0.0
    return np.array([float(value[0]), float(value[1]), z])


def as_points(values: Any) -> np.ndarray:
    """Coerce a sequence of points to an (N, 3) float array."""
    if isinstance(values, np.ndarray) and values.ndim == 2 and values.shape[1] == 3:
        return values.astype(float)
    points = [as_point(v) for v in values]
    if not points:
        return np.zeros((0, 3))
    return np.vstack(points)


def as_plane(plane: Any) -> Tuple[np.ndarray, np.ndarray]:
    """
    Coerce a plane to ``(origin, unit_normal)``.

    Accepts a compas ``Plane`` (``.point`` / ``.normal``) or an
    ``(origin, normal)`` pair.
    """
    if hasattr(plane, "point") and hasattr(plane, "normal"):
        origin, normal = plane.point, plane.normal
    else:
        origin, normal = plane
    origin = as_point(origin)
    normal = as_point(normal)
    length = np.linalg.norm(normal)
    if length < ZERO_TOLERANCE:
        raise GeometryError("Plane normal has zero length")
    return origin, normal / length


def unitize(vector: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(vector)
    if length < ZERO_TOLERANCE:
        return np.zeros(3)
    return vector / length


def translation_matrix(vector: Any) -> np.ndarray:
    matrix = np.identity(4)
    matrix[:3, 3] = as_point(vector)
    return matrix


def as_matrix(transformation: Any) -> np.ndarray:
    """Accept a 4x4 array-like or a compas ``Transformation``."""
    matrix = np.asarray(getattr(transformation, "matrix", transformation), dtype=float)
    if matrix.shape != (4, 4):
        raise ArgumentError("Transformation must be a 4x4 matrix", details={"shape": matrix.shape})
    return matrix


def _apply(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    result = homogeneous @ matrix.T
    return result[:, :3] / result[:, 3:4]


def _dedupe(points: np.ndarray) -> np.ndarray:
    """Drop consecutive duplicate points."""
    if len(points) < 2:
        return points
    keep = [0]
    for i in range(1, len(points)):
        if np.linalg.norm(points[i] - points[keep[-1]]) > ZERO_TOLERANCE:
            keep.append(i)
    return points[keep]


# ─── Native primitives ───────────────────────────────────────────────────────

class _Primitive(ABC):
    """A natively parametrized curve over ``interval``."""

    interval: Tuple[float, float]
    # Derivatives at the curve ends are taken just inside the span
    one_sided_ends = True

    @abstractmethod
    def evaluate(self, u: np.ndarray, order: int) -> np.ndarray:
        """Return points (order 0) or derivatives (order 1, 2) as an (N, 3) array."""

    @abstractmethod
    def knots(self) -> np.ndarray:
        """Parameters bounding the smooth pieces, interval ends included."""

    def segment_breaks(self) -> np.ndarray:
        """Parameters where the curve explodes into segments."""
        return np.zeros(0)

    @abstractmethod
    def transformed(self, matrix: np.ndarray) -> "_Primitive":
        """Return the primitive under an affine transformation."""

    @cached_property
    def is_closed(self) -> bool:
        a, b = self.interval
        ends = self.evaluate(np.array([a, b]), 0)
        return bool(np.linalg.norm(ends[0] - ends[1]) <= TOLERANCE)


class _PolylinePrimitive(_Primitive):
    """Polyline parametrized by vertex index."""

    def __init__(self, points: np.ndarray):
        points = _dedupe(as_points(points))
        if len(points) < 2:
            raise GeometryError("A polyline needs at least two distinct points")
        self.points = points
        self.interval = (0.0, float(len(points) - 1))

    def evaluate(self, u: np.ndarray, order: int) -> np.ndarray:
        index = np.clip(np.floor(u).astype(int), 0, len(self.points) - 2)
        start = self.points[index]
        delta = self.points[index + 1] - start
        if order == 0:
            return start + delta * (u - index)[:, None]
        if order == 1:
            return delta
        return np.zeros_like(delta)

    def knots(self) -> np.ndarray:
        return np.arange(len(self.points), dtype=float)

    def segment_breaks(self) -> np.ndarray:
        return self.knots()

    def transformed(self, matrix: np.ndarray) -> "_PolylinePrimitive":
        return _PolylinePrimitive(_apply(matrix, self.points))


class _ArcPrimitive(_Primitive):
    """Circular arc parametrized by angle."""

    one_sided_ends = False

    def __init__(self, center, xaxis, yaxis, radius: float, angle: float):
        if radius <= ZERO_TOLERANCE or angle <= ZERO_TOLERANCE:
            raise GeometryError("An arc needs a positive radius and sweep angle")
        self.center = as_point(center)
        self.xaxis = unitize(as_point(xaxis))
        self.yaxis = unitize(as_point(yaxis))
        self.radius = float(radius)
        self.angle = float(angle)
        self.interval = (0.0, self.angle)

    def evaluate(self, u: np.ndarray, order: int) -> np.ndarray:
        cos = np.cos(u)[:, None]
        sin = np.sin(u)[:, None]
        if order == 0:
            return self.center + self.radius * (cos * self.xaxis + sin * self.yaxis)
        if order == 1:
            return self.radius * (-sin * self.xaxis + cos * self.yaxis)
        return -self.radius * (cos * self.xaxis + sin * self.yaxis)

    def knots(self) -> np.ndarray:
        count = max(int(math.ceil(self.angle / (0.5 * math.pi))), 1)
        return np.linspace(0.0, self.angle, count + 1)

    def transformed(self, matrix: np.ndarray) -> "_ArcPrimitive":
        linear = matrix[:3, :3]
        xaxis = linear @ self.xaxis
        yaxis = linear @ self.yaxis
        scale = np.linalg.norm(xaxis)
        center = _apply(matrix, self.center[None, :])[0]
        return _ArcPrimitive(center, xaxis, yaxis, self.radius * scale, self.angle)


class _SplinePrimitive(_Primitive):
    """Vector valued scipy B-spline."""

    def __init__(self, spline: BSpline):
        self.spline = spline
        k = spline.k
        self.interval = (float(spline.t[k]), float(spline.t[-k - 1]))

    @cached_property
    def one_sided_ends(self) -> bool:
        # A closed spline without a periodic seam has a kink where it wraps
        if not self.is_closed:
            return False
        ends = self.evaluate(np.array(self.interval), 1)
        return not np.allclose(ends[0], ends[1], atol=TOLERANCE)

    def evaluate(self, u: np.ndarray, order: int) -> np.ndarray:
        if order > self.spline.k:
            return np.zeros((len(u), 3))
        return np.asarray(self.spline(u, nu=order), dtype=float).reshape(len(u), 3)

    def knots(self) -> np.ndarray:
        a, b = self.interval
        inner = self.spline.t[(self.spline.t >= a) & (self.spline.t <= b)]
        return np.unique(inner)

    def transformed(self, matrix: np.ndarray) -> "_SplinePrimitive":
        coefficients = _apply(matrix, np.asarray(self.spline.c, dtype=float))
        return _SplinePrimitive(BSpline(self.spline.t, coefficients, self.spline.k))


class _ChainPrimitive(_Primitive):
    """Curves joined end to end; each keeps the width of its own domain."""

    def __init__(self, curves: Sequence["Curve"]):
        if not curves:
            raise GeometryError("Cannot chain an empty list of curves")
        self.curves = tuple(curves)
        widths = [c.domain[1] - c.domain[0] for c in self.curves]
        self.offsets = np.concatenate([[0.0], np.cumsum(widths)])
        self.interval = (0.0, float(self.offsets[-1]))

    def _locate(self, u: np.ndarray) -> np.ndarray:
        index = np.searchsorted(self.offsets, u, side="right") - 1
        return np.clip(index, 0, len(self.curves) - 1)

    def evaluate(self, u: np.ndarray, order: int) -> np.ndarray:
        index = self._locate(u)
        result = np.empty((len(u), 3))
        for i in np.unique(index):
            mask = index == i
            curve = self.curves[i]
            local = curve.domain[0] + (u[mask] - self.offsets[i])
            result[mask] = curve._evaluate(local, order)
        return result

    def _collect(self, attribute: str) -> np.ndarray:
        values = [self.offsets]
        for offset, curve in zip(self.offsets, self.curves):
            values.append(offset + (getattr(curve, attribute) - curve.domain[0]))
        return np.unique(np.concatenate(values))

    def knots(self) -> np.ndarray:
        return self._collect("_knot_params")

    def segment_breaks(self) -> np.ndarray:
        return self._collect("_segment_params")

    def transformed(self, matrix: np.ndarray) -> "_ChainPrimitive":
        return _ChainPrimitive([c.transformed(matrix) for c in self.curves])


# ─── Curve ───────────────────────────────────────────────────────────────────

class Curve:
    """
    Immutable parametric curve.

    Attributes are read-only; use the returned curves of ``split``,
    ``change_seam``, ``reversed``, ``with_domain`` and ``transformed``.
    """

    def __init__(
        self,
        primitive: _Primitive,
        span: Optional[Tuple[float, float]] = None,
        domain: Optional[Tuple[float, float]] = None,
        reverse: bool = False,
    ):
        self._primitive = primitive
        self._span = tuple(map(float, span)) if span is not None else primitive.interval
        self._domain = tuple(map(float, domain)) if domain is not None else self._span
        self._reversed = bool(reverse)

        if not self._domain[1] > self._domain[0]:
            raise ArgumentError("Curve domain must be increasing", details={"domain": self._domain})
        if not self._span[1] > self._span[0]:
            raise GeometryError("Curve covers an empty span", details={"span": self._span})

    # ── Construction ──────────────────────────────────────────────────

    @classmethod
    def from_line(cls, start: Any, end: Any) -> "Curve":
        """Straight line with domain ``[0, length]``."""
        curve = cls(_PolylinePrimitive(as_points([start, end])))
        return curve.with_domain(0.0, curve.get_length())

    @classmethod
    def from_polyline(cls, points: Any, closed: bool = False) -> "Curve":
        """Polyline through points, parametrized by vertex index."""
        points = as_points(points)
        if closed and len(points) > 1 and np.linalg.norm(points[0] - points[-1]) > TOLERANCE:
            points = np.vstack([points, points[0]])
        return cls(_PolylinePrimitive(points))

    @classmethod
    def from_arc(
        cls,
        center: Any,
        radius: float,
        angle: float,
        start_angle: float = 0.0,
        normal: Any = WORLD_Z,
    ) -> "Curve":
        """Counter-clockwise arc (about ``normal``) starting at ``start_angle``."""
        xaxis, yaxis = _plane_axes(as_point(normal))
        cos, sin = math.cos(start_angle), math.sin(start_angle)
        rotated_x = cos * xaxis + sin * yaxis
        rotated_y = -sin * xaxis + cos * yaxis
        return cls(_ArcPrimitive(center, rotated_x, rotated_y, radius, angle))

    @classmethod
    def from_circle(cls, center: Any, radius: float, normal: Any = WORLD_Z) -> "Curve":
        """Full circle, domain ``[0, 2pi]``, starting on the plane's x axis."""
        return cls.from_arc(center, radius, 2.0 * math.pi, 0.0, normal)

    @classmethod
    def from_arc_start_tangent_end(cls, start: Any, tangent: Any, end: Any) -> "Curve":
        """
        Arc leaving ``start`` along ``tangent`` and passing through ``end``.

        Degenerates to a straight line when ``end`` lies on the tangent line.
        """
        start = as_point(start)
        end = as_point(end)
        direction = unitize(as_point(tangent))
        chord = end - start
        inward = chord - (chord @ direction) * direction
        offset = np.linalg.norm(inward)
        if offset < TOLERANCE or np.linalg.norm(direction) < ZERO_TOLERANCE:
            return cls.from_line(start, end)

        inward = inward / offset
        radius = (chord @ chord) / (2.0 * (chord @ inward))
        center = start + radius * inward
        xaxis = (start - center) / radius
        yaxis = direction
        relative = end - center
        angle = math.atan2(relative @ yaxis, relative @ xaxis)
        if angle <= 0.0:
            angle += 2.0 * math.pi
        return cls(_ArcPrimitive(center, xaxis, yaxis, radius, angle))

    @classmethod
    def interpolate(
        cls,
        points: Any,
        degree: int = 3,
        start_tangent: Any = None,
        end_tangent: Any = None,
        periodic: bool = False,
    ) -> "Curve":
        """
        Interpolating B-spline through points with chord-length knots.

        Args:
            points: Points to pass through.
            degree: Spline degree (lowered when there are too few points).
            start_tangent: Optional start direction (requires end_tangent).
            end_tangent: Optional end direction (requires start_tangent).
            periodic: Build a smooth closed curve.
        """
        points = _dedupe(as_points(points))
        if periodic and len(points) > 1:
            if np.linalg.norm(points[0] - points[-1]) > TOLERANCE:
                points = np.vstack([points, points[0]])
            else:
                points = points.copy()
                points[-1] = points[0]
        if len(points) < 2:
            raise GeometryError("Interpolation needs at least two distinct points")

        chords = np.linalg.norm(np.diff(points, axis=0), axis=1)
        x = np.concatenate([[0.0], np.cumsum(chords)])

        if start_tangent is not None or end_tangent is not None:
            if start_tangent is None or end_tangent is None:
                raise ArgumentError("Both end tangents are required for a constrained interpolation")
            d0 = unitize(as_point(start_tangent))
            d1 = unitize(as_point(end_tangent))
            if len(points) == 2:
                spline = _cubic_hermite(points[0], d0, points[1], d1)
            else:
                spline = make_interp_spline(x, points, k=3, bc_type=([(1, d0)], [(1, d1)]))
        elif periodic and len(points) >= degree + 2:
            spline = make_interp_spline(x, points, k=degree, bc_type="periodic")
        else:
            spline = make_interp_spline(x, points, k=min(degree, len(points) - 1))
        return cls(_SplinePrimitive(spline))

    # ── Parametrization ───────────────────────────────────────────────

    @property
    def domain(self) -> Tuple[float, float]:
        return self._domain

    @property
    def is_reversed(self) -> bool:
        return self._reversed

    @cached_property
    def _scale(self) -> float:
        lo, hi = self._span
        d0, d1 = self._domain
        scale = (hi - lo) / (d1 - d0)
        return -scale if self._reversed else scale

    def _unwrapped(self, t: np.ndarray) -> np.ndarray:
        d0, d1 = self._domain
        lo, hi = self._span
        s = (np.asarray(t, dtype=float) - d0) / (d1 - d0)
        if self._reversed:
            s = 1.0 - s
        return lo + s * (hi - lo)

    def _to_native(self, t: np.ndarray) -> np.ndarray:
        u = self._unwrapped(t)
        a, b = self._primitive.interval
        if not self._primitive.is_closed:
            return np.clip(u, a, b)
        outside = (u < a) | (u > b)
        if np.any(outside):
            u = np.array(u, dtype=float)
            u[outside] = a + np.mod(u[outside] - a, b - a)
        return u

    def _evaluate(self, t: Any, order: int = 0) -> np.ndarray:
        t = np.atleast_1d(np.asarray(t, dtype=float))
        if order and self._primitive.one_sided_ends:
            # One-sided derivatives at breaks and seams
            d0, d1 = self._domain
            margin = 1e-9 * (d1 - d0)
            t = np.clip(t, d0 + margin, d1 - margin)
        values = self._primitive.evaluate(self._to_native(t), order)
        if order:
            values = values * (self._scale ** order)
        return values

    def _native_params(self, native: np.ndarray) -> np.ndarray:
        """Map native parameters inside the span to sorted curve parameters, ends included."""
        a, b = self._primitive.interval
        lo, hi = self._span
        values = np.asarray(native, dtype=float)
        if self._primitive.is_closed and values.size:
            period = b - a
            first = int(math.floor((lo - a) / period)) - 1
            last = int(math.ceil((hi - a) / period)) + 1
            values = np.concatenate([values + k * period for k in range(first, last + 1)])
        margin = 1e-9 * (hi - lo)
        inside = values[(values > lo + margin) & (values < hi - margin)]
        s = (inside - lo) / (hi - lo)
        if self._reversed:
            s = 1.0 - s
        d0, d1 = self._domain
        return np.unique(np.concatenate([[d0, d1], d0 + s * (d1 - d0)]))

    @cached_property
    def _knot_params(self) -> np.ndarray:
        return self._native_params(self._primitive.knots())

    @cached_property
    def _segment_params(self) -> np.ndarray:
        return self._native_params(self._primitive.segment_breaks())

    # ── Evaluation ────────────────────────────────────────────────────

    def point_at(self, t: float) -> np.ndarray:
        return self._evaluate(t, 0)[0]

    def points_at(self, ts: Any) -> np.ndarray:
        return self._evaluate(ts, 0)

    def derivative_at(self, t: float, order: int = 1) -> np.ndarray:
        return self._evaluate(t, order)[0]

    def tangents_at(self, ts: Any) -> np.ndarray:
        derivatives = self._evaluate(ts, 1)
        norms = np.linalg.norm(derivatives, axis=1, keepdims=True)
        return np.where(norms > ZERO_TOLERANCE, derivatives / np.where(norms > 0, norms, 1.0), 0.0)

    def tangent_at(self, t: float) -> np.ndarray:
        return self.tangents_at(t)[0]

    def curvatures_at(self, ts: Any) -> np.ndarray:
        """Curvature vectors (direction of the principal normal, length 1/radius)."""
        first = self._evaluate(ts, 1)
        second = self._evaluate(ts, 2)
        speed2 = np.einsum("ij,ij->i", first, first)
        valid = speed2 > ZERO_TOLERANCE
        safe = np.where(valid, speed2, 1.0)
        along = (np.einsum("ij,ij->i", first, second) / safe)[:, None] * first
        result = (second - along) / safe[:, None]
        result[~valid] = 0.0
        return result

    def curvature_at(self, t: float) -> np.ndarray:
        return self.curvatures_at(t)[0]

    @property
    def point_at_start(self) -> np.ndarray:
        return self.point_at(self._domain[0])

    @property
    def point_at_end(self) -> np.ndarray:
        return self.point_at(self._domain[1])

    @property
    def tangent_at_start(self) -> np.ndarray:
        return self.tangent_at(self._domain[0])

    @property
    def tangent_at_end(self) -> np.ndarray:
        return self.tangent_at(self._domain[1])

    @cached_property
    def is_closed(self) -> bool:
        return bool(np.linalg.norm(self.point_at_start - self.point_at_end) <= TOLERANCE)

    # ── Arc length ────────────────────────────────────────────────────

    def _gauss_lengths(self, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
        half = 0.5 * (ends - starts)
        middle = 0.5 * (ends + starts)
        nodes = middle[:, None] + half[:, None] * _GAUSS_NODES[None, :]
        speeds = np.linalg.norm(self._evaluate(nodes.ravel(), 1), axis=1).reshape(nodes.shape)
        return half * (speeds @ _GAUSS_WEIGHTS)

    @cached_property
    def _arc_table(self) -> Tuple[np.ndarray, np.ndarray]:
        breaks = self._knot_params
        pieces = [
            np.linspace(breaks[i], breaks[i + 1], _SUBDIVISIONS + 1)[:-1]
            for i in range(len(breaks) - 1)
        ]
        edges = np.concatenate(pieces + [breaks[-1:]])
        lengths = self._gauss_lengths(edges[:-1], edges[1:])
        return edges, np.concatenate([[0.0], np.cumsum(lengths)])

    def get_length(self) -> float:
        """Arc length of the curve."""
        return float(self._arc_table[1][-1])

    def length_parameter(self, length: float) -> float:
        """
        Parameter at arc length ``length`` from the start.

        Raises:
            RangeError: If length is outside [0, curve length]
        """
        edges, cumulative = self._arc_table
        total = float(cumulative[-1])
        if length < -TOLERANCE or length > total + TOLERANCE:
            raise RangeError("Length lies outside the curve", value=length, bounds=(0.0, total))
        length = min(max(float(length), 0.0), total)

        i = int(np.searchsorted(cumulative, length, side="right")) - 1
        i = min(max(i, 0), len(edges) - 2)
        lo, hi = float(edges[i]), float(edges[i + 1])
        target = length - float(cumulative[i])
        if target <= 0.0:
            return lo
        if length >= cumulative[i + 1]:
            return hi

        def residual(t: float) -> float:
            return float(self._gauss_lengths(np.array([lo]), np.array([t]))[0]) - target

        if residual(hi) <= 0.0:
            return hi
        return float(brentq(residual, lo, hi, xtol=1e-13))

    def length_at(self, t: float) -> float:
        """Arc length from the start of the curve to parameter ``t``."""
        edges, cumulative = self._arc_table
        t = min(max(float(t), self._domain[0]), self._domain[1])
        i = int(np.searchsorted(edges, t, side="right")) - 1
        i = min(max(i, 0), len(edges) - 2)
        return float(cumulative[i] + self._gauss_lengths(np.array([edges[i]]), np.array([t]))[0])

    def normalized_length_parameter(self, factor: float) -> float:
        if factor < 0.0 or factor > 1.0:
            raise RangeError("Normalized length lies outside [0, 1]", value=factor, bounds=(0.0, 1.0))
        return self.length_parameter(factor * self.get_length())

    def point_at_length(self, length: float) -> np.ndarray:
        return self.point_at(self.length_parameter(length))

    def divide_by_count(self, count: int, include_ends: bool = True) -> np.ndarray:
        """Parameters dividing the curve into ``count`` pieces of equal length."""
        if count < 1:
            raise ArgumentError("Division count must be at least 1", details={"count": count})
        total = self.get_length()
        params = np.array([self.length_parameter(s) for s in np.linspace(0.0, total, count + 1)])
        params[0], params[-1] = self._domain
        if include_ends:
            return params
        return params[1:-1]

    # ── Closest point ─────────────────────────────────────────────────

    @cached_property
    def _samples(self) -> Tuple[np.ndarray, np.ndarray]:
        breaks = self._knot_params
        params = np.unique(np.concatenate([
            np.linspace(breaks[i], breaks[i + 1], _SAMPLES_PER_PIECE + 1)
            for i in range(len(breaks) - 1)
        ]))
        return params, self.points_at(params)

    @cached_property
    def _sample_tree(self) -> cKDTree:
        return cKDTree(self._samples[1])

    def _refine(self, t: np.ndarray, lo: np.ndarray, hi: np.ndarray, targets: np.ndarray) -> np.ndarray:
        """Newton iterations on (C(t) - P) . C'(t) = 0, clamped to [lo, hi]."""
        t = np.array(t, dtype=float)
        for _ in range(_NEWTON_ITERATIONS):
            diff = self._evaluate(t, 0) - targets
            first = self._evaluate(t, 1)
            second = self._evaluate(t, 2)
            f = np.einsum("ij,ij->i", diff, first)
            fp = np.einsum("ij,ij->i", first, first) + np.einsum("ij,ij->i", diff, second)
            step = np.where(np.abs(fp) > ZERO_TOLERANCE, f / np.where(fp == 0.0, 1.0, fp), 0.0)
            t = np.clip(t - step, lo, hi)
        return t

    def closest_parameters(self, points: Any) -> np.ndarray:
        """Parameters of the closest curve points for each of ``points``."""
        targets = as_points(points)
        if len(targets) == 0:
            return np.zeros(0)
        params, samples = self._samples
        last = len(params) - 1
        _, index = self._sample_tree.query(targets)
        index = np.asarray(index, dtype=int)

        def solve(idx: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
            lo = params[np.maximum(idx - 1, 0)]
            hi = params[np.minimum(idx + 1, last)]
            refined = self._refine(params[idx], lo, hi, targets)
            distance = np.linalg.norm(self.points_at(refined) - targets, axis=1)
            sample_distance = np.linalg.norm(samples[idx] - targets, axis=1)
            better = distance <= sample_distance
            return np.where(better, refined, params[idx]), np.where(better, distance, sample_distance)

        result, distance = solve(index)
        if self.is_closed:
            # The seam sample may sit at either domain end
            mirrored = np.where(index == 0, last, np.where(index == last, 0, index))
            if np.any(mirrored != index):
                other, other_distance = solve(mirrored)
                result = np.where(other_distance < distance, other, result)
        return result

    def closest_point(self, point: Any) -> float:
        """Parameter of the curve point closest to ``point``."""
        return float(self.closest_parameters([point])[0])

    # ── Topology ──────────────────────────────────────────────────────

    def split(self, t: float) -> Tuple["Curve", "Curve"]:
        """
        Split into two curves at ``t``; both keep their part of the domain.

        Raises:
            RangeError: If t is not strictly inside the domain
        """
        d0, d1 = self._domain
        margin = 1e-12 * (d1 - d0)
        if not (d0 + margin < t < d1 - margin):
            raise RangeError("Split parameter must lie strictly inside the domain", value=t, bounds=self._domain)
        u = float(self._unwrapped(t))
        lo, hi = self._span
        if not self._reversed:
            first = Curve(self._primitive, (lo, u), (d0, t), False)
            second = Curve(self._primitive, (u, hi), (t, d1), False)
        else:
            first = Curve(self._primitive, (u, hi), (d0, t), True)
            second = Curve(self._primitive, (lo, u), (t, d1), True)
        return first, second

    def trim(self, t0: float, t1: float) -> "Curve":
        """Sub-curve over ``[t0, t1]``."""
        d0, d1 = self._domain
        margin = 1e-12 * (d1 - d0)
        if t0 < d0 - margin or t1 > d1 + margin or not t1 > t0:
            raise RangeError("Trim interval lies outside the domain", value=t0, bounds=self._domain)
        u0, u1 = float(self._unwrapped(t0)), float(self._unwrapped(t1))
        span = (u1, u0) if self._reversed else (u0, u1)
        return Curve(self._primitive, span, (t0, t1), self._reversed)

    def reversed(self) -> "Curve":
        """Same domain, opposite direction."""
        return Curve(self._primitive, self._span, self._domain, not self._reversed)

    def with_domain(self, t0: float, t1: float) -> "Curve":
        """Reparametrize linearly to ``[t0, t1]``."""
        return Curve(self._primitive, self._span, (t0, t1), self._reversed)

    def reset_domain(self) -> "Curve":
        """Shift the domain so that it starts at zero."""
        d0, d1 = self._domain
        return self.with_domain(0.0, d1 - d0)

    def change_seam(self, t: float) -> "Curve":
        """
        Move the start of a closed curve to ``t``.

        The result has domain ``[t, t + width]`` and the same shape.

        Raises:
            InvalidGeometryError: If the curve is open
            RangeError: If t lies outside the domain
        """
        if not self.is_closed:
            raise InvalidGeometryError("Changing the seam requires a closed curve", requirement="closed")
        d0, d1 = self._domain
        width = d1 - d0
        margin = 1e-12 * width
        if t < d0 - margin or t > d1 + margin:
            raise RangeError("Seam parameter lies outside the domain", value=t, bounds=self._domain)
        if t <= d0 + margin or t >= d1 - margin:
            return self.with_domain(t, t + width)

        a, b = self._primitive.interval
        lo, hi = self._span
        if self._primitive.is_closed and abs((hi - lo) - (b - a)) <= 1e-9 * (b - a):
            u = float(self._unwrapped(t))
            period = hi - lo
            span = (u - period, u) if self._reversed else (u, u + period)
            return Curve(self._primitive, span, (t, t + width), self._reversed)

        first, second = self.split(t)
        return Curve(_ChainPrimitive([second, first])).with_domain(t, t + width)

    def to_polyline(self, count: int) -> "Curve":
        """Polyline through ``count + 1`` points spaced equally by arc length."""
        return Curve.from_polyline(self.points_at(self.divide_by_count(count)))

    def duplicate_segments(self) -> List["Curve"]:
        """Explode polylines and joined curves into their segments."""
        breaks = self._segment_params
        if len(breaks) <= 2:
            return [self]
        return [self.trim(breaks[i], breaks[i + 1]) for i in range(len(breaks) - 1)]

    # ── Transformation ────────────────────────────────────────────────

    def transformed(self, transformation: Any) -> "Curve":
        """Apply a 4x4 affine matrix (or compas Transformation)."""
        matrix = as_matrix(transformation)
        return Curve(self._primitive.transformed(matrix), self._span, self._domain, self._reversed)

    def translated(self, vector: Any) -> "Curve":
        return self.transformed(translation_matrix(vector))

    # ── Intersection ──────────────────────────────────────────────────

    def intersect_plane(self, plane: Any) -> List[float]:
        """Parameters where the curve crosses or touches ``plane``."""
        origin, normal = as_plane(plane)
        params, points = self._samples
        distances = (points - origin) @ normal

        def signed(t: float) -> float:
            return float((self.point_at(t) - origin) @ normal)

        roots: List[float] = []
        for i in range(len(params) - 1):
            da, db = distances[i], distances[i + 1]
            if abs(da) <= TOLERANCE:
                roots.append(float(params[i]))
            elif da * db < 0.0 and abs(db) > TOLERANCE:
                roots.append(float(brentq(signed, params[i], params[i + 1], xtol=1e-13)))
        if abs(distances[-1]) <= TOLERANCE:
            roots.append(float(params[-1]))

        result: List[float] = []
        for t in roots:
            point = self.point_at(t)
            if result and np.linalg.norm(self.point_at(result[-1]) - point) <= TOLERANCE:
                continue
            result.append(t)
        if self.is_closed and len(result) > 1:
            if np.linalg.norm(self.point_at(result[0]) - self.point_at(result[-1])) <= TOLERANCE:
                result.pop()
        return result

    def __repr__(self) -> str:
        return (
            f"Curve(domain=({self._domain[0]:.6g}, {self._domain[1]:.6g}), "
            f"closed={self.is_closed}, length={self.get_length():.6g})"
        )


# ─── Module functions ────────────────────────────────────────────────────────

def _plane_axes(normal: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    normal = unitize(normal)
    if np.linalg.norm(normal) < ZERO_TOLERANCE:
        raise GeometryError("Plane normal has zero length")
    reference = np.array([1.0, 0.0, 0.0])
    xaxis = reference - (reference @ normal) * normal
    if np.linalg.norm(xaxis) < 1e-9:
        reference = np.array([0.0, 1.0, 0.0])
        xaxis = reference - (reference @ normal) * normal
    xaxis = unitize(xaxis)
    return xaxis, np.cross(normal, xaxis)


def _cubic_hermite(p0: np.ndarray, d0: np.ndarray, p1: np.ndarray, d1: np.ndarray) -> BSpline:
    """Cubic Bezier between two points with unit-speed end tangents."""
    chord = float(np.linalg.norm(p1 - p0))
    knots = np.array([0.0] * 4 + [chord] * 4)
    controls = np.vstack([p0, p0 + d0 * chord / 3.0, p1 - d1 * chord / 3.0, p1])
    return BSpline(knots, controls, 3)


def join_curves(curves: Sequence[Curve], tolerance: float = TOLERANCE) -> List[Curve]:
    """
    Join curves in the given order.

    Consecutive curves whose end and start coincide within ``tolerance`` are
    chained; every gap starts a new piece.
    """
    groups: List[List[Curve]] = []
    for curve in curves:
        if groups and np.linalg.norm(groups[-1][-1].point_at_end - curve.point_at_start) <= tolerance:
            groups[-1].append(curve)
        else:
            groups.append([curve])

    result = []
    for group in groups:
        result.append(group[0] if len(group) == 1 else Curve(_ChainPrimitive(group)))
    if len(result) > 1:
        logger.debug("join_curves_gaps", pieces=len(result), inputs=len(curves))
    return result


def curve_closest_points(curve_a: Curve, curve_b: Curve) -> Tuple[float, float]:
    """Parameters of the closest pair of points between two curves."""
    params_a, points_a = curve_a._samples
    params_b, _ = curve_b._samples
    distances, index = curve_b._sample_tree.query(points_a)
    i = int(np.argmin(distances))
    j = int(index[i])

    def objective(x: np.ndarray) -> float:
        diff = curve_a.point_at(x[0]) - curve_b.point_at(x[1])
        return float(diff @ diff)

    start = np.array([params_a[i], params_b[j]])
    bounds = [
        (params_a[max(i - 1, 0)], params_a[min(i + 1, len(params_a) - 1)]),
        (params_b[max(j - 1, 0)], params_b[min(j + 1, len(params_b) - 1)]),
    ]
    result = minimize(objective, start, bounds=bounds, method="L-BFGS-B")
    best = result.x if result.fun <= objective(start) else start
    return float(best[0]), float(best[1])
