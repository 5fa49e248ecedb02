"""
Slicer base class.

A slicer turns input contours into one frame-annotated toolpath. Its life
cycle has two states: constructed and sliced. ``slice()`` computes the
contours, the path pieces and the frames per layer; every query afterwards
is a read of that cached state.
"""

import copy
import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from compas.geometry import Point, Vector

from layerpath.core.config import SQRT_EPSILON
from layerpath.core.exceptions import (
    ArgumentError,
    ConfigurationError,
    LayerPathError,
    SlicingError,
)
from layerpath.enumerations import PathType, resolve_enum
from layerpath.geometry.frames import Frame, frames_by_distance_and_segment, origins
from layerpath.geometry.kernel import TOLERANCE, Curve, as_plane, join_curves
from layerpath.postprocessor.objects import ProgramObject

logger = logging.getLogger(__name__)

WORLD_XY = ((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))


@dataclass
class LayerDistances:
    """Per-frame distance to the previous layer, with its absolute components."""

    distances: List[List[float]]
    dx: List[List[float]]
    dy: List[List[float]]
    dz: List[List[float]]


class SlicerBase(ProgramObject):
    """
    Common state and queries of all slicers.

    Subclasses implement ``_validate``, ``_create_contours``, ``_create_path``
    and ``_create_frames``.
    """

    name = "SLICER OBJECT"
    header_with_layers = True

    def __init__(
        self,
        distance: float,
        keep: int = 5,
        curvature_threshold: float = SQRT_EPSILON,
    ):
        self.distance = float(distance)
        self.keep = int(keep)
        self.curvature_threshold = float(curvature_threshold)
        self._clear()

    def _clear(self) -> None:
        self._sliced = False
        self._contours: List[Curve] = []
        self._path: List[Curve] = []
        self._frames_by_layer: List[List[Frame]] = []
        self._added_variables: Dict[str, List[List[Any]]] = {}
        self._interpolated_path: Optional[Curve] = None
        self._linearized_path: Optional[Curve] = None

    # ─── Slicing ─────────────────────────────────────────────────────────

    @abstractmethod
    def _validate(self) -> None:
        """Raise if the inputs cannot be sliced."""

    @abstractmethod
    def _create_contours(self) -> None: ...

    @abstractmethod
    def _create_path(self) -> None: ...

    @abstractmethod
    def _create_frames(self) -> None: ...

    def slice(self, reslice: bool = False) -> "SlicerBase":
        """
        Compute contours, path and frames.

        Args:
            reslice: Discard a previous result and slice again.

        Raises:
            SlicingError: If the object was already sliced and reslice is False
        """
        if self._sliced and not reslice:
            raise SlicingError(f"{type(self).__name__} has already been sliced; pass reslice=True to redo it")

        self._clear()
        self._validate()
        self._create_contours()
        self._create_path()
        self._create_frames()
        self._sliced = True

        logger.info(
            "Sliced %s: %d layers, %d frames, %.3f mm",
            type(self).__name__, len(self._frames_by_layer), len(self.frames), self.get_length(),
        )
        return self

    def _frames(self, curve: Curve, include_start: bool, include_end: bool) -> List[Frame]:
        return frames_by_distance_and_segment(
            curve, self.distance, include_start, include_end, self.keep, self.curvature_threshold
        )

    def _require_sliced(self) -> None:
        if not self._sliced:
            raise SlicingError(f"{type(self).__name__} has not been sliced yet; call slice() first")

    @property
    def is_sliced(self) -> bool:
        return self._sliced

    @property
    def is_valid(self) -> bool:
        try:
            self._validate()
        except LayerPathError:
            return False
        return not self._sliced or bool(self.frames)

    # ─── Cached state ────────────────────────────────────────────────────

    @property
    def contours(self) -> List[Curve]:
        self._require_sliced()
        return list(self._contours)

    @property
    def path(self) -> List[Curve]:
        """Path pieces (contours and transitions) in print order."""
        self._require_sliced()
        return list(self._path)

    @property
    def frames_by_layer(self) -> List[List[Frame]]:
        self._require_sliced()
        return [list(layer) for layer in self._frames_by_layer]

    @property
    def frames(self) -> List[Frame]:
        self._require_sliced()
        return [frame for layer in self._frames_by_layer for frame in layer]

    @property
    def added_variables(self) -> Dict[str, List[List[Any]]]:
        return {key: [list(row) for row in rows] for key, rows in self._added_variables.items()}

    @property
    def frame_at_start(self) -> Frame:
        return self.frames[0]

    @property
    def frame_at_end(self) -> Frame:
        return self.frames[-1]

    @property
    def point_at_start(self) -> Point:
        return self.frame_at_start.origin

    @property
    def point_at_end(self) -> Point:
        return self.frame_at_end.origin

    # ─── Paths ───────────────────────────────────────────────────────────

    def get_path(self, path_type: Any = PathType.ORIGINAL) -> Curve:
        """The joined toolpath, or its spline / linear approximation through the frames."""
        self._require_sliced()
        path_type = resolve_enum(PathType, path_type, PathType.ORIGINAL)
        if path_type is PathType.SPLINE:
            return self.get_interpolated_path()
        if path_type is PathType.LINEAR:
            return self.get_linearized_path()
        return join_curves(self._path)[0]

    def _build_interpolated_path(self) -> Curve:
        return Curve.interpolate(origins(self.frames), degree=3)

    def get_interpolated_path(self) -> Curve:
        """Cubic chord-length interpolation through all frame origins."""
        self._require_sliced()
        if self._interpolated_path is None:
            self._interpolated_path = self._build_interpolated_path()
        return self._interpolated_path

    def get_linearized_path(self) -> Curve:
        """Polyline through all frame origins."""
        self._require_sliced()
        if self._linearized_path is None:
            self._linearized_path = Curve.from_polyline(origins(self.frames))
        return self._linearized_path

    def get_length(self) -> float:
        self._require_sliced()
        return float(sum(piece.get_length() for piece in self._path))

    def get_points(self) -> List[Point]:
        return [frame.origin for frame in self.frames]

    def get_points_by_layer(self) -> List[List[Point]]:
        return [[frame.origin for frame in layer] for layer in self.frames_by_layer]

    # ─── Distances & curvature ───────────────────────────────────────────

    def _split_by_layer(self, values: Sequence[Any]) -> List[List[Any]]:
        result = []
        start = 0
        for layer in self._frames_by_layer:
            result.append(list(values[start:start + len(layer)]))
            start += len(layer)
        return result

    def get_distances_along_contours(self) -> List[List[float]]:
        """Cumulative distance between frames, restarting at every layer."""
        self._require_sliced()
        result = []
        for layer in self._frames_by_layer:
            if not layer:
                result.append([])
                continue
            steps = np.linalg.norm(np.diff(origins(layer), axis=0), axis=1)
            result.append([0.0] + [float(d) for d in np.cumsum(steps)])
        return result

    def get_distances_along_path(self, path_type: Any = PathType.LINEAR) -> List[float]:
        """Distance of every frame from the start, measured along the chosen path."""
        self._require_sliced()
        path_type = resolve_enum(PathType, path_type, PathType.LINEAR)
        points = origins(self.frames)
        if len(points) == 0:
            return []

        if path_type is PathType.LINEAR:
            steps = np.linalg.norm(np.diff(points, axis=0), axis=1)
            return [0.0] + [float(d) for d in np.cumsum(steps)]

        path = self.get_path(path_type)
        distances = [path.length_at(t) for t in path.closest_parameters(points)]
        # Closed paths: the first and last frames sit on the seam
        if np.linalg.norm(points[0] - path.point_at_start) <= TOLERANCE:
            distances[0] = 0.0
        if np.linalg.norm(points[-1] - path.point_at_end) <= TOLERANCE:
            distances[-1] = path.get_length()
        return distances

    def get_distance_to_previous_layer(self, plane: Any = WORLD_XY) -> LayerDistances:
        """
        Distance from every frame to the layer below.

        Frames of the first layer are measured to ``plane``; later layers to
        the closest point on the previous contour.
        """
        self._require_sliced()
        origin, normal = as_plane(plane)
        result = LayerDistances([], [], [], [])
        for i, layer in enumerate(self._frames_by_layer):
            points = origins(layer)
            if len(points) == 0:
                closest = points
            elif i == 0:
                closest = points - np.outer((points - origin) @ normal, normal)
            else:
                previous = self._contours[min(i - 1, len(self._contours) - 1)]
                closest = previous.points_at(previous.closest_parameters(points))
            delta = np.abs(points - closest)
            result.distances.append([float(d) for d in np.linalg.norm(points - closest, axis=1)])
            result.dx.append([float(d) for d in delta[:, 0]])
            result.dy.append([float(d) for d in delta[:, 1]])
            result.dz.append([float(d) for d in delta[:, 2]])
        return result

    def get_curvatures(self) -> List[List[Vector]]:
        """Curvature vectors of the interpolated path at every frame."""
        self._require_sliced()
        path = self.get_interpolated_path()
        points = origins(self.frames)
        if len(points) == 0:
            return [[] for _ in self._frames_by_layer]
        vectors = path.curvatures_at(path.closest_parameters(points))
        return self._split_by_layer([Vector(*map(float, v)) for v in vectors])

    # ─── Added variables ─────────────────────────────────────────────────

    def _match_variable(self, values: Sequence[Any]) -> List[List[Any]]:
        """
        Shape ``values`` like ``frames_by_layer``.

        Accepts an exactly matching nested list, one flat list covering all
        frames, or shorter lists that are padded with their last entry.
        """
        values = list(values)
        if not values:
            raise ArgumentError("Added variable needs at least one value")
        if not isinstance(values[0], (list, tuple, np.ndarray)):
            values = [values]
        rows = [list(row) for row in values]
        if any(len(row) == 0 for row in rows):
            raise ArgumentError("Added variable rows must not be empty")

        counts = [len(layer) for layer in self._frames_by_layer]
        if [len(row) for row in rows] == counts:
            return rows
        if len(rows) == 1 and len(rows[0]) == sum(counts):
            return self._split_by_layer(rows[0])

        result = []
        for i, count in enumerate(counts):
            row = rows[i] if i < len(rows) else rows[-1]
            result.append([row[j] if j < len(row) else row[-1] for j in range(count)])
        return result

    def add_variable(self, prefix: str, values: Sequence[Any]) -> None:
        """Attach a per-frame variable written as `` {prefix}{value}`` after each coordinate."""
        self._require_sliced()
        if prefix in self._added_variables:
            raise ArgumentError(f"Variable '{prefix}' is already defined", details={"prefix": prefix})
        self._added_variables[prefix] = self._match_variable(values)
        logger.debug("Added variable '%s' to %s", prefix, type(self).__name__)

    def add_variable_by_displacement(self, prefix: str, factor: float = 1.0) -> None:
        """Distance travelled along the linearized path, times ``factor``."""
        distances = self.get_distances_along_path(PathType.LINEAR)
        self.add_variable(prefix, self._split_by_layer([d * factor for d in distances]))

    def add_variable_by_layer_distance(self, prefix: str, factor: float = 1.0, plane: Any = WORLD_XY) -> None:
        """Distance to the previous layer, times ``factor``."""
        self._require_sliced()
        if len(self._contours) < 2:
            raise ConfigurationError(
                "The layer distance method needs at least two layers",
                details={"layers": len(self._contours)},
            )
        distances = self.get_distance_to_previous_layer(plane).distances
        self.add_variable(prefix, [[d * factor for d in row] for row in distances])

    def remove_added_variable(self, prefix: str) -> bool:
        return self._added_variables.pop(prefix, None) is not None

    # ─── Copies & transformation ─────────────────────────────────────────

    def duplicate(self) -> "SlicerBase":
        duplicate = copy.copy(self)
        duplicate._contours = list(self._contours)
        duplicate._path = list(self._path)
        duplicate._frames_by_layer = [list(layer) for layer in self._frames_by_layer]
        duplicate._added_variables = self.added_variables
        return duplicate

    def _transform_inputs(self, matrix: Any) -> None:
        """Transform the subclass's input geometry in place (on a duplicate)."""

    def transformed(self, matrix: Any) -> "SlicerBase":
        """A copy with inputs, contours, path and frames transformed."""
        result = self.duplicate()
        result._transform_inputs(matrix)
        result._contours = [curve.transformed(matrix) for curve in self._contours]
        result._path = [curve.transformed(matrix) for curve in self._path]
        result._frames_by_layer = [[frame.transformed(matrix) for frame in layer] for layer in self._frames_by_layer]
        result._interpolated_path = None
        result._linearized_path = None
        return result

    # ─── Program ─────────────────────────────────────────────────────────

    def _add_header(self, generator) -> None:
        layers = len(self._contours) if self.header_with_layers else None
        generator.add_slicer_header(self.name, layers, self.get_length())

    def to_program(self, generator) -> None:
        """Header, one block of coordinates per layer, footer."""
        self._require_sliced()
        self._add_header(generator)
        for i, lines in enumerate(generator.get_coordinate_code_lines(self)):
            generator.extend([" ", f"; LAYER {i + 1}"])
            generator.extend(lines)
        generator.add_footer()

    def __str__(self) -> str:
        return self.name.title()
