"""
Slicer over user supplied contours and transitions.

Useful when the layers and connectors were built elsewhere (for example with
the functions in :mod:`layerpath.geometry.transitions`) and only frames and a
program are still needed.
"""

import logging
from typing import Any, Sequence

from layerpath.core.config import SQRT_EPSILON
from layerpath.core.exceptions import ArgumentError, ConfigurationError
from layerpath.geometry.curves import weave_curves
from layerpath.geometry.kernel import Curve
from layerpath.slicing.base import SlicerBase

logger = logging.getLogger(__name__)


class ContoursTransitionsSlicer(SlicerBase):
    """
    Frames along ``contours[0], transitions[0], contours[1], ...``.

    Layer i holds the frames of contour i (both ends) followed by the frames
    of transition i (without ends).
    """

    name = "CUSTOM SLICER OBJECT"
    header_with_layers = False

    def __init__(
        self,
        contours: Sequence[Curve],
        transitions: Sequence[Curve],
        distance: float = 20.0,
        keep: int = 5,
        curvature_threshold: float = SQRT_EPSILON,
    ):
        super().__init__(distance, keep, curvature_threshold)
        self.input_contours = list(contours)
        self.input_transitions = list(transitions)

    def _validate(self) -> None:
        if not self.input_contours:
            raise ArgumentError("At least one contour is required")
        if len(self.input_transitions) > len(self.input_contours):
            raise ArgumentError(
                "There cannot be more transitions than contours",
                details={"contours": len(self.input_contours), "transitions": len(self.input_transitions)},
            )
        if self.distance <= 0:
            raise ConfigurationError("The distance between frames must be positive", details={"distance": self.distance})

    def _create_contours(self) -> None:
        self._contours = list(self.input_contours)

    def _create_path(self) -> None:
        self._path = weave_curves(self._contours, self.input_transitions)

    def _create_frames(self) -> None:
        self._frames_by_layer = []
        for i, contour in enumerate(self._contours):
            layer = self._frames(contour, True, True)
            if i < len(self.input_transitions):
                layer.extend(self._frames(self.input_transitions[i], False, False))
            self._frames_by_layer.append(layer)
        logger.debug("Framed %d custom contours", len(self._contours))

    def _transform_inputs(self, matrix: Any) -> None:
        self.input_contours = [curve.transformed(matrix) for curve in self.input_contours]
        self.input_transitions = [curve.transformed(matrix) for curve in self.input_transitions]
