"""Single-layer slicer that follows one curve."""

from typing import Any

from layerpath.core.config import SQRT_EPSILON
from layerpath.core.exceptions import ConfigurationError
from layerpath.geometry.kernel import Curve
from layerpath.slicing.base import SlicerBase


class CurveSlicer(SlicerBase):
    """
    Frames along a single (open or closed) curve.

    The result has exactly one layer; the path is the curve itself.
    """

    name = "CURVE SLICER OBJECT"
    header_with_layers = False

    def __init__(
        self,
        curve: Curve,
        distance: float = 20.0,
        keep: int = 5,
        curvature_threshold: float = SQRT_EPSILON,
    ):
        super().__init__(distance, keep, curvature_threshold)
        self.curve = curve

    def _validate(self) -> None:
        length = self.curve.get_length()
        if self.distance <= 0 or self.distance > length:
            raise ConfigurationError(
                "The distance between frames must be positive and cannot exceed the curve length",
                details={"distance": self.distance, "curve_length": length},
            )

    def _create_contours(self) -> None:
        self._contours = [self.curve]

    def _create_path(self) -> None:
        self._path = [self.curve]

    def _create_frames(self) -> None:
        self._frames_by_layer = [self._frames(self.curve, True, True)]

    def _transform_inputs(self, matrix: Any) -> None:
        self.curve = self.curve.transformed(matrix)
