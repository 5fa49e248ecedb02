"""
2.5D slicer for closed planar contours.

Every layer is a copy of the base contour lifted to its height, with the seam
at the same normalized position. Consecutive layers are trimmed around the
seam and blended with interpolated transitions, so the nozzle climbs from one
layer into the next without stopping.
"""

import logging
from typing import Any, List, Sequence

import numpy as np

from layerpath.core.config import SQRT_EPSILON
from layerpath.core.exceptions import ConfigurationError, InvalidGeometryError
from layerpath.enumerations import ProgramType
from layerpath.geometry.curves import weave_curves
from layerpath.geometry.kernel import Curve
from layerpath.geometry.seams import seam_at_length
from layerpath.geometry.transitions import interpolated_transitions, trim_curves_from_ends
from layerpath.postprocessor.formatting import format_number, format_value
from layerpath.slicing.base import SlicerBase

logger = logging.getLogger(__name__)


class ClosedPlanar2DSlicer(SlicerBase):
    """
    Slice a closed planar curve into stacked layers.

    Args:
        curve: Closed base contour.
        seam_location: Normalized seam position along the contour, in [0, 1].
        seam_length: Length cut around the seam to make room for a transition.
        distance: Target spacing between frames.
        heights: Z offset of every layer relative to the base contour.
        keep: Frames kept around curved regions during reduction.
        curvature_threshold: Curvature below which a region counts as straight.
        use_layer_loop: For Sinumerik programs with a constant layer height,
            emit the first layer once inside an R-parameter loop.
    """

    name = "2.5D CLOSED PLANAR OBJECT"

    def __init__(
        self,
        curve: Curve,
        seam_location: float = 0.0,
        seam_length: float = 100.0,
        distance: float = 20.0,
        heights: Sequence[float] = (0.0,),
        keep: int = 5,
        curvature_threshold: float = SQRT_EPSILON,
        use_layer_loop: bool = False,
    ):
        super().__init__(distance, keep, curvature_threshold)
        self.base_contour = curve
        self.seam_location = float(seam_location)
        self.seam_length = float(seam_length)
        self.heights = [float(h) for h in heights]
        self.use_layer_loop = use_layer_loop

    @classmethod
    def from_layer_height(
        cls,
        curve: Curve,
        seam_location: float,
        seam_length: float,
        distance: float,
        height: float,
        layers: int,
        **kwargs: Any,
    ) -> "ClosedPlanar2DSlicer":
        """Evenly stacked layers: heights ``0, h, 2h, ...``."""
        heights = [i * float(height) for i in range(int(layers))]
        return cls(curve, seam_location, seam_length, distance, heights, **kwargs)

    def _validate(self) -> None:
        if not self.base_contour.is_closed:
            raise InvalidGeometryError("The closed planar slicer needs a closed contour", requirement="closed")
        length = self.base_contour.get_length()
        if not 0.0 <= self.seam_location <= 1.0:
            raise ConfigurationError(
                "The seam location must be between 0 and 1", details={"seam_location": self.seam_location}
            )
        if self.seam_length <= 0 or self.seam_length > length:
            raise ConfigurationError(
                "The seam length must be positive and cannot exceed the contour length",
                details={"seam_length": self.seam_length, "contour_length": length},
            )
        if self.distance <= 0 or self.distance > length:
            raise ConfigurationError(
                "The distance between frames must be positive and cannot exceed the contour length",
                details={"distance": self.distance, "contour_length": length},
            )
        if not self.heights:
            raise ConfigurationError("At least one layer height is required")
        if len(self.heights) > 1 and self.seam_length >= length:
            # Several layers are trimmed around the seam
            raise ConfigurationError(
                "The seam length must be shorter than the contour when joining several layers",
                details={"seam_length": self.seam_length, "contour_length": length},
            )

    def _create_contours(self) -> None:
        contour = seam_at_length(self.base_contour, self.seam_location, normalized=True)
        contour = contour.with_domain(0.0, contour.get_length())
        self._contours = [contour.translated([0.0, 0.0, h]) for h in self.heights]

    def _create_path(self) -> None:
        if len(self._contours) == 1:
            self._path = list(self._contours)
            return
        trimmed, _ = trim_curves_from_ends(self._contours, self.seam_length)
        transitions = interpolated_transitions(self._contours, self.seam_length, 0.25 * self.distance)
        self._path = weave_curves(trimmed, transitions)

    def _create_frames(self) -> None:
        # Path pieces alternate contour, transition; the last layer has no transition
        self._frames_by_layer = []
        for i in range(len(self._contours)):
            layer = self._frames(self._path[2 * i], True, True)
            if 2 * i + 1 < len(self._path):
                layer.extend(self._frames(self._path[2 * i + 1], False, False))
            self._frames_by_layer.append(layer)

    def _transform_inputs(self, matrix: Any) -> None:
        self.base_contour = self.base_contour.transformed(matrix)

    # ─── Program ─────────────────────────────────────────────────────────

    @property
    def constant_layer_height(self) -> bool:
        if len(self.heights) < 2:
            return False
        steps = np.diff(self.heights)
        return bool(np.allclose(steps, steps[0]))

    def _layer_loop_lines(self) -> List[str]:
        height = self.heights[1] - self.heights[0]
        lines = [
            f"R10 = {format_number(height)}         ; Height of a single layer",
            " ",
            "R20 = 0             ; Number of the current layer",
            f"R21 = {len(self.heights):>2}            ; Total number of layers",
            " ",
            "; Start loop",
            "LINE1:",
        ]
        variables = self.added_variables
        for j, frame in enumerate(self._frames_by_layer[0]):
            x, y, z = frame.origin
            line = f"X{format_number(x)} Y{format_number(y)} Z={format_number(z)}+R10*R20"
            for key, values in variables.items():
                line += f" {key}{format_value(values[0][j])}"
            lines.append(line)
        lines.extend([
            " ",
            "R20 = R20 + 1            ; Increase layer number",
            "IF R20 < R21 GOTOB LINE1",
        ])
        return lines

    def to_program(self, generator) -> None:
        self._require_sliced()
        loop = (
            self.use_layer_loop
            and self.constant_layer_height
            and generator.printer_settings.program_type is ProgramType.SINUMERIK
        )
        if not loop:
            super().to_program(generator)
            return

        logger.debug("Writing %d layers as an R-parameter loop", len(self.heights))
        self._add_header(generator)
        generator.extend(self._layer_loop_lines())
        generator.add_footer()
