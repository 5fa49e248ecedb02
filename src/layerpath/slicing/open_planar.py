"""
2.5D slicer for open planar contours.

Layers are printed back and forth: every other layer runs in the opposite
direction and a straight move connects the end of one layer to the start of
the next.
"""

import logging
from typing import Any, List, Sequence

from layerpath.core.config import SQRT_EPSILON
from layerpath.core.exceptions import ConfigurationError, InvalidGeometryError
from layerpath.enumerations import InterpolationType, ProgramType
from layerpath.geometry.curves import alternate_curves, weave_curves
from layerpath.geometry.frames import origins
from layerpath.geometry.kernel import Curve, join_curves
from layerpath.geometry.transitions import linear_transitions
from layerpath.slicing.base import SlicerBase

logger = logging.getLogger(__name__)


class OpenPlanar2DSlicer(SlicerBase):
    """
    Slice an open planar curve into stacked, alternating layers.

    Args:
        curve: Open base contour.
        distance: Target spacing between frames.
        heights: Z offset of every layer relative to the base contour.
    """

    name = "2.5D OPEN PLANAR OBJECT"

    def __init__(
        self,
        curve: Curve,
        distance: float = 20.0,
        heights: Sequence[float] = (0.0,),
        keep: int = 5,
        curvature_threshold: float = SQRT_EPSILON,
    ):
        super().__init__(distance, keep, curvature_threshold)
        self.base_contour = curve
        self.heights = [float(h) for h in heights]

    @classmethod
    def from_layer_height(
        cls,
        curve: Curve,
        distance: float,
        height: float,
        layers: int,
        **kwargs: Any,
    ) -> "OpenPlanar2DSlicer":
        heights = [i * float(height) for i in range(int(layers))]
        return cls(curve, distance, heights, **kwargs)

    def _validate(self) -> None:
        if self.base_contour.is_closed:
            raise InvalidGeometryError("The open planar slicer needs an open contour", requirement="open")
        length = self.base_contour.get_length()
        if self.distance <= 0 or self.distance > length:
            raise ConfigurationError(
                "The distance between frames must be positive and cannot exceed the contour length",
                details={"distance": self.distance, "contour_length": length},
            )
        if not self.heights:
            raise ConfigurationError("At least one layer height is required")

    def _create_contours(self) -> None:
        contour = self.base_contour.with_domain(0.0, self.base_contour.get_length())
        self._contours = alternate_curves([contour.translated([0.0, 0.0, h]) for h in self.heights])

    def _create_path(self) -> None:
        self._path = weave_curves(self._contours, linear_transitions(self._contours))

    def _create_frames(self) -> None:
        self._frames_by_layer = [self._frames(contour, True, True) for contour in self._contours]

    def _build_interpolated_path(self) -> Curve:
        # Interpolate each layer on its own so the spline does not overshoot the layer jumps
        layers = [Curve.interpolate(origins(layer), degree=3) for layer in self._frames_by_layer if len(layer) > 1]
        pieces = weave_curves(layers, linear_transitions(layers))
        return join_curves(pieces)[0]

    def _transform_inputs(self, matrix: Any) -> None:
        self.base_contour = self.base_contour.transformed(matrix)

    # ─── Program ─────────────────────────────────────────────────────────

    def _sinumerik_layer(self, i: int, lines: List[str], generator) -> List[str]:
        settings = generator.printer_settings
        tangential = settings.is_tangential_control_enabled
        spline = settings.interpolation is InterpolationType.SPLINE

        result = [" ", f"; LAYER {i + 1}"]
        if i != 0 and tangential:
            if spline:
                result.append("G1")
            result.append("TANGOF(C)")
        result.extend(lines[:1])
        if tangential:
            result.append("TANGON(C, 0)" if i % 2 == 0 else "TANGON(C, 180)")
            if spline:
                result.extend(["BSPLINE", "G642"])
        result.extend(lines[1:])
        return result

    def to_program(self, generator) -> None:
        """
        Per layer coordinates. On Sinumerik with tangential control, the
        C axis is switched off between layers and on again with a 180 degree
        offset for the reversed layers.
        """
        self._require_sliced()
        self._add_header(generator)
        sinumerik = generator.printer_settings.program_type is ProgramType.SINUMERIK
        for i, lines in enumerate(generator.get_coordinate_code_lines(self)):
            if sinumerik:
                generator.extend(self._sinumerik_layer(i, lines, generator))
            else:
                generator.extend([" ", f"; LAYER {i + 1}, {len(lines)} Points"])
                generator.extend(lines)
        generator.add_footer()
