"""
Program generator.

Collects the lines of a machine program. ``create_program`` writes the fixed
header, the active printer settings, every program object in order and the
flavour-specific footer.
"""

from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

import layerpath
from layerpath.core.logging import get_logger
from layerpath.enumerations import InterpolationType, ProgramType
from layerpath.postprocessor.formatting import BANNER, format_number, format_value
from layerpath.postprocessor.objects import ProgramObject
from layerpath.postprocessor.settings import PrinterSettings

if TYPE_CHECKING:
    from layerpath.slicing.base import SlicerBase

logger = get_logger(__name__)


class ProgramGenerator:
    """
    Accumulates program lines.

    Example:
        >>> generator = ProgramGenerator()
        >>> lines = generator.create_program([PrinterSettings(), slicer])
    """

    def __init__(self) -> None:
        self.lines: List[str] = []
        self.printer_settings = PrinterSettings()

    def add(self, line: str) -> None:
        self.lines.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        self.lines.extend(lines)

    # ─── Program ─────────────────────────────────────────────────────────

    def create_program(self, objects: Sequence[ProgramObject]) -> List[str]:
        """
        Build the complete program for ``objects``.

        Nothing carries over from a previous call: the line buffer is cleared
        and the settings start from their defaults.
        """
        self.lines = []
        self.printer_settings = PrinterSettings()

        self.extend([
            BANNER,
            f"; This program was generated by LayerPath v{layerpath.__version__} (GPL v3).",
            "; For more information see the LayerPath documentation.",
            BANNER,
            " ",
        ])

        if not objects or not isinstance(objects[0], PrinterSettings):
            self.extend([
                BANNER,
                "; SETTINGS",
                BANNER,
                " ",
                "; NO PROGRAM SETTINGS DEFINED",
                "; Defaults settings are used",
                " ",
            ])
            PrinterSettings().to_program(self)

        for obj in objects:
            obj.to_program(self)

        self._add_program_footer()
        logger.info(
            "program_created",
            objects=len(objects),
            lines=len(self.lines),
            flavor=self.printer_settings.program_type.value,
        )
        return list(self.lines)

    def _add_program_footer(self) -> None:
        settings = self.printer_settings
        if settings.program_type is ProgramType.SINUMERIK:
            self.extend([" ", "M30", " ", " ", " "])
            return

        self.extend([
            " ",
            "G91; Relative coordinates ",
            "G1 Z10 E-2; Move off object and retract extrusion material ",
            "G90; Absolute coordinates ",
            "G1 X0 Y0; Move home ",
        ])
        if settings.hot_end_set:
            self.add("M104 S0; Set hotend temperature to 0")
            self.add("M105; Report temperature")
        if settings.bed_set:
            self.add("M140 S0; Set bed temperature to 0")
            self.add("M105; Report temperature")
        self.extend(["M106 S0; Turn off fan", " "])

    # ─── Helpers for program objects ─────────────────────────────────────

    def add_slicer_header(self, name: str, layers: Optional[int] = None, length: float = 0.0) -> None:
        """Banner naming a slicer object, its layer count and path length in meters."""
        meters = format_number(length / 1000.0)
        if layers is None:
            title = f"; {name} - {meters} METER"
        else:
            title = f"; {name} - {layers} LAYERS - {meters} METER"
        self.extend([" ", BANNER, title, BANNER, " "])

    def add_footer(self) -> None:
        self.extend([" ", BANNER, " "])

    def get_coordinate_code_lines(self, slicer: "SlicerBase") -> List[List[str]]:
        """
        Coordinate lines per layer for a sliced object.

        Each line is ``X.. Y.. Z..`` (prefixed with ``G1`` for linear
        interpolation) followed by the slicer's added variables.
        """
        prefix = "G1 " if self.printer_settings.interpolation is InterpolationType.LINEAR else ""
        variables = slicer.added_variables

        result = []
        for i, layer in enumerate(slicer.frames_by_layer):
            lines = []
            for j, frame in enumerate(layer):
                x, y, z = frame.origin
                line = f"{prefix}X{format_number(x)} Y{format_number(y)} Z{format_number(z)}"
                for key, values in variables.items():
                    line += f" {key}{format_value(values[i][j])}"
                lines.append(line)
            result.append(lines)
        return result

    def __str__(self) -> str:
        return "Program Generator"
