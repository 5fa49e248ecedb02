"""Printer settings block written at the top of a program."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional

from layerpath.core.diagnostics import Diagnostics
from layerpath.core.exceptions import ProgramError
from layerpath.enumerations import InterpolationType, ProgramType, resolve_enum
from layerpath.postprocessor.formatting import BANNER, format_number
from layerpath.postprocessor.objects import ProgramObject

if TYPE_CHECKING:
    from layerpath.postprocessor.generator import ProgramGenerator

_FLAVOR_LINES = {
    ProgramType.SINUMERIK: [
        "; G-Code flavor: Sinumerik",
        "G500; Zero frame",
        "SPCON; Position-controlled spindle ON",
        "G90; Absolute coordinates ",
        "G1 C90 F10000; Moves the C-axis tangent to y direction",
    ],
    ProgramType.MARLIN: [
        "; G-Code flavor: Marlin",
        "M106; Turn on fans",
        "M82; Absolute extrusion mode",
        "G28; Move home",
        "G92 E2; Set current extruder position as 0",
    ],
}

_SPLINE_LINES = [
    "BSPLINE; Bspline interpolation",
    "G642; Continuous-path mode with smoothing within the defined tolerances",
    "TANG(C, X, Y, 1)",
    "TANGON(C, 0)",
]


@dataclass
class PrinterSettings(ProgramObject):
    """
    Program flavour, interpolation and temperatures.

    Writing the settings into a program also makes them the generator's
    active settings for everything that follows.
    """

    program_type: ProgramType = ProgramType.SINUMERIK
    interpolation: InterpolationType = InterpolationType.SPLINE
    hot_end_temperature: float = -1.0
    bed_temperature: float = -1.0

    @classmethod
    def from_values(
        cls,
        program_type: Any = ProgramType.SINUMERIK,
        interpolation: Any = InterpolationType.SPLINE,
        hot_end_temperature: Optional[float] = -1.0,
        bed_temperature: Optional[float] = -1.0,
        diagnostics: Optional[Diagnostics] = None,
    ) -> "PrinterSettings":
        """Build settings from raw (possibly invalid) enumeration values."""
        return cls(
            program_type=resolve_enum(ProgramType, program_type, ProgramType.SINUMERIK, diagnostics, "printer_settings"),
            interpolation=resolve_enum(
                InterpolationType, interpolation, InterpolationType.SPLINE, diagnostics, "printer_settings"
            ),
            hot_end_temperature=-1.0 if hot_end_temperature is None else float(hot_end_temperature),
            bed_temperature=-1.0 if bed_temperature is None else float(bed_temperature),
        )

    @property
    def hot_end_set(self) -> bool:
        return self.hot_end_temperature >= 0

    @property
    def bed_set(self) -> bool:
        return self.bed_temperature >= 0

    @property
    def is_tangential_control_enabled(self) -> bool:
        """Tangential C-axis control is switched on by the spline block."""
        return self.program_type is ProgramType.SINUMERIK and self.interpolation is InterpolationType.SPLINE

    def to_lines(self) -> List[str]:
        if self.program_type is ProgramType.MARLIN and self.interpolation is InterpolationType.SPLINE:
            raise ProgramError(
                "The Marlin G-Code flavor does not implement spline (G642) interpolation",
                object_type="PrinterSettings",
            )

        lines = [BANNER, "; PRINTER SETTINGS", BANNER]
        lines.extend(_FLAVOR_LINES[self.program_type])
        if self.interpolation is InterpolationType.SPLINE:
            lines.extend(_SPLINE_LINES)

        if self.hot_end_set or self.bed_set:
            lines.append("G91; Relative coordinates")
            lines.append("G1 Z10; Move off printbed")
            if self.hot_end_set:
                lines.append(f"M104 S{format_number(self.hot_end_temperature, 1)}; Set hotend temperature")
            if self.bed_set:
                lines.append(f"M140 S{format_number(self.bed_temperature, 1)}; Set bed temperature")
            lines.append("M105; Report temperature")
            if self.hot_end_set:
                lines.append(f"M109 S{format_number(self.hot_end_temperature, 1)}; Wait for hotend temperature")
            if self.bed_set:
                lines.append(f"M190 S{format_number(self.bed_temperature, 1)}; Wait for bed temperature")
            lines.append("G1 Z-10; Move back to original position")
            lines.append("G90; Absolute coordinates")

        lines.append(" ")
        return lines

    def to_program(self, generator: "ProgramGenerator") -> None:
        lines = self.to_lines()
        generator.printer_settings = self.duplicate()
        generator.extend(lines)

    def __str__(self) -> str:
        return "Printer settings"
