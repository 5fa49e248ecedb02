"""
Program objects.

Everything that can be placed in a program implements ``ProgramObject``:
it writes its own lines into a ``ProgramGenerator`` and, where possible,
renders itself as one string so that several objects can share a line.
"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from layerpath.core.exceptions import ProgramError
from layerpath.enumerations import InterpolationType
from layerpath.geometry.kernel import as_point
from layerpath.postprocessor.formatting import format_number

if TYPE_CHECKING:
    from layerpath.postprocessor.generator import ProgramGenerator


class ProgramObject(ABC):
    """Base class for anything that emits program lines."""

    @abstractmethod
    def to_program(self, generator: "ProgramGenerator") -> None:
        """Append this object's lines to the generator."""

    def to_single_string(self) -> str:
        """
        Render as a single string.

        Raises:
            ProgramError: If the object has no single-string form
        """
        raise ProgramError(
            f"{type(self).__name__} cannot be represented by a single string",
            object_type=type(self).__name__,
        )

    def duplicate(self) -> "ProgramObject":
        return copy.deepcopy(self)

    @property
    def is_valid(self) -> bool:
        return True


@dataclass
class CodeLine(ProgramObject):
    """A literal line of code."""

    code: str = ""

    def to_program(self, generator: "ProgramGenerator") -> None:
        generator.add(self.code)

    def to_single_string(self) -> str:
        return self.code

    @property
    def is_valid(self) -> bool:
        return self.code is not None

    def __str__(self) -> str:
        return "Custom Code Line" if self.code else "Empty Code Line"


class AbsoluteCoordinate(ProgramObject):
    """Move to an absolute position (a point or the origin of a frame)."""

    def __init__(self, location: Any):
        origin = getattr(location, "origin", location)
        self.x, self.y, self.z = (float(v) for v in as_point(origin))

    def to_single_string(self) -> str:
        return f"X{format_number(self.x)} Y{format_number(self.y)} Z{format_number(self.z)}"

    def to_program(self, generator: "ProgramGenerator") -> None:
        prefix = "G1 " if generator.printer_settings.interpolation is InterpolationType.LINEAR else ""
        generator.add(prefix + self.to_single_string())

    def __str__(self) -> str:
        return self.to_single_string()


@dataclass
class SetTemperature(ProgramObject):
    """
    Set (and wait for) hot-end and bed temperatures.

    A negative or missing temperature leaves that heater untouched.
    """

    hot_end: Optional[float] = None
    bed: Optional[float] = None

    @property
    def hot_end_set(self) -> bool:
        return self.hot_end is not None and self.hot_end >= 0

    @property
    def bed_set(self) -> bool:
        return self.bed is not None and self.bed >= 0

    def to_program(self, generator: "ProgramGenerator") -> None:
        if not (self.hot_end_set or self.bed_set):
            return
        lines = []
        if self.hot_end_set:
            lines.append(f"M104 S{format_number(self.hot_end, 1)}; Set hotend temperature")
            generator.printer_settings.hot_end_temperature = self.hot_end
        if self.bed_set:
            lines.append(f"M140 S{format_number(self.bed, 1)}; Set bed temperature")
            generator.printer_settings.bed_temperature = self.bed
        lines.append("M105; Report temperature")
        if self.hot_end_set:
            lines.append(f"M109 S{format_number(self.hot_end, 1)}; Wait for hotend temperature")
        if self.bed_set:
            lines.append(f"M190 S{format_number(self.bed, 1)}; Wait for bed temperature")
        generator.extend(lines)


@dataclass
class FeedRate(ProgramObject):
    """Feed rate in mm/min."""

    value: float

    def to_program(self, generator: "ProgramGenerator") -> None:
        generator.add(f"F{format_number(self.value)} ; Feedrate in mm/min")

    def to_single_string(self) -> str:
        return f"F{format_number(self.value)}"

    def __str__(self) -> str:
        return f"Set Feedrate (F{format_number(self.value)} mm/min)"


@dataclass
class ProgramGroup(ProgramObject):
    """Ordered group of program objects emitted one after another."""

    objects: List[ProgramObject] = field(default_factory=list)

    def to_program(self, generator: "ProgramGenerator") -> None:
        for obj in self.objects:
            obj.to_program(generator)

    def to_single_string(self) -> str:
        return " ".join(obj.to_single_string() for obj in self.objects)

    def ungroup(self) -> List[ProgramObject]:
        return [obj.duplicate() for obj in self.objects]

    def __len__(self) -> int:
        return len(self.objects)


def merge_program_objects(objects: Sequence[ProgramObject]) -> CodeLine:
    """Combine objects into one code line, e.g. ``X0 Y0 Z0 F1200``."""
    return CodeLine(" ".join(obj.to_single_string() for obj in objects))
