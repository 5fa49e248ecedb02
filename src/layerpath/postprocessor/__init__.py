"""
LayerPath Post Processor Module

Turns slicer objects and code objects into machine program text:
- Sinumerik (BSPLINE / G642 with tangential C-axis control)
- Marlin G-code
"""

from .objects import (
    AbsoluteCoordinate,
    CodeLine,
    FeedRate,
    ProgramGroup,
    ProgramObject,
    SetTemperature,
    merge_program_objects,
)
from .settings import PrinterSettings
from .generator import ProgramGenerator
from .formatting import format_number, mm_per_min_to_mm_per_s, mm_per_s_to_mm_per_min

__all__ = [
    'AbsoluteCoordinate',
    'CodeLine',
    'FeedRate',
    'ProgramGroup',
    'ProgramObject',
    'SetTemperature',
    'merge_program_objects',
    'PrinterSettings',
    'ProgramGenerator',
    'format_number',
    'mm_per_min_to_mm_per_s',
    'mm_per_s_to_mm_per_min',
]
