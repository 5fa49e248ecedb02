"""
LayerPath - Toolpath synthesis for 3D concrete printing

Turns closed or open layer contours into one continuous, frame-annotated
toolpath (seams, transitions, frame sampling) and writes it as a Sinumerik or
Marlin machine program.
"""

__version__ = "0.1.0"
__author__ = "LayerPath Contributors"

from layerpath.geometry import Curve, Frame
from layerpath.pipeline import Pipeline, PipelineResult
from layerpath.postprocessor import PrinterSettings, ProgramGenerator
from layerpath.slicing import (
    ClosedPlanar2DSlicer,
    ContoursTransitionsSlicer,
    CurveSlicer,
    OpenPlanar2DSlicer,
    get_slicer,
)

__all__ = [
    "__version__",
    "Curve",
    "Frame",
    "Pipeline",
    "PipelineResult",
    "PrinterSettings",
    "ProgramGenerator",
    "ClosedPlanar2DSlicer",
    "ContoursTransitionsSlicer",
    "CurveSlicer",
    "OpenPlanar2DSlicer",
    "get_slicer",
]
