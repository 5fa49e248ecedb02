"""
Slicing module - contours to a single framed toolpath.

- ClosedPlanar2DSlicer: stacked closed contours joined by interpolated transitions
- OpenPlanar2DSlicer: stacked open contours printed back and forth
- CurveSlicer: one layer along a single curve
- ContoursTransitionsSlicer: user supplied contours and transitions
"""

from layerpath.slicing.base import LayerDistances, SlicerBase
from layerpath.slicing.closed_planar import ClosedPlanar2DSlicer
from layerpath.slicing.open_planar import OpenPlanar2DSlicer
from layerpath.slicing.curve_slicer import CurveSlicer
from layerpath.slicing.contours_transitions import ContoursTransitionsSlicer
from layerpath.slicing.slicer_factory import SLICER_REGISTRY, get_slicer

__all__ = [
    "LayerDistances",
    "SlicerBase",
    # Slicers
    "ClosedPlanar2DSlicer",
    "OpenPlanar2DSlicer",
    "CurveSlicer",
    "ContoursTransitionsSlicer",
    # Factory
    "SLICER_REGISTRY",
    "get_slicer",
]
