"""
Factory for instantiating slicers by name.

Provides a registry of the available slicers and a convenience function to
create one from a string key and keyword arguments.
"""

import logging
from typing import Any, Dict, Type

from layerpath.slicing.base import SlicerBase
from layerpath.slicing.closed_planar import ClosedPlanar2DSlicer
from layerpath.slicing.contours_transitions import ContoursTransitionsSlicer
from layerpath.slicing.curve_slicer import CurveSlicer
from layerpath.slicing.open_planar import OpenPlanar2DSlicer

logger = logging.getLogger(__name__)

# Slicer name -> slicer class mapping
SLICER_REGISTRY: Dict[str, Type[SlicerBase]] = {
    "closed_planar_2d": ClosedPlanar2DSlicer,
    "open_planar_2d": OpenPlanar2DSlicer,
    "curve": CurveSlicer,
    "contours_transitions": ContoursTransitionsSlicer,
}


def get_slicer(name: str, **kwargs: Any) -> SlicerBase:
    """
    Create a slicer instance by name.

    Args:
        name: Key in ``SLICER_REGISTRY`` ('closed_planar_2d', 'open_planar_2d',
            'curve', 'contours_transitions'). Dashes and case are ignored.
        **kwargs: Keyword arguments forwarded to the slicer constructor.

    Raises:
        ValueError: If *name* is not found in the registry.

    Examples:
        >>> slicer = get_slicer("closed_planar_2d", curve=circle, distance=10.0, heights=[0, 5])
        >>> slicer = get_slicer("curve", curve=line, distance=2.5)
    """
    key = name.strip().lower().replace("-", "_")

    if key not in SLICER_REGISTRY:
        available = ", ".join(sorted(SLICER_REGISTRY.keys()))
        raise ValueError(f"Unknown slicer '{name}'. Available slicers: {available}")

    slicer_cls = SLICER_REGISTRY[key]
    logger.info("Creating slicer: name='%s', class=%s", key, slicer_cls.__name__)
    return slicer_cls(**kwargs)
