"""
Policy enumerations.

Values may arrive from job files as names ("bezier") or as integer indices in
declaration order (1). ``resolve_enum`` turns such input into a member and
reports anything it cannot resolve as a recoverable warning.
"""

import numbers
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from layerpath.core.diagnostics import Diagnostics
from layerpath.core.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


class OpenTransition(Enum):
    """Connector between open contours."""

    LINEAR = "linear"
    BEZIER = "bezier"


class ClosedTransition(Enum):
    """Connector between closed contours."""

    LINEAR = "linear"
    BEZIER = "bezier"
    INTERPOLATED = "interpolated"


class ProgramType(Enum):
    """Program flavour."""

    SINUMERIK = "sinumerik"  # Siemens CNC
    MARLIN = "marlin"  # G-code firmware


class InterpolationType(Enum):
    """Motion interpolation between coordinates."""

    SPLINE = "spline"  # BSPLINE blocks
    LINEAR = "linear"  # G1 moves


class PathType(Enum):
    """Which path distances along a slicer are measured on."""

    ORIGINAL = "original"
    SPLINE = "spline"
    LINEAR = "linear"


class AddVariableMethod(Enum):
    """How an added per-coordinate variable is computed."""

    DISPLACEMENT = "displacement"
    LAYER_DISTANCE = "layer_distance"


def parse_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Return the member for a member, name, value or index; None when unknown."""
    if isinstance(value, enum_cls):
        return value
    members = list(enum_cls)
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real) and not isinstance(value, numbers.Integral):
        # Integral floats (1.0) count as indices
        if not float(value).is_integer():
            return None
        value = int(value)
    if isinstance(value, numbers.Integral):
        index = int(value)
        return members[index] if 0 <= index < len(members) else None
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        for member in members:
            if key in (member.value, member.name.lower()):
                return member
    return None


def resolve_enum(
    enum_cls: Type[E],
    value: Any,
    default: E,
    diagnostics: Optional[Diagnostics] = None,
    source: str = "",
) -> E:
    """
    Resolve ``value`` to a member of ``enum_cls``, falling back to ``default``.

    An unresolvable value is recorded in ``diagnostics`` (or logged when no
    collector is given) and never raises.
    """
    member = parse_enum(enum_cls, value)
    if member is not None:
        return member

    allowed = ", ".join(f"'{m.value}' ({i})" for i, m in enumerate(enum_cls))
    message = (
        f"Invalid {enum_cls.__name__} value {value!r}. It can only be set to {allowed}. "
        f"Falling back to '{default.value}'."
    )
    if diagnostics is not None:
        diagnostics.warn(source or enum_cls.__name__, message, value=value)
    else:
        logger.warning("invalid_enum_value", enum=enum_cls.__name__, value=value, fallback=default.value)
    return default
