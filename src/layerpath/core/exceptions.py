"""
Custom exceptions for LayerPath.

All LayerPath exceptions inherit from LayerPathError for easy catching.
Geometry, seam and transition utilities raise these immediately; only the
orchestration layer decides whether a failure is demoted to a warning.
"""

from typing import Any


class LayerPathError(Exception):
    """Base exception for all LayerPath errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(LayerPathError):
    """Raised when configuration is invalid, missing or inconsistent with the geometry."""

    pass


class ArgumentError(LayerPathError):
    """Raised when a length, count or spacing argument is not positive."""

    pass


class GeometryError(LayerPathError):
    """Raised when a geometric operation fails."""

    pass


class InvalidGeometryError(GeometryError):
    """Raised when an operation requires a closed (or otherwise qualified) curve."""

    def __init__(
        self,
        message: str,
        requirement: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.requirement = requirement


class RangeError(GeometryError):
    """Raised when a parameter or length lies outside its valid domain."""

    def __init__(
        self,
        message: str,
        value: float | None = None,
        bounds: tuple[float, float] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.value = value
        self.bounds = bounds

    def __str__(self) -> str:
        text = super().__str__()
        if self.bounds is not None:
            return f"{text} (value={self.value}, bounds={self.bounds})"
        return text


class NoIntersectionError(GeometryError):
    """Raised when an expected geometric intersection is absent."""

    pass


class SlicingError(LayerPathError):
    """Raised when a slicer is queried or sliced out of order."""

    pass


class ProgramError(LayerPathError):
    """Raised when a program object cannot be emitted."""

    def __init__(
        self,
        message: str,
        object_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.object_type = object_type
