"""
Core module - exceptions, logging, diagnostics and job configuration.
"""

from layerpath.core.config import (
    ConfigManager,
    ContourConfig,
    JobConfig,
    PrinterConfig,
    SlicerConfig,
    VariableConfig,
    load_job_config,
)
from layerpath.core.diagnostics import Diagnostic, Diagnostics
from layerpath.core.exceptions import (
    ArgumentError,
    ConfigurationError,
    GeometryError,
    InvalidGeometryError,
    LayerPathError,
    NoIntersectionError,
    ProgramError,
    RangeError,
    SlicingError,
)
from layerpath.core.logging import configure_logging, get_logger, job_context

__all__ = [
    # Config
    "ConfigManager",
    "ContourConfig",
    "JobConfig",
    "PrinterConfig",
    "SlicerConfig",
    "VariableConfig",
    "load_job_config",
    # Diagnostics
    "Diagnostic",
    "Diagnostics",
    # Exceptions
    "ArgumentError",
    "ConfigurationError",
    "GeometryError",
    "InvalidGeometryError",
    "LayerPathError",
    "NoIntersectionError",
    "ProgramError",
    "RangeError",
    "SlicingError",
    # Logging
    "configure_logging",
    "get_logger",
    "job_context",
]
