"""
Configuration management for LayerPath.

A print job is described by a YAML file holding the base contour, the slicer
parameters and the printer (program flavour) settings. Policy enumerations
are deliberately kept as raw values here; they are resolved later so that an
unknown value becomes a warning instead of a validation failure.
"""

import math
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from layerpath.core.exceptions import ConfigurationError

SQRT_EPSILON = math.sqrt(sys.float_info.epsilon)

EnumValue = Union[str, int, float]


class ContourConfig(BaseModel):
    """Base contour definition."""

    type: str = "circle"
    center: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    radius: float = 100.0
    normal: List[float] = Field(default_factory=lambda: [0.0, 0.0, 1.0])
    points: List[List[float]] = Field(default_factory=list)
    closed: bool = False

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        value = value.lower()
        if value not in ("circle", "polyline", "interpolated", "line"):
            raise ValueError(f"unknown contour type '{value}'")
        return value

    @model_validator(mode="after")
    def _enough_points(self) -> "ContourConfig":
        if self.type == "circle" and self.radius <= 0:
            raise ValueError("circle radius must be positive")
        if self.type != "circle" and len(self.points) < 2:
            raise ValueError(f"a {self.type} contour needs at least two points")
        return self


class SlicerConfig(BaseModel):
    """Slicer parameters."""

    type: str = "closed_planar_2d"
    seam_location: float = 0.0
    seam_length: float = 100.0
    distance: float = 20.0
    heights: Optional[List[float]] = None
    layer_height: Optional[float] = None
    layers: Optional[int] = None
    keep: int = 5
    curvature_threshold: float = SQRT_EPSILON
    transition: EnumValue = "linear"
    use_layer_loop: bool = False

    @model_validator(mode="after")
    def _heights_defined(self) -> "SlicerConfig":
        if self.heights is None and (self.layer_height is None or self.layers is None):
            raise ValueError("define either 'heights' or both 'layer_height' and 'layers'")
        if self.keep < 0:
            raise ValueError("keep must not be negative")
        return self

    def resolved_heights(self) -> List[float]:
        """Absolute layer offsets, derived from layer_height/layers when needed."""
        if self.heights is not None:
            return list(self.heights)
        return [i * self.layer_height for i in range(self.layers)]


class PrinterConfig(BaseModel):
    """Program flavour and temperatures."""

    program_type: EnumValue = "sinumerik"
    interpolation: EnumValue = "spline"
    hot_end_temperature: float = -1.0
    bed_temperature: float = -1.0


class VariableConfig(BaseModel):
    """Extra per-coordinate variable (e.g. extrusion ``E``)."""

    prefix: str = "E"
    method: EnumValue = "displacement"
    factor: float = 1.0


class JobConfig(BaseModel):
    """Complete print job."""

    name: str = "layerpath_job"
    contour: ContourConfig
    slicer: SlicerConfig
    printer: PrinterConfig = Field(default_factory=PrinterConfig)
    feed_rate: Optional[float] = None
    prefix_lines: List[str] = Field(default_factory=list)
    variables: List[VariableConfig] = Field(default_factory=list)
    output: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobConfig":
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError("Invalid job configuration", details={"error": str(e)})


def load_job_config(path: Union[str, Path]) -> JobConfig:
    """
    Load and validate a job configuration file.

    Args:
        path: Path to a YAML job file.

    Returns:
        JobConfig instance

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Job configuration not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse job config: {path}",
            details={"error": str(e)},
        )

    if not isinstance(data, dict):
        raise ConfigurationError(f"Job config must be a mapping: {path}")

    # A file may either be the job itself or wrap it under a 'job' key
    if "job" in data:
        data = data["job"]
    data.setdefault("name", path.stem)
    return JobConfig.from_dict(data)


@dataclass
class ConfigManager:
    """
    Directory of job configurations.

    Example:
        >>> manager = ConfigManager(config_dir=Path("jobs"))
        >>> job = manager.get_job("cylinder")
    """

    config_dir: Path
    _jobs: dict[str, JobConfig] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load every ``*.yaml`` job in the directory."""
        for config_file in sorted(self.config_dir.glob("*.yaml")):
            self._jobs[config_file.stem] = load_job_config(config_file)
        self._loaded = True

    def get_job(self, name: str) -> JobConfig:
        """
        Get a job configuration by name.

        Raises:
            ConfigurationError: If the job is not found
        """
        if not self._loaded:
            self.load()

        if name not in self._jobs:
            raise ConfigurationError(
                f"Job configuration not found: {name}",
                details={"available": list(self._jobs.keys())},
            )
        return self._jobs[name]

    def list_jobs(self) -> list[str]:
        """List available job configurations."""
        if not self._loaded:
            self.load()
        return list(self._jobs.keys())
