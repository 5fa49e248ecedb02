"""
Pipeline orchestrator for a complete print job.

Chains: contour -> slicer -> slice -> added variables -> program

Each step runs in isolation with timing and error capture. A failing step
stops the run; recoverable problems (unknown enumeration values) end up in
``PipelineResult.diagnostics`` and the run continues with the fallback.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from layerpath.core.config import ContourConfig, JobConfig, SlicerConfig
from layerpath.core.diagnostics import Diagnostics
from layerpath.core.logging import get_logger, job_context
from layerpath.enumerations import AddVariableMethod, resolve_enum
from layerpath.geometry.kernel import Curve
from layerpath.geometry.seams import seam_at_length
from layerpath.geometry.transitions import build_transitions
from layerpath.postprocessor import CodeLine, FeedRate, PrinterSettings, ProgramGenerator
from layerpath.slicing import SlicerBase, get_slicer

logger = get_logger(__name__)


@dataclass
class StepResult:
    """Result of a single pipeline step."""

    name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    duration_s: float = 0.0


@dataclass
class PipelineResult:
    """Result of a complete pipeline run."""

    success: bool
    job: str = ""
    slicer: Optional[SlicerBase] = None
    program: List[str] = field(default_factory=list)
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    step_completed: str = ""  # Last step that completed successfully

    @property
    def program_text(self) -> str:
        return "\n".join(self.program) + "\n" if self.program else ""

    def write_program(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.program_text, encoding="utf-8")
        return path

    def summary(self) -> Dict[str, Any]:
        """Numbers shown by the CLI."""
        if self.slicer is None or not self.slicer.is_sliced:
            return {"job": self.job, "success": self.success}
        return {
            "job": self.job,
            "success": self.success,
            "slicer": type(self.slicer).__name__,
            "layers": len(self.slicer.frames_by_layer),
            "frames": len(self.slicer.frames),
            "length_mm": round(self.slicer.get_length(), 3),
            "variables": list(self.slicer.added_variables),
            "program_lines": len(self.program),
            "warnings": len(self.diagnostics),
        }


# ─── Builders ────────────────────────────────────────────────────────────────

def build_contour(config: ContourConfig) -> Curve:
    """Base contour described by a job file."""
    if config.type == "circle":
        return Curve.from_circle(config.center, config.radius, config.normal)
    if config.type == "line":
        return Curve.from_line(config.points[0], config.points[-1])
    if config.type == "interpolated":
        return Curve.interpolate(config.points, degree=3, periodic=config.closed)
    return Curve.from_polyline(config.points, closed=config.closed)


def build_slicer(
    contour: Curve,
    config: SlicerConfig,
    diagnostics: Optional[Diagnostics] = None,
) -> SlicerBase:
    """Unsliced slicer for a base contour."""
    heights = config.resolved_heights()
    common = {"distance": config.distance, "keep": config.keep, "curvature_threshold": config.curvature_threshold}
    name = config.type.strip().lower().replace("-", "_")

    if name == "closed_planar_2d":
        return get_slicer(
            name,
            curve=contour,
            seam_location=config.seam_location,
            seam_length=config.seam_length,
            heights=heights,
            use_layer_loop=config.use_layer_loop,
            **common,
        )
    if name == "open_planar_2d":
        return get_slicer(name, curve=contour, heights=heights, **common)
    if name == "contours_transitions":
        if contour.is_closed:
            contour = seam_at_length(contour, config.seam_location, normalized=True)
        layers = [contour.translated([0.0, 0.0, h]) for h in heights]
        contours, transitions = build_transitions(
            layers, config.transition, config.seam_length, 0.25 * config.distance, diagnostics
        )
        return get_slicer(name, contours=contours, transitions=transitions, **common)
    return get_slicer(name, curve=contour, **common)


# ─── Pipeline ────────────────────────────────────────────────────────────────

class Pipeline:
    """
    Job orchestrator.

    Usage:
        pipeline = Pipeline(load_job_config("jobs/cylinder.yaml"))
        result = pipeline.run()
        if result.success:
            result.write_program("cylinder.mpf")
    """

    def __init__(self, config: JobConfig):
        self.config = config

    def run(self) -> PipelineResult:
        """Execute every step; stop at the first failing one."""
        config = self.config
        result = PipelineResult(success=False, job=config.name)

        with job_context(config.name):
            steps: List[tuple] = [
                ("contour", lambda: build_contour(config.contour)),
                ("slicer", lambda: build_slicer(data["contour"], config.slicer, result.diagnostics)),
                ("slice", lambda: data["slicer"].slice()),
                ("variables", lambda: self._add_variables(data["slice"], result.diagnostics)),
                ("program", lambda: self._create_program(data["slice"], result.diagnostics)),
            ]
            data: Dict[str, Any] = {}
            for name, fn in steps:
                step = self._run_step(name, fn)
                result.steps.append(step)
                result.timings[name] = step.duration_s
                if not step.success:
                    result.errors.append(f"Step '{name}' failed: {step.error}")
                    return result
                data[name] = step.data
                result.step_completed = name
                if name == "slice":
                    result.slicer = step.data

            result.program = data["program"]
            result.success = True
            logger.info("pipeline_complete", lines=len(result.program), warnings=len(result.diagnostics))
        return result

    def _run_step(self, name: str, fn: Callable) -> StepResult:
        """Execute a single pipeline step with timing and error handling."""
        t0 = time.perf_counter()
        try:
            data = fn()
            duration = time.perf_counter() - t0
            logger.info("pipeline_step_complete", step=name, duration_s=round(duration, 3))
            return StepResult(name=name, success=True, data=data, duration_s=duration)
        except Exception as e:
            duration = time.perf_counter() - t0
            logger.error("pipeline_step_failed", step=name, duration_s=round(duration, 3), error=str(e))
            return StepResult(name=name, success=False, error=str(e), duration_s=duration)

    def _add_variables(self, slicer: SlicerBase, diagnostics: Diagnostics) -> Dict[str, str]:
        added = {}
        for variable in self.config.variables:
            method = resolve_enum(
                AddVariableMethod, variable.method, AddVariableMethod.DISPLACEMENT, diagnostics, "variables"
            )
            if method is AddVariableMethod.LAYER_DISTANCE:
                slicer.add_variable_by_layer_distance(variable.prefix, variable.factor)
            else:
                slicer.add_variable_by_displacement(variable.prefix, variable.factor)
            added[variable.prefix] = method.value
        return added

    def _create_program(self, slicer: SlicerBase, diagnostics: Diagnostics) -> List[str]:
        printer = self.config.printer
        objects: List[Any] = [
            PrinterSettings.from_values(
                printer.program_type,
                printer.interpolation,
                printer.hot_end_temperature,
                printer.bed_temperature,
                diagnostics,
            )
        ]
        if self.config.feed_rate is not None:
            objects.append(FeedRate(self.config.feed_rate))
        objects.extend(CodeLine(line) for line in self.config.prefix_lines)
        objects.append(slicer)
        return ProgramGenerator().create_program(objects)


def run_job(config: JobConfig) -> PipelineResult:
    return Pipeline(config).run()
