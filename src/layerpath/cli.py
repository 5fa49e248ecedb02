"""
Command-line interface for LayerPath.

Provides commands to validate job files, inspect a sliced job and write its
machine program.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from layerpath import __version__
from layerpath.core.config import ConfigManager, load_job_config
from layerpath.core.exceptions import LayerPathError
from layerpath.core.logging import configure_logging
from layerpath.enumerations import ProgramType, parse_enum
from layerpath.pipeline import Pipeline, PipelineResult

console = Console()

PROGRAM_SUFFIX = {ProgramType.SINUMERIK: ".mpf", ProgramType.MARLIN: ".gcode"}


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Minimum log level",
)
@click.option("--json-logs", is_flag=True, help="Write logs as JSON lines")
@click.pass_context
def main(ctx: click.Context, log_level: str, json_logs: bool) -> None:
    """LayerPath - toolpaths and machine programs for 3D concrete printing."""
    ctx.ensure_object(dict)
    configure_logging(level=log_level, json_output=json_logs)


def _print_warnings(result: PipelineResult) -> None:
    for diagnostic in result.diagnostics:
        console.print(f"[yellow]⚠[/yellow] {escape(str(diagnostic))}")


def _summary_table(result: PipelineResult) -> Table:
    table = Table(title=f"Job: {result.job}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    for key, value in result.summary().items():
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        table.add_row(key, str(value))
    return table


def _steps_table(result: PipelineResult) -> Table:
    table = Table(title="Steps")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    table.add_column("Time [s]", justify="right")
    for step in result.steps:
        status = "[green]✓[/green]" if step.success else f"[red]✗[/red] {escape(step.error or '')}"
        table.add_row(step.name, status, f"{step.duration_s:.3f}")
    return table


def _run(job: Path) -> PipelineResult:
    try:
        config = load_job_config(job)
    except LayerPathError as e:
        console.print(f"[red]✗[/red] Invalid job file: {escape(str(e))}")
        raise SystemExit(1)

    result = Pipeline(config).run()
    _print_warnings(result)
    if not result.success:
        console.print(_steps_table(result))
        console.print(f"[red]✗[/red] Job '{result.job}' failed: {escape('; '.join(result.errors))}")
        raise SystemExit(1)
    return result


# =============================================================================
# Job Commands
# =============================================================================


@main.command("slice")
@click.argument("job", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Program file to write")
def slice_job(job: Path, output: Optional[Path]) -> None:
    """Slice a job and write its program."""
    result = _run(job)

    if output is None:
        config = load_job_config(job)
        if config.output:
            output = Path(config.output)
        else:
            flavor = parse_enum(ProgramType, config.printer.program_type) or ProgramType.SINUMERIK
            output = job.with_suffix(PROGRAM_SUFFIX[flavor])

    try:
        path = result.write_program(output)
    except OSError as e:
        console.print(f"[red]✗[/red] Failed to write program: {escape(str(e))}")
        raise SystemExit(1)

    console.print(_summary_table(result))
    console.print(f"[green]✓[/green] Wrote {len(result.program)} lines to {path}")


@main.command("info")
@click.argument("job", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(job: Path) -> None:
    """Slice a job and show its numbers without writing anything."""
    result = _run(job)
    console.print(_summary_table(result))
    console.print(_steps_table(result))


@main.command("validate")
@click.argument("job", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(job: Path) -> None:
    """Check a job file without slicing it."""
    try:
        config = load_job_config(job)
    except LayerPathError as e:
        console.print(f"[red]✗[/red] Invalid job file: {escape(str(e))}")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Job '{config.name}' is valid ({config.slicer.type}, {config.contour.type} contour)")


@main.command("jobs")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
def list_jobs(directory: Path) -> None:
    """List the job files in a directory."""
    try:
        manager = ConfigManager(directory)
        names = manager.list_jobs()
    except LayerPathError as e:
        console.print(f"[red]✗[/red] Failed to list jobs: {escape(str(e))}")
        raise SystemExit(1)

    if not names:
        console.print("[yellow]No job configurations found.[/yellow]")
        return

    table = Table(title="Available Jobs")
    table.add_column("Name", style="cyan")
    table.add_column("Slicer")
    table.add_column("Contour")
    for name in names:
        job = manager.get_job(name)
        table.add_row(name, job.slicer.type, job.contour.type)
    console.print(table)


if __name__ == "__main__":
    main()
