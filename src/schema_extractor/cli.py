"""Command-line interface for the AL schema explorer.

Usage::

    al-schema scan ./my-al-app --prefix "ABC "
    al-schema export ./my-al-app --format mermaid --output schema.mmd
    al-schema linked ./my-al-app "Loyalty Card"
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional

import typer

from src.schema_extractor import display
from src.schema_extractor.config import ScanSettings, load_scan_settings
from src.schema_extractor.services.diagram_preparer import prepare_diagram
from src.schema_extractor.services.mermaid_generator import generate_mermaid_erd
from src.schema_extractor.services.project_loader import ProjectLoader
from src.schema_extractor.services.project_scanner import ProjectScanner
from src.schema_extractor.services.schema_graph import SchemaGraph
from src.shared.constants import CLI_NAME, NOT_AL_PROJECT_WARNING, VERSION
from src.shared.errors import ProjectNotFoundError, ValidationError
from src.shared.logging import setup_logging
from src.shared.models.schema import DiagramData, ProjectScanResult

app = typer.Typer(
    name=CLI_NAME,
    help="Extract an entity-relationship schema from an AL project.",
    no_args_is_help=True,
)


class ExportFormat(str, Enum):
    JSON = "json"
    MERMAID = "mermaid"


class _ScanOutput(NamedTuple):
    scan: ProjectScanResult
    diagram: DiagramData
    project_name: str


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{CLI_NAME} {VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Emit JSON debug logs."),
) -> None:
    """AL schema explorer."""
    if verbose:
        setup_logging(CLI_NAME, "DEBUG")


def _resolve_settings(
    config: Optional[Path], prefix: Optional[str], workers: Optional[int]
) -> ScanSettings:
    try:
        settings = load_scan_settings(config)
    except ValidationError as exc:
        display.print_error_panel(exc)
        raise typer.Exit(code=1)
    if prefix is not None:
        settings.object_name_prefix = prefix
    if workers is not None:
        settings.max_workers = workers
    return settings


def _run_scan(project_dir: Path, settings: ScanSettings) -> _ScanOutput:
    """Load, scan and project *project_dir*; exits 1 if it does not exist."""
    loader = ProjectLoader(
        source_glob=settings.source_glob,
        manifest_name=settings.manifest_name,
        exclude_dirs=settings.exclude_dirs,
    )
    try:
        source = loader.load(project_dir)
    except ProjectNotFoundError as exc:
        display.print_error_panel(exc)
        raise typer.Exit(code=1)

    scanner = ProjectScanner.with_prefix(
        settings.object_name_prefix, max_workers=settings.max_workers
    )
    scan = scanner.scan(
        source.files,
        project_name=source.project_name,
        manifest=source.manifest,
        root=source.root,
    )
    # Loader problems come first: they happened before parsing
    scan.errors[:0] = source.errors
    if not loader.detect_project(source.root):
        scan.errors.insert(0, NOT_AL_PROJECT_WARNING)
    project_name = source.project_name or settings.default_project_name
    return _ScanOutput(scan, prepare_diagram(scan), project_name)


@app.command()
def scan(
    project_dir: Path = typer.Argument(..., help="AL project directory."),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Object name prefix to strip."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Parallel parse workers."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML scan settings."),
) -> None:
    """Scan a project and print a schema summary."""
    settings = _resolve_settings(config, prefix, workers)
    output = _run_scan(project_dir, settings)

    display.print_scan_header(output.scan, output.project_name)
    if not output.diagram.entities:
        display.print_message("[yellow]No AL tables found in this project.[/yellow]")
    else:
        display.print_entity_table(output.diagram)
        display.print_analysis(SchemaGraph(output.diagram).analyze())
    display.print_warnings(output.scan.errors)


@app.command()
def export(
    project_dir: Path = typer.Argument(..., help="AL project directory."),
    fmt: ExportFormat = typer.Option(ExportFormat.JSON, "--format", "-f", help="Output format."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Object name prefix to strip."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML scan settings."),
) -> None:
    """Export the diagram as JSON or Mermaid ER source."""
    settings = _resolve_settings(config, prefix, None)
    result = _run_scan(project_dir, settings)

    if fmt is ExportFormat.MERMAID:
        content = generate_mermaid_erd(result.diagram)
    else:
        content = json.dumps(result.diagram.model_dump(by_alias=True), indent=2)

    if output is None:
        typer.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content + "\n", encoding="utf-8")
    display.print_message(f"[green]Wrote {fmt.value} diagram to {output}[/green]")


@app.command()
def linked(
    project_dir: Path = typer.Argument(..., help="AL project directory."),
    entity: str = typer.Argument(..., help="Entity name (case-insensitive)."),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Object name prefix to strip."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML scan settings."),
) -> None:
    """List the entities directly related to ENTITY."""
    settings = _resolve_settings(config, prefix, None)
    result = _run_scan(project_dir, settings)

    graph = SchemaGraph(result.diagram)
    if not graph.has_entity(entity):
        display.print_error_panel(f"Entity {entity!r} not found in diagram")
        raise typer.Exit(code=1)
    found = result.diagram.find_entity(entity)
    display.print_linked(found.name if found else entity, graph.linked_entities(entity))


if __name__ == "__main__":
    app()
