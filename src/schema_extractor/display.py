"""Rich-based terminal display for scan results.

All functions share the module-level ``_console`` so formatting stays
consistent across a CLI session.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.shared.constants import CLI_NAME, VERSION
from src.shared.models.schema import DiagramData, ProjectScanResult, SchemaGraphAnalysis

# ---------------------------------------------------------------------------
# Module-level Console singleton
# ---------------------------------------------------------------------------

_console = Console()


def print_scan_header(scan: ProjectScanResult, project_name: str) -> None:
    """Print a panel with the project name and object/relation counts."""
    header = Text()
    header.append("AL Schema Explorer", style="bold white")
    header.append(f" v{VERSION}\n", style="dim")
    header.append("Project: ", style="bold")
    header.append(f"{project_name}\n", style="cyan")
    header.append(
        f"{scan.table_count} table(s), {scan.extension_count} extension(s), "
        f"{len(scan.relations)} relation(s)",
        style="green",
    )
    _console.print(
        Panel(
            header,
            title=f"[bold]{CLI_NAME} scan[/bold]",
            border_style="blue",
            expand=False,
        )
    )


def print_entity_table(diagram: DiagramData) -> None:
    """Print one row per diagram entity with its key and relation counts."""
    table = Table(title="Entities", show_header=True, header_style="bold magenta")
    table.add_column("Entity", style="cyan", min_width=25)
    table.add_column("Caption", min_width=20)
    table.add_column("Fields", justify="right")
    table.add_column("Primary Key", min_width=15)
    table.add_column("Outgoing", justify="right")

    outgoing: dict[str, int] = {}
    for rel in diagram.relations:
        key = rel.source_entity.lower()
        outgoing[key] = outgoing.get(key, 0) + 1

    for entity in sorted(diagram.entities, key=lambda e: e.caption.lower()):
        pk = ", ".join(f.name for f in entity.fields if f.is_primary_key) or "-"
        table.add_row(
            escape(entity.name),
            escape(entity.caption),
            str(len(entity.fields)),
            escape(pk),
            str(outgoing.get(entity.name.lower(), 0)),
        )

    _console.print(table)


def print_analysis(analysis: SchemaGraphAnalysis) -> None:
    """Print graph connectivity metrics."""
    lines = Text()
    lines.append(f"Connected components: {analysis.connected_components}\n")
    if analysis.most_referenced:
        top = ", ".join(f"{name} ({count})" for name, count in analysis.most_referenced[:5])
        lines.append(f"Most referenced: {top}\n")
    if analysis.isolated_entities:
        lines.append(f"Isolated: {len(analysis.isolated_entities)} entity(ies)", style="dim")
    _console.print(Panel(lines, title="[bold]Graph[/bold]", border_style="cyan", expand=False))


def print_warnings(errors: list[str]) -> None:
    """Print accumulated non-fatal warnings, one per line."""
    if not errors:
        return
    _console.print("[yellow]Warnings during analysis:[/yellow]")
    for err in errors:
        _console.print(f"  [yellow]-[/yellow] {escape(err)}", highlight=False)


def print_linked(entity: str, linked: list[str]) -> None:
    if not linked:
        _console.print(f"[dim]{escape(entity)} has no linked entities.[/dim]")
        return
    _console.print(f"[bold]{escape(entity)}[/bold] is linked to:")
    for name in linked:
        _console.print(f"  - {escape(name)}", highlight=False)


def print_error_panel(error: str | Exception) -> None:
    """Print an error message in a red Rich panel."""
    _console.print(
        Panel(
            Text(str(error), style="bold white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            expand=False,
        )
    )


def print_message(message: str) -> None:
    _console.print(message, highlight=False)
