"""UI components for the CLI (Rich).

Tables and panels live here so commands only decide *what* to show.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table
from rich.text import Text

from core.domain.models import ArchiveSummary, FixtureResult


def build_fixtures_table(results: Iterable[FixtureResult]) -> Table:
    """Table of written fixture files."""

    table = Table(title="Fixtures")
    table.add_column("Fixture", style="cyan", no_wrap=True)
    table.add_column("Objects", style="white", justify="right")
    table.add_column("File", style="magenta")
    table.add_column("Bytes", style="green", justify="right")
    for result in results:
        for path in result.paths:
            table.add_row(
                result.name,
                str(result.object_count),
                str(path),
                str(result.sizes.get(path.name, "")),
            )
    return table


def build_objects_table(objects: list[Any]) -> Table:
    table = Table(title="Top-level objects")
    table.add_column("#", style="cyan", justify="right", no_wrap=True)
    table.add_column("Type", style="yellow", no_wrap=True)
    table.add_column("Value", style="white")
    for index, obj in enumerate(objects):
        table.add_row(f"${index}", type(obj).__name__, Pretty(obj, max_length=20, max_string=80))
    return table


def build_summary_panel(summary: ArchiveSummary, *, source: str) -> Panel:
    """Header panel for `inspect`."""

    body = Text()
    body.append("Archiver: ", style="bold")
    body.append(f"{summary.archiver}\n")
    body.append("Version: ", style="bold")
    body.append(f"{summary.version}\n")
    body.append("Top keys: ", style="bold")
    body.append(", ".join(summary.top_keys) or "-")
    body.append("\nObject table: ", style="bold")
    body.append(f"{summary.object_table_size} entries")
    return Panel(body, title=Text(source, style="bold cyan"), border_style="cyan")
