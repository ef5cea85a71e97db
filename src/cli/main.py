"""Typer application: fixture generation and archive inspection.

The CLI is the only layer that catches `ArchiveError`; everything below it
raises.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from adapters import plist_codec
from adapters.json_exporter import export_objects_json, render_objects_json
from cli import doctor
from cli.ui_components import build_fixtures_table, build_objects_table, build_summary_panel
from core.config import AppSettings
from core.domain.archive_format import ArchiveFormat
from core.errors import ArchiveError, FixtureWriteError
from core.logging_utils import configure_logging
from core.services.fixtures_pipeline import (
    FIXTURES,
    INVALID_FIXTURE_NAMES,
    GenerateRequest,
    create_archive_files,
    generate_fixtures,
)
from core.services.unarchiver import summarize

app = typer.Typer(
    no_args_is_help=True,
    help="Generate and inspect NSKeyedArchiver fixtures (binary and XML plists).",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        _err_console.print(f"[red]Couldn't read file[/red] {path}: {exc}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def generate(
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Destination directory (default: NSKEYED_FIXTURES_DIR or ./fixtures).",
    ),
    fixture: Optional[List[str]] = typer.Option(
        None,
        "--fixture",
        "-f",
        help="Fixture name to write; repeatable. Default: the whole catalogue.",
    ),
    fmt: Optional[List[ArchiveFormat]] = typer.Option(
        None,
        "--format",
        help="Restrict output to these formats; repeatable.",
    ),
    invalid: bool = typer.Option(False, "--invalid", help="Also write the invalid-archive fixtures."),
) -> None:
    """Write `<name>.bin` and `<name>.xml` for each fixture."""

    settings = AppSettings()
    request = GenerateRequest(
        output_dir=output_dir or settings.fixtures_dir,
        names=fixture or None,
        include_invalid=invalid,
        formats=fmt or None,
    )
    try:
        outcome = generate_fixtures(request)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--fixture") from exc
    except FixtureWriteError as exc:
        _err_console.print(f"[red]Couldn't write file[/red]: {exc}")
        raise typer.Exit(code=1) from exc

    _console.print(build_fixtures_table(outcome.results))


@app.command(name="archive")
def archive_json(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON array of objects."),
    filename: Path = typer.Argument(..., help="Output path without extension."),
    fmt: Optional[List[ArchiveFormat]] = typer.Option(
        None,
        "--format",
        help="Formats to write; repeatable. Default: NSKEYED_DEFAULT_FORMAT.",
    ),
) -> None:
    """Archive the objects of a JSON array into `<filename>.bin`/`.xml`."""

    settings = AppSettings()
    try:
        objects = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _err_console.print(f"[red]Couldn't read JSON[/red] {source}: {exc}")
        raise typer.Exit(code=1) from exc
    if not isinstance(objects, list):
        raise typer.BadParameter("the JSON document must be an array", param_hint="SOURCE")

    try:
        paths = create_archive_files(objects, filename, fmt or [settings.default_format])
    except FixtureWriteError as exc:
        _err_console.print(f"[red]Couldn't write file[/red]: {exc}")
        raise typer.Exit(code=1) from exc
    for path in paths:
        _console.print(f"[green]Wrote[/green] {path}")


@app.command(name="list")
def list_fixtures() -> None:
    """List the fixture catalogue."""

    for name, spec in FIXTURES.items():
        _console.print(f"[cyan]{name}[/cyan] ({len(spec.objects)} objects) {spec.description or ''}")
    for name in INVALID_FIXTURE_NAMES:
        _console.print(f"[yellow]{name}[/yellow] (invalid, --invalid)")


@app.command()
def inspect(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    as_json: bool = typer.Option(False, "--json", help="Print the objects as JSON."),
    output: Optional[Path] = typer.Option(None, "--output", help="Write the JSON to this file."),
) -> None:
    """Unarchive a keyed archive and show its objects."""

    settings = AppSettings()
    data = _read_bytes(path)
    try:
        summary = summarize(data)
        if output is not None:
            export_objects_json(objects=summary.objects, output_path=output, indent=settings.json_indent)
            _console.print(f"[green]Saved JSON to:[/green] {output}")
            return
        if as_json:
            # Plain print keeps the output machine-readable.
            typer.echo(render_objects_json(summary.objects, indent=settings.json_indent))
            return
    except (ArchiveError, ValueError, OSError) as exc:
        _err_console.print(f"[red]Couldn't unarchive[/red] {path}: {exc}")
        raise typer.Exit(code=1) from exc

    _console.print(build_summary_panel(summary, source=str(path)))
    _console.print(build_objects_table(summary.objects))


@app.command()
def plist(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
) -> None:
    """Print any plist (binary or XML) as XML text."""

    data = _read_bytes(path)
    try:
        text = plist_codec.to_plist_text(data)
    except ArchiveError as exc:
        _err_console.print(f"[red]Couldn't decode plist[/red] {path}: {exc}")
        raise typer.Exit(code=1) from exc
    typer.echo(text, nl=False)


def run() -> None:
    app()
