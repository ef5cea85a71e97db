"""Doctor command for environment diagnostics."""

from __future__ import annotations

import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from core.config import AppSettings, get_user_env_file
from core.domain.archive_format import ArchiveFormat
from core.errors import ArchiveError
from core.services.archiver import archive
from core.services.unarchiver import unarchive

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

_SAMPLE = [True, 2, 3.5, "sample", b"\x00\x01", [1, "two"], {"key": "value"}]


def _check_roundtrip(fmt: ArchiveFormat) -> tuple[bool, str]:
    try:
        data = archive(_SAMPLE, fmt)
        decoded = unarchive(data)
    except ArchiveError as exc:
        return False, str(exc)
    if decoded != _SAMPLE:
        return False, f"decoded {decoded!r}"
    return True, f"{len(data)} bytes"


def _check_writable(directory: Path) -> tuple[bool, str]:
    """Create and remove a scratch file inside `directory`."""

    try:
        directory.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=directory, prefix=".doctor-"):
            pass
        return True, str(directory.resolve())
    except OSError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="nskeyed doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Default format", "OK", settings.default_format.label())

    ok_dir, detail_dir = _check_writable(settings.fixtures_dir)
    table.add_row("Fixtures dir", "OK" if ok_dir else "FAIL", detail_dir)

    failures = 0 if ok_dir else 1
    for fmt in ArchiveFormat:
        ok, detail = _check_roundtrip(fmt)
        failures += 0 if ok else 1
        table.add_row(f"{fmt.label()} round-trip", "OK" if ok else "FAIL", detail)

    _console.print(table)

    if failures:
        _console.print(
            "\n[yellow]Note:[/yellow] set NSKEYED_FIXTURES_DIR to a writable directory if the fixtures check fails."
        )
        raise typer.Exit(code=1)
