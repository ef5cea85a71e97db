"""Fixture files on disk.

One file per format: `<base>.bin` and/or `<base>.xml`, where `<base>` is the
filename argument without extension.
"""

from __future__ import annotations

from pathlib import Path

from core.logging_utils import get_logger

logger = get_logger(__name__)


def fixture_path(base: Path, extension: str) -> Path:
    """Append `extension` to `base` without replacing any dot already in its name."""

    return base.with_name(base.name + extension)


def write_fixture_bytes(*, data: bytes, output_path: Path) -> Path:
    """Write one encoded archive, creating parent directories as needed."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    logger.debug("Wrote %d bytes to %s", len(data), output_path)
    return output_path
