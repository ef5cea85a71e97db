"""Domain models (Pydantic v2).

These models describe *what* a fixture or an archive is, not *how* it is
encoded or written. Object graphs stay as plain Python values (`Any`): the
archiver decides how each one maps onto the keyed archive.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.archive_format import ArchiveFormat


class FixtureSpec(BaseModel):
    """A named list of objects to archive into fixture files."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=128,
        pattern=r"^[A-Za-z0-9_.-]+$",
        description="Base filename of the fixture (without extension).",
    )
    objects: list[Any] = Field(
        default_factory=list,
        description="Top-level objects, encoded in order as $0, $1, ...",
    )
    formats: tuple[ArchiveFormat, ...] = Field(
        default=(ArchiveFormat.BINARY, ArchiveFormat.XML),
        min_length=1,
        description="Plist containers to write.",
    )
    description: str | None = Field(
        default=None,
        description="What the fixture exercises in a consumer.",
    )


class FixtureResult(BaseModel):
    """Outcome of writing one fixture."""

    name: str = Field(..., min_length=1)
    paths: list[Path] = Field(
        default_factory=list,
        description="Files written, one per format.",
    )
    object_count: int = Field(
        default=0,
        ge=0,
        description="Number of top-level objects archived.",
    )
    sizes: dict[str, int] = Field(
        default_factory=dict,
        description="File size in bytes keyed by file name.",
    )


class ArchiveSummary(BaseModel):
    """Header-level description of a decoded keyed archive."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    archiver: str
    version: int
    top_keys: list[str] = Field(default_factory=list)
    object_table_size: int = Field(
        default=0,
        ge=0,
        description="Entries in $objects, including the $null slot.",
    )
    objects: list[Any] = Field(
        default_factory=list,
        description="Unarchived top-level objects.",
    )
