"""Fixture generation for keyed-archive consumers.

The catalogue below is the set of archives a consuming unarchiver is tested
against. `create_archive_files` is the primitive: archive a list of objects in
every requested format and write `<filename>.bin` / `<filename>.xml`.
The invalid fixtures are archives with one header defect each, plus one file
that is not a plist at all; they are written in binary form only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from adapters import plist_codec
from adapters.fixture_writer import fixture_path, write_fixture_bytes
from core.domain.archive_format import ArchiveFormat
from core.domain.keyed_archive import (
    ARCHIVER_KEY,
    OBJECTS_KEY,
    TOP_KEY,
    VERSION_KEY,
)
from core.domain.models import FixtureResult, FixtureSpec
from core.errors import ArchiveError, FixtureWriteError
from core.logging_utils import get_logger
from core.services.archiver import KeyedArchiver

logger = get_logger(__name__)

HELLO = "Hello, World!"

_PRIMITIVES: list[Any] = [
    1,
    1,
    1,
    1.5,
    b"asdfasdfadsfadsf",
    True,
    HELLO,
    HELLO,
    HELLO,
    False,
    False,
    42,
]

FIXTURES: dict[str, FixtureSpec] = {
    spec.name: spec
    for spec in (
        FixtureSpec(
            name="boolean",
            objects=[True],
            description="A single boolean number.",
        ),
        FixtureSpec(
            name="test",
            objects=[True, 2, 3, "test", "test"],
            description="Boolean, two integers and a duplicated string.",
        ),
        FixtureSpec(
            name="onevalue",
            objects=[True],
            description="Smallest useful archive.",
        ),
        FixtureSpec(
            name="primitives",
            objects=list(_PRIMITIVES),
            description="Every inline plist primitive, with repeats.",
        ),
        FixtureSpec(
            name="arrays",
            objects=[
                list(_PRIMITIVES),
                [True, HELLO, 42],
                {True},
                {42, True, HELLO},
            ],
            description="Arrays and sets.",
        ),
        FixtureSpec(
            name="nestedarrays",
            objects=[[[True], [42, True, HELLO]]],
            description="An array of arrays.",
        ),
        FixtureSpec(
            name="dict",
            objects=[{"array": [True, HELLO, 42], "int": 1, "string": "string"}],
            description="A dictionary with an array value.",
        ),
    )
}


def _without(key: str) -> Callable[[dict[str, Any]], dict[str, Any]]:
    def mutate(archive: dict[str, Any]) -> dict[str, Any]:
        archive.pop(key)
        return archive

    return mutate


def _replace(key: str, value: Any) -> Callable[[dict[str, Any]], dict[str, Any]]:
    def mutate(archive: dict[str, Any]) -> dict[str, Any]:
        archive[key] = value
        return archive

    return mutate


_INVALID_MUTATIONS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "missing_archiver": _without(ARCHIVER_KEY),
    "wrong_archiver": _replace(ARCHIVER_KEY, "NSKeyedArchiverX"),
    "missing_top": _without(TOP_KEY),
    "missing_objects": _without(OBJECTS_KEY),
    "missing_version": _without(VERSION_KEY),
    "wrong_version": _replace(VERSION_KEY, 100001),
}

BROKEN_PLIST = b"bplist00\x00broken"

INVALID_FIXTURE_NAMES: tuple[str, ...] = (*_INVALID_MUTATIONS, "broken_plist")


def build_invalid_fixture(name: str) -> bytes:
    """Binary bytes for one invalid fixture (see `INVALID_FIXTURE_NAMES`)."""

    if name == "broken_plist":
        return BROKEN_PLIST
    try:
        mutate = _INVALID_MUTATIONS[name]
    except KeyError:
        raise ValueError(f"unknown invalid fixture: {name!r}") from None

    archiver = KeyedArchiver()
    archiver.encode(True)
    return plist_codec.dumps(mutate(archiver.archive_dict()), ArchiveFormat.BINARY)


def create_archive_files(
    objects: Iterable[Any],
    filename: str | Path,
    formats: Sequence[ArchiveFormat] = (ArchiveFormat.BINARY, ArchiveFormat.XML),
) -> list[Path]:
    """Archive `objects` once per format and write `<filename><ext>` files.

    All formats are encoded before anything is written, so an unarchivable
    object never leaves a partial fixture behind.
    """

    objects = list(objects)
    base = Path(filename)
    try:
        encoded: list[tuple[Path, bytes]] = []
        for fmt in formats:
            archiver = KeyedArchiver(output_format=fmt)
            for obj in objects:
                archiver.encode(obj)
            archiver.finish_encoding()
            encoded.append((fixture_path(base, fmt.extension), archiver.encoded_data))

        return [write_fixture_bytes(data=data, output_path=path) for path, data in encoded]
    except (ArchiveError, OSError) as exc:
        raise FixtureWriteError(f"{base}: {exc}") from exc


@dataclass
class GenerateRequest:
    """Parameters for a `generate_fixtures` run."""

    output_dir: Path
    names: Sequence[str] | None = None
    include_invalid: bool = False
    formats: Sequence[ArchiveFormat] | None = None


@dataclass
class GenerateResult:
    results: list[FixtureResult] = field(default_factory=list)

    @property
    def paths(self) -> list[Path]:
        return [path for result in self.results for path in result.paths]


def _result(name: str, paths: list[Path], object_count: int) -> FixtureResult:
    return FixtureResult(
        name=name,
        paths=paths,
        object_count=object_count,
        sizes={path.name: path.stat().st_size for path in paths},
    )


def generate_fixtures(request: GenerateRequest) -> GenerateResult:
    """Write the catalogue fixtures (and optionally the invalid ones)."""

    names = list(request.names) if request.names else list(FIXTURES)
    unknown = [name for name in names if name not in FIXTURES and name not in INVALID_FIXTURE_NAMES]
    if unknown:
        raise ValueError(f"unknown fixture(s): {', '.join(unknown)}")

    outcome = GenerateResult()
    for name in names:
        if name in INVALID_FIXTURE_NAMES:
            continue
        spec = FIXTURES[name]
        formats = request.formats or spec.formats
        logger.info("Generating fixture %s (%d objects)", name, len(spec.objects))
        paths = create_archive_files(spec.objects, request.output_dir / name, formats)
        outcome.results.append(_result(name, paths, len(spec.objects)))

    invalid_names = [name for name in names if name in INVALID_FIXTURE_NAMES]
    if request.include_invalid:
        invalid_names = list(INVALID_FIXTURE_NAMES)
    for name in invalid_names:
        path = fixture_path(request.output_dir / name, ArchiveFormat.BINARY.extension)
        try:
            write_fixture_bytes(data=build_invalid_fixture(name), output_path=path)
        except OSError as exc:
            raise FixtureWriteError(f"{path}: {exc}") from exc
        outcome.results.append(_result(name, [path], 0))

    return outcome
