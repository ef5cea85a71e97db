from pathlib import Path

import pytest

from core.domain.archive_format import ArchiveFormat
from core.errors import FixtureWriteError
from core.services.fixtures_pipeline import (
    FIXTURES,
    HELLO,
    INVALID_FIXTURE_NAMES,
    GenerateRequest,
    create_archive_files,
    generate_fixtures,
)
from core.services.unarchiver import summarize, unarchive


def test_create_archive_files_writes_bin_and_xml(tmp_path: Path):
    paths = create_archive_files([True], tmp_path / "fixtures" / "boolean")

    assert [p.name for p in paths] == ["boolean.bin", "boolean.xml"]
    binary, xml = (p.read_bytes() for p in paths)
    assert binary.startswith(b"bplist00")
    assert xml.startswith(b"<?xml")
    assert unarchive(binary) == [True]
    assert unarchive(xml) == [True]


def test_create_archive_files_appends_extension_to_dotted_names(tmp_path: Path):
    paths = create_archive_files([1], tmp_path / "v1.2", [ArchiveFormat.XML])
    assert [p.name for p in paths] == ["v1.2.xml"]


def test_unarchivable_objects_leave_no_partial_files(tmp_path: Path):
    with pytest.raises(FixtureWriteError):
        create_archive_files([True, object()], tmp_path / "broken")
    assert list(tmp_path.iterdir()) == []


def test_write_failures_are_wrapped(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(FixtureWriteError):
        create_archive_files([True], blocker / "boolean")


def test_generate_whole_catalogue(tmp_path: Path):
    outcome = generate_fixtures(GenerateRequest(output_dir=tmp_path))

    assert [r.name for r in outcome.results] == list(FIXTURES)
    for name in FIXTURES:
        for ext in (".bin", ".xml"):
            path = tmp_path / f"{name}{ext}"
            assert path.stat().st_size > 0
            if name != "arrays":  # sets come back as lists
                assert unarchive(path.read_bytes()) == FIXTURES[name].objects
    assert outcome.results[0].sizes["boolean.bin"] == (tmp_path / "boolean.bin").stat().st_size


def test_original_fixture_contents(tmp_path: Path):
    generate_fixtures(GenerateRequest(output_dir=tmp_path, names=["test", "arrays"]))

    summary = summarize((tmp_path / "test.xml").read_bytes())
    assert summary.objects == [True, 2, 3, "test", "test"]
    assert summary.object_table_size == 5

    arrays = unarchive((tmp_path / "arrays.bin").read_bytes())
    assert arrays[1:] == [[True, HELLO, 42], [True], [True, 42, HELLO]]


def test_invalid_fixtures_are_binary_only(tmp_path: Path):
    outcome = generate_fixtures(GenerateRequest(output_dir=tmp_path, names=["boolean"], include_invalid=True))

    written = sorted(p.name for p in outcome.paths)
    expected = sorted(["boolean.bin", "boolean.xml", *(f"{name}.bin" for name in INVALID_FIXTURE_NAMES)])
    assert written == expected


def test_selecting_a_single_invalid_fixture(tmp_path: Path):
    outcome = generate_fixtures(GenerateRequest(output_dir=tmp_path, names=["missing_top"]))
    assert outcome.paths == [tmp_path / "missing_top.bin"]


def test_format_override(tmp_path: Path):
    outcome = generate_fixtures(
        GenerateRequest(output_dir=tmp_path, names=["dict"], formats=[ArchiveFormat.XML])
    )
    assert outcome.paths == [tmp_path / "dict.xml"]


def test_unknown_fixture_name(tmp_path: Path):
    with pytest.raises(ValueError, match="nope"):
        generate_fixtures(GenerateRequest(output_dir=tmp_path, names=["nope"]))
