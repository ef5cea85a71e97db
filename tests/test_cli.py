import json
from pathlib import Path

from typer.testing import CliRunner

from cli.main import app
from core.services.unarchiver import unarchive

runner = CliRunner()


def test_generate_selected_fixtures(tmp_path: Path):
    result = runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "boolean", "-f", "test"])

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in tmp_path.iterdir()) == ["boolean.bin", "boolean.xml", "test.bin", "test.xml"]


def test_generate_uses_configured_directory(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NSKEYED_FIXTURES_DIR", str(tmp_path / "configured"))
    result = runner.invoke(app, ["generate", "-f", "dict", "--format", "xml"])

    assert result.exit_code == 0, result.output
    assert [p.name for p in (tmp_path / "configured").iterdir()] == ["dict.xml"]


def test_generate_unknown_fixture_is_a_usage_error(tmp_path: Path):
    result = runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "nope"])
    assert result.exit_code == 2


def test_generate_reports_write_failure(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    result = runner.invoke(app, ["generate", "-o", str(blocker), "-f", "boolean"])
    assert result.exit_code == 1


def test_archive_command_uses_default_format(tmp_path: Path, monkeypatch):
    source = tmp_path / "objects.json"
    source.write_text(json.dumps([True, 2, "three", {"k": [1]}]), encoding="utf-8")
    monkeypatch.setenv("NSKEYED_DEFAULT_FORMAT", "xml")

    result = runner.invoke(app, ["archive", str(source), str(tmp_path / "custom")])

    assert result.exit_code == 0, result.output
    assert unarchive((tmp_path / "custom.xml").read_bytes()) == [True, 2, "three", {"k": [1]}]
    assert not (tmp_path / "custom.bin").exists()


def test_archive_command_rejects_non_array(tmp_path: Path):
    source = tmp_path / "object.json"
    source.write_text('{"a": 1}', encoding="utf-8")
    result = runner.invoke(app, ["archive", str(source), str(tmp_path / "out")])
    assert result.exit_code == 2


def test_inspect_json(tmp_path: Path):
    runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "primitives"])

    result = runner.invoke(app, ["inspect", str(tmp_path / "primitives.bin"), "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        1, 1, 1, 1.5, "YXNkZmFzZGZhZHNmYWRzZg==", True,
        "Hello, World!", "Hello, World!", "Hello, World!", False, False, 42,
    ]


def test_inspect_table_and_output_file(tmp_path: Path):
    runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "dict"])

    result = runner.invoke(app, ["inspect", str(tmp_path / "dict.xml")])
    assert result.exit_code == 0, result.output
    assert "NSKeyedArchiver" in result.output

    out = tmp_path / "dict.json"
    result = runner.invoke(app, ["inspect", str(tmp_path / "dict.xml"), "--output", str(out)])
    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text(encoding="utf-8")) == [
        {"array": [True, "Hello, World!", 42], "int": 1, "string": "string"}
    ]


def test_inspect_invalid_archive(tmp_path: Path):
    runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "wrong_version"])

    result = runner.invoke(app, ["inspect", str(tmp_path / "wrong_version.bin")])
    assert result.exit_code == 1


def test_plist_prints_xml(tmp_path: Path):
    runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "boolean", "--format", "binary"])

    result = runner.invoke(app, ["plist", str(tmp_path / "boolean.bin")])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("<?xml")
    assert "NSKeyedArchiver" in result.output


def test_doctor(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("NSKEYED_FIXTURES_DIR", str(tmp_path / "doctor"))
    result = runner.invoke(app, ["doctor", "run"])
    assert result.exit_code == 0, result.output


def test_list_shows_catalogue():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "primitives" in result.output
    assert "broken_plist" in result.output


def test_inspect_reports_unwritable_output(tmp_path: Path):
    runner.invoke(app, ["generate", "-o", str(tmp_path), "-f", "boolean"])
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    result = runner.invoke(app, ["inspect", str(tmp_path / "boolean.bin"), "--output", str(blocker / "out.json")])
    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)
