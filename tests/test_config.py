from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import AppSettings, get_user_config_dir
from core.domain.archive_format import ArchiveFormat


def test_defaults():
    settings = AppSettings()
    assert settings.fixtures_dir == Path("fixtures")
    assert settings.default_format is ArchiveFormat.BINARY
    assert settings.json_indent == 2
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("NSKEYED_DEFAULT_FORMAT", "xml")
    monkeypatch.setenv("NSKEYED_LOG_LEVEL", "debug")
    settings = AppSettings()
    assert settings.default_format is ArchiveFormat.XML
    assert settings.log_level == "DEBUG"


def test_project_env_file_is_read(tmp_path: Path):
    (tmp_path / ".env").write_text("NSKEYED_JSON_INDENT=4\n", encoding="utf-8")
    assert AppSettings().json_indent == 4


@pytest.mark.parametrize("key, value", [("NSKEYED_LOG_LEVEL", "loud"), ("NSKEYED_JSON_INDENT", "12")])
def test_invalid_values_are_rejected(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        AppSettings()


def test_user_config_dir_honours_xdg(tmp_path: Path, monkeypatch):
    monkeypatch.setattr("sys.platform", "linux")
    assert get_user_config_dir() == tmp_path / "xdg" / "nskeyed-fixtures"
