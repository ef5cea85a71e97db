"""Core configuration.

Centralizes environment variables (pydantic-settings) so the CLI and the
services read the same typed values.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.archive_format import ArchiveFormat

APP_NAME = "nskeyed-fixtures"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Central application settings.

    Sources, first match wins: explicit kwargs, `NSKEYED_*` environment
    variables, `./.env`, then the user config `.env`.
    """

    model_config = SettingsConfigDict(
        env_prefix="NSKEYED_",
        extra="ignore",
        case_sensitive=False,
        env_file=(str(get_user_env_file()), ".env"),
        env_file_encoding="utf-8",
    )

    fixtures_dir: Path = Field(
        default=Path("fixtures"),
        description="Directory where `generate` writes fixture files.",
    )
    default_format: ArchiveFormat = Field(
        default=ArchiveFormat.BINARY,
        description="Container used when a single format is requested.",
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation for JSON output of `inspect --json`.",
    )
    log_level: str = Field(
        default="WARNING",
        min_length=1,
        description="Level for the `nskeyed` logger (DEBUG, INFO, WARNING, ...).",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value!r}")
        return normalized
