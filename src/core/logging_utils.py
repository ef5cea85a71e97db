"""Logging setup for the CLI and services.

Modules obtain children of the `nskeyed` logger through `get_logger`; only
the CLI calls `configure_logging`, so library use stays silent by default.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "nskeyed"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(level: str = "WARNING", *, console: Console | None = None) -> logging.Logger:
    """Configure the `nskeyed` logger once; later calls only change the level."""

    normalized = (level or "WARNING").upper()
    log_level = getattr(logging, normalized, logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False

    if not logger.handlers:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(log_level)

    return logger
