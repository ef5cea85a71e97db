"""Error hierarchy for keyed archive handling.

Services raise these; the CLI is the only layer that catches them and turns
them into a printed message plus a non-zero exit code.
"""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for every keyed-archive failure."""


class InvalidArchiveError(ArchiveError):
    """The plist decoded fine but is not a well-formed keyed archive."""


class PlistDecodeError(ArchiveError):
    """The input bytes are neither a binary nor an XML plist."""


class UnsupportedObjectError(ArchiveError):
    """A value in the object graph has no keyed-archive representation."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"cannot archive object of type {type(value).__name__}: {value!r}")


class FixtureWriteError(ArchiveError):
    """Encoding or writing a fixture file failed."""
