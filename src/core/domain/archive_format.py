"""Output formats for keyed archives.

Both CLI and services share this enum so a format is named the same way in
flags, settings and file extensions.
"""

from __future__ import annotations

from enum import Enum


class ArchiveFormat(str, Enum):
    """Plist container used to store a keyed archive."""

    BINARY = "binary"
    XML = "xml"

    @property
    def extension(self) -> str:
        return ".xml" if self is ArchiveFormat.XML else ".bin"

    def label(self) -> str:
        """Human readable label for tables and logging."""

        return "XML plist" if self is ArchiveFormat.XML else "Binary plist"
