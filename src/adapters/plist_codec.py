"""Plist container encoding (plistlib).

The keyed archive itself is a plain plist dictionary; this module only turns
it into bytes and back. Binary plists carry UIDs natively. XML plists have no
UID element, so UIDs are written as `<dict><key>CF$UID</key><integer>n</integer></dict>`
the way Foundation does it, and mapped back to `plistlib.UID` on read.
"""

from __future__ import annotations

import plistlib
from typing import Any
from xml.parsers.expat import ExpatError

from core.domain.archive_format import ArchiveFormat
from core.errors import ArchiveError, PlistDecodeError

XML_UID_KEY = "CF$UID"

_BINARY_MAGIC = b"bplist00"


def _uids_to_xml(value: Any) -> Any:
    if isinstance(value, plistlib.UID):
        return {XML_UID_KEY: value.data}
    if isinstance(value, dict):
        return {key: _uids_to_xml(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_uids_to_xml(item) for item in value]
    return value


def _uids_from_xml(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1 and isinstance(value.get(XML_UID_KEY), int) and not isinstance(
            value.get(XML_UID_KEY), bool
        ):
            return plistlib.UID(value[XML_UID_KEY])
        return {key: _uids_from_xml(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_uids_from_xml(item) for item in value]
    return value


def detect_format(data: bytes) -> ArchiveFormat:
    """Guess the container of `data` from its header."""

    return ArchiveFormat.BINARY if data[: len(_BINARY_MAGIC)] == _BINARY_MAGIC else ArchiveFormat.XML


def dumps(value: Any, fmt: ArchiveFormat = ArchiveFormat.BINARY) -> bytes:
    """Serialize a plist value. Key order of dictionaries is preserved."""

    try:
        if fmt is ArchiveFormat.XML:
            return plistlib.dumps(_uids_to_xml(value), fmt=plistlib.FMT_XML, sort_keys=False)
        return plistlib.dumps(value, fmt=plistlib.FMT_BINARY, sort_keys=False)
    except (TypeError, OverflowError, ValueError) as exc:
        raise ArchiveError(f"cannot encode {fmt.label()}: {exc}") from exc


def loads(data: bytes) -> Any:
    """Parse binary or XML plist bytes into Python values with `plistlib.UID` refs."""

    if not data:
        raise PlistDecodeError("empty input is not a plist")
    fmt = detect_format(data)
    try:
        value = plistlib.loads(data)
    except (ValueError, ExpatError, AttributeError, TypeError, OverflowError) as exc:
        # plistlib surfaces some malformed XML values (e.g. a bad <date>) as
        # AttributeError or TypeError.
        raise PlistDecodeError(f"invalid {fmt.label()}: {exc}") from exc
    if fmt is ArchiveFormat.XML:
        return _uids_from_xml(value)
    return value


def to_plist_text(value: Any) -> str:
    """Render any plist value (or plist bytes) as XML plist text."""

    if isinstance(value, (bytes, bytearray)):
        value = loads(bytes(value))
    return dumps(value, ArchiveFormat.XML).decode("utf-8")
