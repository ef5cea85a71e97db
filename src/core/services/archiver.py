"""Keyed archiver: Python object graphs -> NSKeyedArchiver plists.

The archive is a plist dictionary with four keys (`$archiver`, `$version`,
`$top`, `$objects`). Every archived value lives in the `$objects` table and is
referenced by `plistlib.UID` index; slot 0 is always the `$null` marker.

Encoding rules:
- primitives (bool, int, float, str, bytes) are stored inline in the table,
  one entry per distinct (type, value);
- containers and custom objects get a dict entry with a `$class` UID; the
  table slot is reserved before children are encoded, so shared and cyclic
  references resolve to the same index;
- class entries are shared per class name.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime
from plistlib import UID
from typing import Any, Iterable, Sequence

from adapters import plist_codec
from core.domain.archive_format import ArchiveFormat
from core.domain.keyed_archive import (
    ARCHIVER_KEY,
    ARCHIVER_NAME,
    ARCHIVER_VERSION,
    CLASS_HIERARCHIES,
    CLASS_KEY,
    CLASSES_KEY,
    CLASSNAME_KEY,
    MAX_PLIST_INT,
    MIN_PLIST_INT,
    NS_KEYS,
    NS_OBJECTS,
    NS_TIME,
    NS_UUIDBYTES,
    NULL_MARKER,
    OBJECTS_KEY,
    ROOT_KEY,
    TOP_KEY,
    VERSION_KEY,
)
from core.errors import ArchiveError, UnsupportedObjectError
from core.interfaces.archivable import KeyedArchivable
from core.logging_utils import get_logger
from core.services.nsdate import datetime_to_nsdate

logger = get_logger(__name__)

NULL_UID = UID(0)


def _set_sort_key(value: Any) -> tuple[str, str]:
    # Nested sets and tuples are keyed by their members so the order does not
    # depend on string hash randomization.
    if isinstance(value, (set, frozenset)):
        return (type(value).__name__, repr(sorted(_set_sort_key(item) for item in value)))
    if isinstance(value, tuple):
        return (type(value).__name__, repr([_set_sort_key(item) for item in value]))
    return (type(value).__name__, repr(value))


class KeyedArchiver:
    """Incrementally builds one keyed archive.

    Usage mirrors Foundation: create, `encode` values, `finish_encoding`,
    then read `encoded_data`.
    """

    def __init__(self, output_format: ArchiveFormat = ArchiveFormat.BINARY) -> None:
        self.output_format = output_format
        self._objects: list[Any] = [NULL_MARKER]
        self._top: dict[str, UID] = {}
        self._primitive_uids: dict[tuple[Any, ...], UID] = {}
        self._object_uids: dict[int, UID] = {}
        # Keeps encoded containers alive so their id() stays unique.
        self._retained: list[Any] = []
        self._class_uids: dict[str, UID] = {}
        self._next_index = 0
        self._finished = False
        self._encoded: bytes | None = None

    # Public API -------------------------------------------------------

    def encode(self, obj: Any, key: str | None = None) -> UID:
        """Archive `obj` under `key`, or under the next `$N` key when omitted."""

        if self._finished:
            raise ArchiveError("cannot encode after finish_encoding()")
        if key is None:
            key = f"${self._next_index}"
            self._next_index += 1
        if key in self._top:
            raise ArchiveError(f"duplicate top-level key: {key!r}")
        uid = self._encode_value(obj)
        self._top[key] = uid
        return uid

    def encode_root(self, obj: Any) -> UID:
        return self.encode(obj, key=ROOT_KEY)

    def finish_encoding(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._encoded = plist_codec.dumps(self.archive_dict(), self.output_format)
        logger.debug(
            "Finished %s archive: %d top-level objects, %d table entries, %d bytes",
            self.output_format.value,
            len(self._top),
            len(self._objects),
            len(self._encoded),
        )

    @property
    def encoded_data(self) -> bytes:
        if self._encoded is None:
            raise ArchiveError("encoded_data is only available after finish_encoding()")
        return self._encoded

    def archive_dict(self) -> dict[str, Any]:
        """The archive as a plist dictionary (UIDs as `plistlib.UID`)."""

        return {
            VERSION_KEY: ARCHIVER_VERSION,
            ARCHIVER_KEY: ARCHIVER_NAME,
            TOP_KEY: dict(self._top),
            OBJECTS_KEY: list(self._objects),
        }

    # Table management -------------------------------------------------

    def _append(self, entry: Any) -> UID:
        self._objects.append(entry)
        return UID(len(self._objects) - 1)

    def _reserve(self, obj: Any) -> tuple[UID, dict[str, Any]]:
        entry: dict[str, Any] = {}
        uid = self._append(entry)
        self._object_uids[id(obj)] = uid
        self._retained.append(obj)
        return uid, entry

    def _class_uid(self, classes: Sequence[str]) -> UID:
        classname = classes[0]
        uid = self._class_uids.get(classname)
        if uid is None:
            uid = self._append({CLASSNAME_KEY: classname, CLASSES_KEY: list(classes)})
            self._class_uids[classname] = uid
        return uid

    def _builtin_class_uid(self, classname: str) -> UID:
        return self._class_uid(CLASS_HIERARCHIES[classname])

    # Encoding ---------------------------------------------------------

    def _encode_value(self, obj: Any) -> UID:
        if obj is None:
            return NULL_UID

        if isinstance(obj, (bool, int, float, str, bytes)):
            return self._encode_primitive(obj)

        existing = self._object_uids.get(id(obj))
        if existing is not None:
            return existing

        if isinstance(obj, bytearray):
            return self._encode_primitive(bytes(obj))
        if isinstance(obj, (list, tuple)):
            return self._encode_sequence(obj, obj, "NSArray")
        if isinstance(obj, (set, frozenset)):
            return self._encode_sequence(obj, sorted(obj, key=_set_sort_key), "NSSet")
        if isinstance(obj, dict):
            return self._encode_dict(obj)
        if isinstance(obj, datetime):
            uid, entry = self._reserve(obj)
            entry[NS_TIME] = datetime_to_nsdate(obj)
            entry[CLASS_KEY] = self._builtin_class_uid("NSDate")
            return uid
        if isinstance(obj, uuid.UUID):
            uid, entry = self._reserve(obj)
            entry[NS_UUIDBYTES] = obj.bytes
            entry[CLASS_KEY] = self._builtin_class_uid("NSUUID")
            return uid
        if isinstance(obj, KeyedArchivable):
            return self._encode_custom(obj)

        raise UnsupportedObjectError(obj)

    def _encode_primitive(self, value: bool | int | float | str | bytes) -> UID:
        if isinstance(value, int) and not isinstance(value, bool):
            if not MIN_PLIST_INT <= value <= MAX_PLIST_INT:
                raise UnsupportedObjectError(value)

        cache_key: tuple[Any, ...] = (type(value), value)
        if isinstance(value, float):
            # 0.0 == -0.0, keep both signs
            cache_key += (math.copysign(1.0, value),)
        uid = self._primitive_uids.get(cache_key)
        if uid is None:
            uid = self._append(value)
            self._primitive_uids[cache_key] = uid
        return uid

    def _encode_sequence(self, owner: Any, items: Iterable[Any], classname: str) -> UID:
        uid, entry = self._reserve(owner)
        entry[NS_OBJECTS] = [self._encode_value(item) for item in items]
        entry[CLASS_KEY] = self._builtin_class_uid(classname)
        return uid

    def _encode_dict(self, obj: dict[Any, Any]) -> UID:
        uid, entry = self._reserve(obj)
        keys = [self._encode_value(key) for key in obj]
        values = [self._encode_value(value) for value in obj.values()]
        entry[NS_KEYS] = keys
        entry[NS_OBJECTS] = values
        entry[CLASS_KEY] = self._builtin_class_uid("NSDictionary")
        return uid

    def _encode_custom(self, obj: KeyedArchivable) -> UID:
        classes = list(obj.archive_classes)
        if not classes:
            raise ArchiveError(f"{type(obj).__name__}.archive_classes is empty")

        uid, entry = self._reserve(obj)
        for name, value in obj.archive_fields().items():
            if name.startswith("$"):
                raise ArchiveError(f"field name {name!r} is reserved")
            if isinstance(value, (bool, float)) or (
                isinstance(value, int) and MIN_PLIST_INT <= value <= MAX_PLIST_INT
            ):
                entry[name] = value
            else:
                entry[name] = self._encode_value(value)
        entry[CLASS_KEY] = self._class_uid(classes)
        return uid


def archive(objects: Iterable[Any], fmt: ArchiveFormat = ArchiveFormat.BINARY) -> bytes:
    """Archive `objects` as consecutive un-keyed values ($0, $1, ...)."""

    archiver = KeyedArchiver(output_format=fmt)
    for obj in objects:
        archiver.encode(obj)
    archiver.finish_encoding()
    return archiver.encoded_data


def archive_root(obj: Any, fmt: ArchiveFormat = ArchiveFormat.BINARY) -> bytes:
    """Archive a single object under the `root` key."""

    archiver = KeyedArchiver(output_format=fmt)
    archiver.encode_root(obj)
    archiver.finish_encoding()
    return archiver.encoded_data
