"""Keyed unarchiver: NSKeyedArchiver plists (binary or XML) -> Python values.

Mapping:
- plist primitives (bool, int, float, str, bytes) are returned as-is;
- `NSString`/`NSMutableString` -> str, `NSData`/`NSMutableData` -> bytes;
- `NSDate` -> aware UTC datetime, `NSUUID` -> uuid.UUID;
- `NSArray`, `NSMutableArray`, `NSSet`, `NSMutableSet` -> list;
- `NSDictionary`, `NSMutableDictionary` -> dict;
- any other class -> dict of its fields (the `$class` reference is dropped).

Each table entry is decoded once; repeated references yield the same Python
object, which also makes cyclic archives decodable.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from plistlib import UID
from typing import Any, Mapping

from adapters import plist_codec
from core.domain.keyed_archive import (
    ARCHIVER_KEY,
    ARCHIVER_NAME,
    ARCHIVER_VERSION,
    ARRAY_CLASSES,
    CLASS_KEY,
    CLASSES_KEY,
    CLASSNAME_KEY,
    DATA_CLASSES,
    DATE_CLASS,
    DICTIONARY_CLASSES,
    NS_BYTES,
    NS_KEYS,
    NS_OBJECTS,
    NS_STRING,
    NS_TIME,
    NS_UUIDBYTES,
    OBJECTS_KEY,
    ROOT_KEY,
    SET_CLASSES,
    STRING_CLASSES,
    TOP_KEY,
    UUID_CLASS,
    VERSION_KEY,
)
from core.domain.models import ArchiveSummary
from core.errors import InvalidArchiveError
from core.logging_utils import get_logger
from core.services.nsdate import nsdate_to_datetime

logger = get_logger(__name__)

_PRIMITIVES = (bool, int, float, str, bytes, datetime)
_SCALAR_CLASSES = frozenset({DATE_CLASS, UUID_CLASS}) | STRING_CLASSES | DATA_CLASSES
_NUMBERED_KEY = re.compile(r"\$\d+")


def verify_archive(archive: Any) -> None:
    """Check the four header keys of a decoded keyed archive."""

    if not isinstance(archive, dict):
        raise InvalidArchiveError(
            f"invalid NSKeyedArchiver object, expected a dictionary, got {type(archive).__name__}"
        )

    if ARCHIVER_KEY not in archive:
        raise InvalidArchiveError(f"invalid NSKeyedArchiver object, missing key '{ARCHIVER_KEY}'")
    if archive[ARCHIVER_KEY] != ARCHIVER_NAME:
        raise InvalidArchiveError(
            f"invalid value: {archive[ARCHIVER_KEY]!r} for key '{ARCHIVER_KEY}', expected: '{ARCHIVER_NAME}'"
        )

    if TOP_KEY not in archive:
        raise InvalidArchiveError(f"invalid NSKeyedArchiver object, missing key '{TOP_KEY}'")
    if not isinstance(archive[TOP_KEY], dict):
        raise InvalidArchiveError(f"'{TOP_KEY}' must be a dictionary")

    if OBJECTS_KEY not in archive:
        raise InvalidArchiveError(f"invalid NSKeyedArchiver object, missing key '{OBJECTS_KEY}'")
    if not isinstance(archive[OBJECTS_KEY], list):
        raise InvalidArchiveError(f"'{OBJECTS_KEY}' must be an array")

    if VERSION_KEY not in archive:
        raise InvalidArchiveError(f"invalid NSKeyedArchiver object, missing key '{VERSION_KEY}'")
    version = archive[VERSION_KEY]
    if isinstance(version, bool) or version != ARCHIVER_VERSION:
        raise InvalidArchiveError(
            f"invalid value: {version!r} for key '{VERSION_KEY}', expected: '{ARCHIVER_VERSION}'"
        )


def top_level_refs(top: Mapping[str, Any]) -> list[UID]:
    """Order the `$top` references.

    `root` alone wins. Otherwise the `$N` keys must run `$0 .. $n-1` and come
    first; any other named keys follow in archive order.
    """

    if ROOT_KEY in top:
        refs = [top[ROOT_KEY]]
    else:
        numbered = [key for key in top if isinstance(key, str) and _NUMBERED_KEY.fullmatch(key)]
        try:
            refs = [top[f"${index}"] for index in range(len(numbered))]
        except KeyError as exc:
            raise InvalidArchiveError(f"'{TOP_KEY}' is missing sequential key {exc.args[0]}") from exc
        refs.extend(top[key] for key in top if key not in numbered)

    for ref in refs:
        if not isinstance(ref, UID):
            raise InvalidArchiveError(f"'{TOP_KEY}' entry is not a UID: {ref!r}")
    return refs


class _ObjectTableDecoder:
    def __init__(self, objects: list[Any]) -> None:
        self._objects = objects
        self._decoded: dict[int, Any] = {}

    def decode(self, ref: Any) -> Any:
        if not isinstance(ref, UID):
            raise InvalidArchiveError(f"expected a UID reference, got {ref!r}")
        index = ref.data
        if index == 0:
            return None
        if index >= len(self._objects):
            raise InvalidArchiveError(
                f"UID {index} points past the object table ({len(self._objects)} entries)"
            )
        if index in self._decoded:
            return self._decoded[index]

        entry = self._objects[index]
        if isinstance(entry, _PRIMITIVES):
            self._decoded[index] = entry
            return entry
        if not isinstance(entry, dict):
            raise InvalidArchiveError(f"unexpected object table entry at {index}: {entry!r}")
        return self._decode_instance(index, entry)

    def class_name(self, entry: Mapping[str, Any]) -> str:
        class_ref = entry.get(CLASS_KEY)
        if not isinstance(class_ref, UID) or class_ref.data >= len(self._objects):
            raise InvalidArchiveError(f"could not find class for {class_ref!r}")
        class_entry = self._objects[class_ref.data]
        if not isinstance(class_entry, dict) or not isinstance(class_entry.get(CLASSNAME_KEY), str):
            raise InvalidArchiveError(f"class entry {class_ref.data} has no '{CLASSNAME_KEY}'")
        return class_entry[CLASSNAME_KEY]

    def _decode_instance(self, index: int, entry: dict[str, Any]) -> Any:
        classname = self.class_name(entry)

        if classname in ARRAY_CLASSES or classname in SET_CLASSES:
            items: list[Any] = []
            self._decoded[index] = items
            items.extend(self.decode(ref) for ref in _ref_list(entry, NS_OBJECTS, classname))
            return items
        if classname in DICTIONARY_CLASSES:
            return self._decode_dictionary(index, entry, classname)
        if classname not in _SCALAR_CLASSES:
            return self._decode_custom(index, entry)

        try:
            if classname == DATE_CLASS:
                value: Any = nsdate_to_datetime(_field(entry, NS_TIME, classname))
            elif classname == UUID_CLASS:
                value = uuid.UUID(bytes=_field(entry, NS_UUIDBYTES, classname))
            elif classname in STRING_CLASSES:
                value = _field(entry, NS_STRING, classname)
            else:
                value = _field(entry, NS_BYTES, classname)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidArchiveError(f"malformed {classname} entry at {index}: {exc}") from exc

        self._decoded[index] = value
        return value

    def _decode_dictionary(self, index: int, entry: dict[str, Any], classname: str) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        self._decoded[index] = result
        keys = [self.decode(ref) for ref in _ref_list(entry, NS_KEYS, classname)]
        values = [self.decode(ref) for ref in _ref_list(entry, NS_OBJECTS, classname)]
        if len(keys) != len(values):
            raise InvalidArchiveError(
                f"{classname} has {len(keys)} keys but {len(values)} values"
            )
        for key, value in zip(keys, values):
            try:
                result[key] = value
            except TypeError as exc:
                raise InvalidArchiveError(f"unhashable dictionary key: {key!r}") from exc
        return result

    def _decode_custom(self, index: int, entry: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        self._decoded[index] = result
        for key, value in entry.items():
            if key in (CLASS_KEY, CLASSES_KEY):
                continue
            if isinstance(value, UID):
                result[key] = self.decode(value)
            elif isinstance(value, list):
                result[key] = [self.decode(item) if isinstance(item, UID) else item for item in value]
            else:
                logger.debug("Adding primitive field directly %s=%r", key, value)
                result[key] = value
        return result


def _field(entry: Mapping[str, Any], key: str, classname: str) -> Any:
    try:
        return entry[key]
    except KeyError:
        raise InvalidArchiveError(f"{classname} entry is missing '{key}'") from None


def _ref_list(entry: Mapping[str, Any], key: str, classname: str) -> list[Any]:
    refs = _field(entry, key, classname)
    if not isinstance(refs, list):
        raise InvalidArchiveError(f"{classname} '{key}' must be an array of UIDs")
    return refs


def _load_archive(data: bytes) -> dict[str, Any]:
    archive = plist_codec.loads(data)
    verify_archive(archive)
    return archive


def unarchive(data: bytes) -> list[Any]:
    """Decode a keyed archive and return its top-level objects in order."""

    archive = _load_archive(data)
    objects = archive[OBJECTS_KEY]
    refs = top_level_refs(archive[TOP_KEY])
    logger.debug("Extracting %d objects from list of %d total objects", len(refs), len(objects))
    decoder = _ObjectTableDecoder(objects)
    return [decoder.decode(ref) for ref in refs]


def summarize(data: bytes) -> ArchiveSummary:
    """Decode a keyed archive and describe its header alongside the objects."""

    archive = _load_archive(data)
    objects = archive[OBJECTS_KEY]
    decoder = _ObjectTableDecoder(objects)
    return ArchiveSummary(
        archiver=archive[ARCHIVER_KEY],
        version=archive[VERSION_KEY],
        top_keys=list(archive[TOP_KEY].keys()),
        object_table_size=len(objects),
        objects=[decoder.decode(ref) for ref in top_level_refs(archive[TOP_KEY])],
    )
