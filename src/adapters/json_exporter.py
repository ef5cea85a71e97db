"""JSON rendering of unarchived objects.

Bytes become base64 strings and datetimes ISO-8601, so a decoded fixture can
be compared against the JSON expectations of other archiver implementations.
"""

from __future__ import annotations

import base64
import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any


def to_jsonable(value: Any, _seen: set[int] | None = None) -> Any:
    """Convert unarchived values into JSON-compatible ones.

    Cyclic references are rejected with `ValueError`.
    """

    seen = _seen if _seen is not None else set()
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (list, tuple, dict)):
        if id(value) in seen:
            raise ValueError("cannot render a cyclic object graph as JSON")
        seen = seen | {id(value)}
        if isinstance(value, dict):
            return {str(key): to_jsonable(item, seen) for key, item in value.items()}
        return [to_jsonable(item, seen) for item in value]
    return value


def render_objects_json(objects: list[Any], *, indent: int | None = 2) -> str:
    return json.dumps(to_jsonable(objects), ensure_ascii=False, indent=indent or None)


def export_objects_json(*, objects: list[Any], output_path: Path, indent: int = 2) -> Path:
    """Write unarchived objects as UTF-8 JSON."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_objects_json(objects, indent=indent) + "\n", encoding="utf-8")
    return output_path
