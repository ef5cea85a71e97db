import json
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

from adapters.json_exporter import export_objects_json, render_objects_json, to_jsonable


def test_bytes_dates_and_uuids_are_rendered_as_strings():
    value = [b"asdfasdfadsfadsf", datetime(2001, 1, 1, tzinfo=timezone.utc), uuid.UUID(int=1), {1: True}]
    assert to_jsonable(value) == [
        "YXNkZmFzZGZhZHNmYWRzZg==",
        "2001-01-01T00:00:00+00:00",
        "00000000-0000-0000-0000-000000000001",
        {"1": True},
    ]


def test_shared_but_acyclic_values_are_allowed():
    shared = [1]
    assert json.loads(render_objects_json([shared, shared], indent=0)) == [[1], [1]]


def test_cycles_are_rejected():
    cyclic: list = []
    cyclic.append(cyclic)
    with pytest.raises(ValueError):
        to_jsonable(cyclic)


def test_export_writes_utf8_file(tmp_path: Path):
    out = export_objects_json(objects=["ñ", 1], output_path=tmp_path / "out" / "objects.json")
    assert json.loads(out.read_text(encoding="utf-8")) == ["ñ", 1]
