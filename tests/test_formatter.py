# tests/test_formatter.py

from __future__ import annotations

from person_tasks.core.models import Entity, Key
from person_tasks.store.formatter import format_records


def test_one_line_per_record_in_input_order() -> None:
    entities = [
        Entity.new(Key("Person", 9), {"name": "zed"}),
        Entity.new(Key("Person", 3), {"name": "amy", "done": True}),
    ]

    assert format_records(entities) == ["9 : zed ", "3 : amy "]


def test_empty_input() -> None:
    assert format_records([]) == []
    assert format_records(iter(())) == []
