# src/person_tasks/store/formatter.py

from __future__ import annotations

from collections.abc import Iterable

from ..core.models import Entity


def format_record(entity: Entity) -> str:
    return f"{entity.key.id} : {entity.get('name')} "


def format_records(entities: Iterable[Entity]) -> list[str]:
    """One "<id> : <name> " line per entity, in input order."""
    return [format_record(e) for e in entities]
