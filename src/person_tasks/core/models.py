# src/person_tasks/core/models.py

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Key:
    kind: str
    id: int


@dataclass(frozen=True, slots=True)
class Entity:
    """
    One stored document.

    Entities are immutable; use with_properties() to derive an updated copy.
    """

    key: Key
    properties: Mapping[str, Any] = field(default_factory=dict)
    exclude_from_indexes: frozenset[str] = frozenset()

    @classmethod
    def new(
        cls,
        key: Key,
        properties: Mapping[str, Any],
        *,
        exclude_from_indexes: Iterable[str] = (),
    ) -> Entity:
        return cls(
            key=key,
            properties=dict(properties),
            exclude_from_indexes=frozenset(exclude_from_indexes),
        )

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def with_properties(self, **updates: Any) -> Entity:
        merged = dict(self.properties)
        merged.update(updates)
        return replace(self, properties=merged)


@dataclass(frozen=True, slots=True)
class Query:
    kind: str
    # Ascending sort on these properties, in order. Empty means store order.
    order_by: tuple[str, ...] = ()


@dataclass(slots=True)
class PersonRecord:
    id: int
    name: str
    done: bool = False
    created: datetime | None = None

    @classmethod
    def from_entity(cls, entity: Entity) -> PersonRecord:
        created = entity.get("created")
        return cls(
            id=entity.key.id,
            name=str(entity.get("name", "")),
            done=bool(entity.get("done", False)),
            created=created if isinstance(created, datetime) else None,
        )
