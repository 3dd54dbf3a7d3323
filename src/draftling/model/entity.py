"""Entity records and the immutable entity registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from .errors import EntityNotFoundError

__all__ = [
    "DraftEntity",
    "EntityMap",
    "EntityMutability",
    "EntitySet",
    "NONE",
]

EntitySet = frozenset[str]

NONE: EntitySet = frozenset()


class EntityMutability(Enum):
    """How an entity reacts to edits next to or inside its range."""

    MUTABLE = "MUTABLE"
    IMMUTABLE = "IMMUTABLE"
    SEGMENTED = "SEGMENTED"

    @classmethod
    def coerce(cls, value: Any) -> EntityMutability:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown entity mutability: {value!r}")


@dataclass(slots=True, frozen=True)
class DraftEntity:
    """Annotation attached to a run of characters (a link, a mention, ...)."""

    type: str
    mutability: EntityMutability = EntityMutability.MUTABLE
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "mutability", EntityMutability.coerce(self.mutability))
        object.__setattr__(self, "data", MappingProxyType(dict(self.data or {})))

    def with_data(self, data: Mapping[str, Any]) -> DraftEntity:
        return DraftEntity(type=self.type, mutability=self.mutability, data=data)


class EntityMap:
    """Immutable registry of entities keyed by string identifiers.

    Every "mutating" helper returns a new map; existing maps (and therefore
    existing content snapshots) never change.
    """

    __slots__ = ("_entities", "_next_key")

    def __init__(
        self,
        entities: Mapping[str, DraftEntity] | None = None,
        *,
        next_key: int | None = None,
    ) -> None:
        self._entities: dict[str, DraftEntity] = dict(entities or {})
        if next_key is None:
            next_key = _next_numeric_key(self._entities)
        self._next_key = next_key

    def get(self, key: str) -> DraftEntity:
        """Return the entity registered under ``key``."""

        try:
            return self._entities[key]
        except KeyError:
            raise EntityNotFoundError(key) from None

    def create(
        self,
        type: str,
        mutability: EntityMutability | str = EntityMutability.MUTABLE,
        data: Mapping[str, Any] | None = None,
    ) -> tuple[EntityMap, str]:
        """Register a new entity and return ``(new_map, key)``."""

        return self.add(DraftEntity(type=type, mutability=mutability, data=data or {}))

    def add(self, entity: DraftEntity) -> tuple[EntityMap, str]:
        key = str(self._next_key)
        entities = dict(self._entities)
        entities[key] = entity
        return EntityMap(entities, next_key=self._next_key + 1), key

    def merge_data(self, key: str, data: Mapping[str, Any]) -> EntityMap:
        entity = self.get(key)
        merged = dict(entity.data)
        merged.update(data)
        return self._with_entity(key, entity.with_data(merged))

    def replace_data(self, key: str, data: Mapping[str, Any]) -> EntityMap:
        return self._with_entity(key, self.get(key).with_data(data))

    def keys(self) -> list[str]:
        return list(self._entities)

    def items(self) -> list[tuple[str, DraftEntity]]:
        return list(self._entities.items())

    def _with_entity(self, key: str, entity: DraftEntity) -> EntityMap:
        entities = dict(self._entities)
        entities[key] = entity
        return EntityMap(entities, next_key=self._next_key)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def __iter__(self) -> Iterator[str]:
        return iter(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EntityMap):
            return NotImplemented
        return self._entities == other._entities

    def __repr__(self) -> str:
        return f"EntityMap({self._entities!r})"


def _next_numeric_key(entities: Mapping[str, DraftEntity]) -> int:
    highest = 0
    for key in entities:
        if key.isdigit():
            highest = max(highest, int(key))
    return highest + 1
