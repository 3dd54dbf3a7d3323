"""Resolve which entity newly typed text should inherit.

When text is inserted at a selection, the inserted characters continue the
entity of their neighbour only if that entity is ``MUTABLE``. ``IMMUTABLE`` and
``SEGMENTED`` entities never grow through insertion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol, Union

from .entity import NONE, EntityMutability, EntitySet
from .selection import CollapsedSelection, Selection

__all__ = [
    "BlockView",
    "Candidates",
    "DocumentSnapshot",
    "EntityKeyResolution",
    "EntityRecord",
    "EntityRegistry",
    "EntitySelectionResolver",
    "INAPPLICABLE",
    "Inapplicable",
    "filter_key",
    "get_entity_key_for_selection",
]

LOGGER = logging.getLogger(__name__)


class EntityRecord(Protocol):
    @property
    def mutability(self) -> EntityMutability:
        ...


class EntityRegistry(Protocol):
    def get(self, key: str) -> EntityRecord:
        ...


class BlockView(Protocol):
    def get_length(self) -> int:
        ...

    def get_entity_at(self, offset: int) -> EntitySet:
        ...


class DocumentSnapshot(Protocol):
    """Read-only document view consumed by the resolver."""

    def get_block_for_key(self, key: str) -> BlockView:
        ...

    def get_entity_map(self) -> EntityRegistry:
        ...


@dataclass(slots=True, frozen=True)
class Inapplicable:
    """No position to inspect: the caret sits at the start of its block."""


@dataclass(slots=True, frozen=True)
class Candidates:
    """A position was inspected; ``keys`` are the eligible entities (maybe none)."""

    keys: EntitySet = NONE

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def __contains__(self, key: object) -> bool:
        return key in self.keys


INAPPLICABLE = Inapplicable()

EntityKeyResolution = Union[Inapplicable, Candidates]


def get_entity_key_for_selection(
    content: DocumentSnapshot,
    selection: Selection,
) -> EntityKeyResolution:
    """Return the entity keys text inserted at ``selection`` should carry."""

    if isinstance(selection, CollapsedSelection):
        offset = selection.anchor_offset
        if offset == 0:
            return INAPPLICABLE
        block = content.get_block_for_key(selection.anchor_key)
        entity_keys = block.get_entity_at(offset - 1)
        return Candidates(filter_key(content.get_entity_map(), entity_keys))

    start_offset = selection.start_offset
    start_block = content.get_block_for_key(selection.start_key)
    if start_offset == start_block.get_length():
        entity_keys = NONE
    else:
        entity_keys = start_block.get_entity_at(start_offset)
    return Candidates(filter_key(content.get_entity_map(), entity_keys))


def filter_key(entity_map: EntityRegistry, entity_keys: Iterable[str] | None) -> EntitySet:
    """Keep only the keys whose entity is ``MUTABLE``."""

    if not entity_keys:
        return NONE
    return frozenset(
        key for key in entity_keys if entity_map.get(key).mutability is EntityMutability.MUTABLE
    )


class EntitySelectionResolver:
    """Stateless facade used by the editing pipeline."""

    __slots__ = ()

    def resolve(self, snapshot: DocumentSnapshot, selection: Selection) -> EntityKeyResolution:
        result = get_entity_key_for_selection(snapshot, selection)
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "Entity keys for %s selection at %s:%s -> %s",
                "collapsed" if selection.is_collapsed else "span",
                selection.start_key,
                selection.start_offset,
                "inapplicable" if isinstance(result, Inapplicable) else sorted(result.keys),
            )
        return result
