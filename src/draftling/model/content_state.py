"""Immutable document snapshot: ordered blocks plus the entity registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping

from .content_block import ContentBlock
from .entity import DraftEntity, EntityMap, EntityMutability
from .errors import BlockNotFoundError
from .keys import resolve_key_factory

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..services.settings import Settings
    from .selection import Selection

__all__ = ["ContentState"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ContentState:
    """A read-only snapshot of a document.

    A new snapshot is produced for every edit; nothing in this class mutates
    ``self``.
    """

    blocks: tuple[ContentBlock, ...] = ()
    entity_map: EntityMap = field(default_factory=EntityMap, hash=False)
    _index: Mapping[str, int] = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        blocks = tuple(self.blocks)
        index: dict[str, int] = {}
        for position, block in enumerate(blocks):
            if block.key in index:
                raise ValueError(f"Duplicate block key {block.key!r}")
            index[block.key] = position
        object.__setattr__(self, "blocks", blocks)
        object.__setattr__(self, "_index", MappingProxyType(index))

    @classmethod
    def create_from_block_list(
        cls,
        blocks: Iterable[ContentBlock],
        entity_map: EntityMap | None = None,
    ) -> ContentState:
        return cls(blocks=tuple(blocks), entity_map=entity_map or EntityMap())

    @classmethod
    def create_from_text(
        cls,
        text: str,
        delimiter: str = "\n",
        *,
        key_factory: Callable[[], str] | None = None,
        settings: Settings | None = None,
    ) -> ContentState:
        """Build a snapshot with one unstyled block per ``delimiter``-separated line."""

        make_key = resolve_key_factory(key_factory, settings)
        lines = text.split(delimiter) if text else [""]
        blocks = tuple(ContentBlock(key=make_key(), text=line) for line in lines)
        LOGGER.debug("Created content state with %d blocks", len(blocks))
        return cls(blocks=blocks)

    # ------------------------------------------------------------------
    # Block access
    # ------------------------------------------------------------------
    def get_block_for_key(self, key: str) -> ContentBlock:
        """Return the block identified by ``key``."""

        return self.blocks[self.block_index(key)]

    def block_index(self, key: str) -> int:
        try:
            return self._index[key]
        except KeyError:
            raise BlockNotFoundError(key) from None

    def has_block(self, key: str) -> bool:
        return key in self._index

    def get_block_map(self) -> dict[str, ContentBlock]:
        return {block.key: block for block in self.blocks}

    def get_blocks_as_list(self) -> list[ContentBlock]:
        return list(self.blocks)

    def get_first_block(self) -> ContentBlock:
        if not self.blocks:
            raise IndexError("Content state has no blocks")
        return self.blocks[0]

    def get_last_block(self) -> ContentBlock:
        if not self.blocks:
            raise IndexError("Content state has no blocks")
        return self.blocks[-1]

    def get_key_before(self, key: str) -> str | None:
        position = self.block_index(key)
        return self.blocks[position - 1].key if position > 0 else None

    def get_key_after(self, key: str) -> str | None:
        position = self.block_index(key)
        return self.blocks[position + 1].key if position + 1 < len(self.blocks) else None

    def get_plain_text(self, delimiter: str = "\n") -> str:
        return delimiter.join(block.text for block in self.blocks)

    def has_text(self) -> bool:
        return any(block.text for block in self.blocks)

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------
    def get_entity_map(self) -> EntityMap:
        return self.entity_map

    def get_entity(self, key: str) -> DraftEntity:
        return self.entity_map.get(key)

    def create_entity(
        self,
        type: str,
        mutability: EntityMutability | str = EntityMutability.MUTABLE,
        data: Mapping[str, Any] | None = None,
    ) -> tuple[ContentState, str]:
        """Register a new entity and return ``(new_content, key)``."""

        entity_map, key = self.entity_map.create(type, mutability, data)
        return self._with(entity_map=entity_map), key

    def merge_entity_data(self, key: str, data: Mapping[str, Any]) -> ContentState:
        return self._with(entity_map=self.entity_map.merge_data(key, data))

    def replace_entity_data(self, key: str, data: Mapping[str, Any]) -> ContentState:
        return self._with(entity_map=self.entity_map.replace_data(key, data))

    def apply_entity(self, selection: Selection, key: str | None) -> ContentState:
        """Apply ``key`` (or clear entities for ``None``) across ``selection``."""

        if key is not None:
            self.entity_map.get(key)
        start_index = self.block_index(selection.start_key)
        end_index = self.block_index(selection.end_key)
        blocks = list(self.blocks)
        for position in range(start_index, end_index + 1):
            block = blocks[position]
            start = selection.start_offset if position == start_index else 0
            end = selection.end_offset if position == end_index else block.get_length()
            blocks[position] = block.apply_entity(start, end, key)
        return self._with(blocks=tuple(blocks))

    def _with(
        self,
        *,
        blocks: tuple[ContentBlock, ...] | None = None,
        entity_map: EntityMap | None = None,
    ) -> ContentState:
        return ContentState(
            blocks=self.blocks if blocks is None else blocks,
            entity_map=self.entity_map if entity_map is None else entity_map,
        )
