"""Immutable text blocks with per-character metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, NamedTuple

from .character import EMPTY_CHARACTER, CharacterMetadata
from .entity import EntitySet

__all__ = ["ContentBlock", "EntityRange"]


class EntityRange(NamedTuple):
    """A ``[start, end)`` run of characters annotated with ``key``."""

    key: str
    start: int
    end: int


@dataclass(slots=True, frozen=True)
class ContentBlock:
    """A unit of text (a paragraph, a list item, ...) inside a document."""

    key: str
    text: str = ""
    type: str = "unstyled"
    characters: tuple[CharacterMetadata, ...] = ()
    depth: int = 0
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("ContentBlock key must be a non-empty string")
        characters = tuple(self.characters)
        if not characters and self.text:
            characters = (EMPTY_CHARACTER,) * len(self.text)
        if len(characters) != len(self.text):
            raise ValueError(
                f"Block {self.key!r} has {len(self.text)} characters but "
                f"{len(characters)} metadata entries"
            )
        object.__setattr__(self, "characters", characters)
        object.__setattr__(self, "data", MappingProxyType(dict(self.data or {})))

    def get_length(self) -> int:
        return len(self.text)

    def get_entity_at(self, offset: int) -> EntitySet:
        """Return the entity keys attached to the character at ``offset``."""

        return self._character_at(offset).entities

    def get_inline_style_at(self, offset: int) -> frozenset[str]:
        return self._character_at(offset).style

    def find_entity_ranges(
        self,
        predicate: Callable[[CharacterMetadata], bool] | None = None,
    ) -> list[tuple[int, int]]:
        """Return maximal runs of characters sharing the same non-empty entity set."""

        ranges: list[tuple[int, int]] = []
        run_start: int | None = None
        current: EntitySet | None = None
        for index, character in enumerate(self.characters):
            entities = character.entities
            accepted = bool(entities) and (predicate is None or predicate(character))
            if run_start is not None and (not accepted or entities != current):
                ranges.append((run_start, index))
                run_start = None
            if accepted and run_start is None:
                run_start = index
                current = entities
        if run_start is not None:
            ranges.append((run_start, len(self.characters)))
        return ranges

    def entity_ranges(self) -> list[EntityRange]:
        """Return one run per entity key, ordered by start offset."""

        ranges: list[EntityRange] = []
        open_runs: dict[str, int] = {}
        for index, character in enumerate(self.characters):
            for key in list(open_runs):
                if key not in character.entities:
                    ranges.append(EntityRange(key, open_runs.pop(key), index))
            for key in sorted(character.entities):
                open_runs.setdefault(key, index)
        length = len(self.characters)
        ranges.extend(EntityRange(key, start, length) for key, start in open_runs.items())
        ranges.sort(key=lambda item: (item.start, item.end, item.key))
        return ranges

    def apply_entity(self, start: int, end: int, key: str | None) -> ContentBlock:
        """Return a copy with ``key`` applied to ``[start, end)``."""

        start, end = self._clamp(start, end)
        characters = list(self.characters)
        for index in range(start, end):
            characters[index] = characters[index].with_entity(key)
        return self._replace_characters(characters)

    def apply_style(self, start: int, end: int, name: str) -> ContentBlock:
        start, end = self._clamp(start, end)
        characters = list(self.characters)
        for index in range(start, end):
            characters[index] = characters[index].with_style(name)
        return self._replace_characters(characters)

    def _character_at(self, offset: int) -> CharacterMetadata:
        if not 0 <= offset < len(self.characters):
            raise IndexError(
                f"Offset {offset} is outside block {self.key!r} of length {len(self.characters)}"
            )
        return self.characters[offset]

    def _clamp(self, start: int, end: int) -> tuple[int, int]:
        length = len(self.text)
        start = max(0, min(int(start), length))
        end = max(0, min(int(end), length))
        if end < start:
            start, end = end, start
        return start, end

    def _replace_characters(self, characters: list[CharacterMetadata]) -> ContentBlock:
        return ContentBlock(
            key=self.key,
            text=self.text,
            type=self.type,
            characters=tuple(characters),
            depth=self.depth,
            data=self.data,
        )
