"""Per-character metadata: inline styles and entity annotations."""

from __future__ import annotations

from dataclasses import dataclass, field

from .entity import NONE, EntitySet

__all__ = ["CharacterMetadata", "EMPTY_CHARACTER"]


@dataclass(slots=True, frozen=True)
class CharacterMetadata:
    """Styles and entity keys carried by a single character."""

    style: frozenset[str] = field(default_factory=frozenset)
    entities: EntitySet = NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "style", frozenset(self.style))
        object.__setattr__(self, "entities", frozenset(self.entities))

    def with_entity(self, key: str | None) -> CharacterMetadata:
        """Return a copy annotated with exactly ``key`` (or nothing for ``None``)."""

        entities = NONE if key is None else frozenset((key,))
        return CharacterMetadata(style=self.style, entities=entities)

    def with_style(self, name: str) -> CharacterMetadata:
        return CharacterMetadata(style=self.style | {name}, entities=self.entities)

    def without_style(self, name: str) -> CharacterMetadata:
        return CharacterMetadata(style=self.style - {name}, entities=self.entities)

    def has_style(self, name: str) -> bool:
        return name in self.style


EMPTY_CHARACTER = CharacterMetadata()
