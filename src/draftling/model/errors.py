"""Exceptions raised by the document model."""

from __future__ import annotations

__all__ = ["NotFoundError", "BlockNotFoundError", "EntityNotFoundError"]


class NotFoundError(KeyError):
    """Raised when a key is not present in a document snapshot.

    These are precondition violations: callers are expected to only pass keys
    taken from the same snapshot they query.
    """

    kind = "key"

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        self.message = message or f"Unknown {self.kind} {key!r}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class BlockNotFoundError(NotFoundError):
    """Raised when a block key does not exist in the content state."""

    kind = "block key"


class EntityNotFoundError(NotFoundError):
    """Raised when an entity key does not exist in the entity map."""

    kind = "entity key"
