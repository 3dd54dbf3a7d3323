"""Immutable document model: blocks, entities, selections."""

from .character import EMPTY_CHARACTER, CharacterMetadata
from .content_block import ContentBlock, EntityRange
from .content_state import ContentState
from .entity import NONE, DraftEntity, EntityMap, EntityMutability, EntitySet
from .entity_selection import (
    INAPPLICABLE,
    Candidates,
    EntityKeyResolution,
    EntitySelectionResolver,
    Inapplicable,
    filter_key,
    get_entity_key_for_selection,
)
from .errors import BlockNotFoundError, EntityNotFoundError, NotFoundError
from .selection import (
    CollapsedSelection,
    Selection,
    SelectionPoint,
    SpanSelection,
    cursor,
    select,
    selection_from_offsets,
)

__all__ = [
    "BlockNotFoundError",
    "Candidates",
    "CharacterMetadata",
    "CollapsedSelection",
    "ContentBlock",
    "ContentState",
    "DraftEntity",
    "EMPTY_CHARACTER",
    "EntityKeyResolution",
    "EntityMap",
    "EntityMutability",
    "EntityNotFoundError",
    "EntityRange",
    "EntitySelectionResolver",
    "EntitySet",
    "INAPPLICABLE",
    "Inapplicable",
    "NONE",
    "NotFoundError",
    "Selection",
    "SelectionPoint",
    "SpanSelection",
    "cursor",
    "filter_key",
    "get_entity_key_for_selection",
    "select",
    "selection_from_offsets",
]
