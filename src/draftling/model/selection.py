"""Selection ranges over a block-structured document.

A selection is either collapsed (a caret at one position) or a span between two
positions. The two shapes are separate classes so code that handles a
selection has to decide explicitly which one it is looking at.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .content_state import ContentState

__all__ = [
    "CollapsedSelection",
    "Selection",
    "SelectionPoint",
    "SpanSelection",
    "cursor",
    "select",
    "selection_from_offsets",
]


@dataclass(slots=True, frozen=True)
class SelectionPoint:
    """A position inside a document: a block key plus a character offset."""

    block_key: str
    offset: int

    def __post_init__(self) -> None:
        try:
            offset = operator.index(self.offset)
        except TypeError as exc:
            raise ValueError(f"SelectionPoint offset must be an integer, got {self.offset!r}") from exc
        if isinstance(self.offset, bool):
            raise ValueError("SelectionPoint offset must be an integer, got a bool")
        if offset < 0:
            raise ValueError(f"SelectionPoint offset must be >= 0, got {offset}")
        object.__setattr__(self, "offset", offset)

    def as_tuple(self) -> tuple[str, int]:
        return (self.block_key, self.offset)


@dataclass(slots=True, frozen=True)
class CollapsedSelection:
    """A zero-width selection (a caret)."""

    point: SelectionPoint
    has_focus: bool = False

    @property
    def is_collapsed(self) -> bool:
        return True

    @property
    def anchor(self) -> SelectionPoint:
        return self.point

    @property
    def focus(self) -> SelectionPoint:
        return self.point

    @property
    def start(self) -> SelectionPoint:
        return self.point

    @property
    def end(self) -> SelectionPoint:
        return self.point

    @property
    def anchor_key(self) -> str:
        return self.point.block_key

    @property
    def anchor_offset(self) -> int:
        return self.point.offset

    @property
    def focus_key(self) -> str:
        return self.point.block_key

    @property
    def focus_offset(self) -> int:
        return self.point.offset

    @property
    def start_key(self) -> str:
        return self.point.block_key

    @property
    def start_offset(self) -> int:
        return self.point.offset

    @property
    def end_key(self) -> str:
        return self.point.block_key

    @property
    def end_offset(self) -> int:
        return self.point.offset


@dataclass(slots=True, frozen=True)
class SpanSelection:
    """A non-empty selection between ``start`` and ``end`` in document order.

    ``is_backward`` records that the user dragged from ``end`` towards
    ``start``; it only affects the anchor/focus accessors.
    """

    start: SelectionPoint
    end: SelectionPoint
    is_backward: bool = False
    has_focus: bool = False

    def __post_init__(self) -> None:
        if self.start == self.end:
            raise ValueError("SpanSelection requires distinct start and end; use CollapsedSelection")
        if self.start.block_key == self.end.block_key and self.end.offset < self.start.offset:
            raise ValueError("SpanSelection end precedes start within the same block")

    @property
    def is_collapsed(self) -> bool:
        return False

    @property
    def anchor(self) -> SelectionPoint:
        return self.end if self.is_backward else self.start

    @property
    def focus(self) -> SelectionPoint:
        return self.start if self.is_backward else self.end

    @property
    def anchor_key(self) -> str:
        return self.anchor.block_key

    @property
    def anchor_offset(self) -> int:
        return self.anchor.offset

    @property
    def focus_key(self) -> str:
        return self.focus.block_key

    @property
    def focus_offset(self) -> int:
        return self.focus.offset

    @property
    def start_key(self) -> str:
        return self.start.block_key

    @property
    def start_offset(self) -> int:
        return self.start.offset

    @property
    def end_key(self) -> str:
        return self.end.block_key

    @property
    def end_offset(self) -> int:
        return self.end.offset


Selection = Union[CollapsedSelection, SpanSelection]


def cursor(block_key: str, offset: int, *, has_focus: bool = False) -> CollapsedSelection:
    """Return a caret at ``offset`` inside ``block_key``."""

    return CollapsedSelection(SelectionPoint(block_key, offset), has_focus=has_focus)


def select(
    content: ContentState,
    anchor: SelectionPoint,
    focus: SelectionPoint,
    *,
    has_focus: bool = False,
) -> Selection:
    """Build the selection a user makes by dragging from ``anchor`` to ``focus``."""

    if anchor == focus:
        return CollapsedSelection(anchor, has_focus=has_focus)
    anchor_rank = (content.block_index(anchor.block_key), anchor.offset)
    focus_rank = (content.block_index(focus.block_key), focus.offset)
    if focus_rank < anchor_rank:
        return SpanSelection(start=focus, end=anchor, is_backward=True, has_focus=has_focus)
    return SpanSelection(start=anchor, end=focus, has_focus=has_focus)


def selection_from_offsets(
    content: ContentState,
    anchor: tuple[str, int],
    focus: tuple[str, int] | None = None,
) -> Selection:
    """Convenience wrapper around :func:`select` taking ``(block_key, offset)`` pairs."""

    anchor_point = SelectionPoint(*anchor)
    if focus is None:
        content.block_index(anchor_point.block_key)
        return CollapsedSelection(anchor_point)
    return select(content, anchor_point, SelectionPoint(*focus))
