"""Tests for collapsed and span selections."""

from __future__ import annotations

import pytest

from draftling.model import (
    BlockNotFoundError,
    CollapsedSelection,
    SelectionPoint,
    SpanSelection,
    cursor,
    select,
    selection_from_offsets,
)
from tests.helpers import make_content


def test_cursor_accessors_all_point_at_the_caret() -> None:
    caret = cursor("b1", 4, has_focus=True)

    assert caret.is_collapsed
    assert caret.has_focus
    assert (caret.anchor_key, caret.anchor_offset) == ("b1", 4)
    assert (caret.focus_key, caret.focus_offset) == ("b1", 4)
    assert (caret.start_key, caret.start_offset) == ("b1", 4)
    assert (caret.end_key, caret.end_offset) == ("b1", 4)


def test_negative_offsets_are_rejected() -> None:
    with pytest.raises(ValueError, match=">= 0"):
        SelectionPoint("b1", -1)


def test_non_integer_offsets_are_rejected() -> None:
    with pytest.raises(ValueError, match="integer"):
        SelectionPoint("b1", "two")  # type: ignore[arg-type]


def test_span_requires_distinct_points() -> None:
    point = SelectionPoint("b1", 1)

    with pytest.raises(ValueError, match="distinct"):
        SpanSelection(point, point)


def test_span_rejects_reversed_offsets_in_one_block() -> None:
    with pytest.raises(ValueError, match="precedes"):
        SpanSelection(SelectionPoint("b1", 3), SelectionPoint("b1", 1))


def test_forward_span_anchor_is_start() -> None:
    selection = SpanSelection(SelectionPoint("b1", 1), SelectionPoint("b2", 0))

    assert not selection.is_collapsed
    assert selection.anchor == SelectionPoint("b1", 1)
    assert selection.focus == SelectionPoint("b2", 0)


def test_select_orders_points_by_document_position() -> None:
    content = make_content("abc", "def")

    backward = select(content, SelectionPoint("b2", 1), SelectionPoint("b1", 2))

    assert isinstance(backward, SpanSelection)
    assert backward.is_backward
    assert (backward.start_key, backward.start_offset) == ("b1", 2)
    assert (backward.end_key, backward.end_offset) == ("b2", 1)
    assert (backward.anchor_key, backward.anchor_offset) == ("b2", 1)
    assert (backward.focus_key, backward.focus_offset) == ("b1", 2)


def test_select_same_block_backward() -> None:
    content = make_content("abcdef")

    selection = select(content, SelectionPoint("b1", 5), SelectionPoint("b1", 2))

    assert selection.is_backward
    assert selection.start_offset == 2


def test_select_equal_points_collapses() -> None:
    content = make_content("abc")
    point = SelectionPoint("b1", 2)

    assert select(content, point, point) == CollapsedSelection(point)


def test_select_unknown_block_raises() -> None:
    content = make_content("abc")

    with pytest.raises(BlockNotFoundError):
        select(content, SelectionPoint("b1", 0), SelectionPoint("nope", 1))


def test_selection_from_offsets() -> None:
    content = make_content("abc", "def")

    assert selection_from_offsets(content, ("b2", 1)) == cursor("b2", 1)
    forward = selection_from_offsets(content, ("b1", 1), ("b2", 2))
    assert isinstance(forward, SpanSelection) and not forward.is_backward
    with pytest.raises(BlockNotFoundError):
        selection_from_offsets(content, ("zz", 0))


@pytest.mark.parametrize("offset", [3.7, 2.0, True])
def test_non_integral_offsets_are_rejected(offset) -> None:
    with pytest.raises(ValueError, match="must be an integer"):
        SelectionPoint("b1", offset)
