"""Shared test helpers for building small documents."""

from __future__ import annotations

from draftling.model import ContentBlock, ContentState, SelectionPoint, SpanSelection


def make_content(*texts: str) -> ContentState:
    """Build content with blocks keyed ``b1``, ``b2``, ... for each text."""

    blocks = [ContentBlock(key=f"b{index}", text=text) for index, text in enumerate(texts, start=1)]
    return ContentState.create_from_block_list(blocks)


def span(block_key: str, start: int, end: int) -> SpanSelection:
    """Return a forward selection inside a single block."""

    return SpanSelection(SelectionPoint(block_key, start), SelectionPoint(block_key, end))
