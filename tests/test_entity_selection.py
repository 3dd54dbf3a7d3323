"""Tests for resolving the entity inherited by inserted text."""

from __future__ import annotations

import logging

import pytest

from draftling.model import (
    INAPPLICABLE,
    NONE,
    BlockNotFoundError,
    Candidates,
    CharacterMetadata,
    ContentBlock,
    ContentState,
    DraftEntity,
    EntityMap,
    EntityNotFoundError,
    EntitySelectionResolver,
    SelectionPoint,
    SpanSelection,
    cursor,
    filter_key,
    get_entity_key_for_selection,
)

from tests.helpers import make_content, span


def _content_with(mutability: str) -> tuple[ContentState, str]:
    content = make_content("hello", "world")
    content, key = content.create_entity("MENTION", mutability)
    content = content.apply_entity(span("b1", 1, 4), key)
    content = content.apply_entity(span("b2", 0, 2), key)
    return content, key


def test_cursor_at_block_start_is_inapplicable(hello_content) -> None:
    content, _ = hello_content

    assert get_entity_key_for_selection(content, cursor("b1", 0)) is INAPPLICABLE


def test_cursor_after_mutable_entity_extends_it(hello_content) -> None:
    content, link = hello_content

    result = get_entity_key_for_selection(content, cursor("b1", 3))

    assert result == Candidates(frozenset({link}))
    assert link in result


def test_cursor_after_plain_character_returns_empty_candidates(hello_content) -> None:
    content, _ = hello_content

    result = get_entity_key_for_selection(content, cursor("b1", 2))

    assert isinstance(result, Candidates)
    assert result.keys == NONE
    assert result is not INAPPLICABLE


def test_cursor_at_block_end_inspects_last_character() -> None:
    content, key = _content_with("MUTABLE")
    content = content.apply_entity(span("b1", 4, 5), key)

    assert get_entity_key_for_selection(content, cursor("b1", 5)) == Candidates(frozenset({key}))


@pytest.mark.parametrize("mutability", ["IMMUTABLE", "SEGMENTED"])
def test_cursor_after_non_mutable_entity_returns_empty(mutability: str) -> None:
    content, _ = _content_with(mutability)

    result = get_entity_key_for_selection(content, cursor("b1", 2))

    assert result == Candidates(NONE)


def test_reclassified_entity_stops_extending(hello_content) -> None:
    content, link = hello_content
    entity = content.get_entity(link)
    immutable_map = EntityMap({link: DraftEntity(entity.type, "IMMUTABLE", entity.data)})
    reclassified = ContentState(blocks=content.blocks, entity_map=immutable_map)

    assert get_entity_key_for_selection(content, cursor("b1", 3)) == Candidates(frozenset({link}))
    assert get_entity_key_for_selection(reclassified, cursor("b1", 3)) == Candidates(NONE)


def test_span_starting_on_mutable_entity_uses_start_character() -> None:
    content, key = _content_with("MUTABLE")

    assert get_entity_key_for_selection(content, span("b1", 1, 3)) == Candidates(frozenset({key}))
    assert get_entity_key_for_selection(content, span("b1", 0, 3)) == Candidates(NONE)


@pytest.mark.parametrize("mutability", ["IMMUTABLE", "SEGMENTED"])
def test_span_starting_on_non_mutable_entity_returns_empty(mutability: str) -> None:
    content, _ = _content_with(mutability)

    assert get_entity_key_for_selection(content, span("b1", 1, 3)) == Candidates(NONE)


def test_span_starting_at_block_end_returns_empty() -> None:
    content, _ = _content_with("MUTABLE")
    selection = SpanSelection(SelectionPoint("b1", 5), SelectionPoint("b2", 1))

    result = get_entity_key_for_selection(content, selection)

    assert result == Candidates(NONE)


def test_backward_span_uses_document_order_start() -> None:
    content, key = _content_with("MUTABLE")
    selection = SpanSelection(SelectionPoint("b1", 2), SelectionPoint("b2", 1), is_backward=True)

    assert selection.anchor_key == "b2"
    assert get_entity_key_for_selection(content, selection) == Candidates(frozenset({key}))


def test_cursor_in_second_block_reads_that_block() -> None:
    content, key = _content_with("MUTABLE")

    assert get_entity_key_for_selection(content, cursor("b2", 2)) == Candidates(frozenset({key}))
    assert get_entity_key_for_selection(content, cursor("b2", 3)) == Candidates(NONE)


def test_unknown_block_key_propagates(hello_content) -> None:
    content, _ = hello_content

    with pytest.raises(BlockNotFoundError, match="missing"):
        get_entity_key_for_selection(content, cursor("missing", 1))
    with pytest.raises(BlockNotFoundError):
        get_entity_key_for_selection(content, span("missing", 0, 1))


def test_collapsed_at_offset_zero_does_not_look_up_block(hello_content) -> None:
    content, _ = hello_content

    assert get_entity_key_for_selection(content, cursor("missing", 0)) is INAPPLICABLE


def test_resolution_is_repeatable_and_leaves_inputs_untouched(hello_content) -> None:
    content, link = hello_content
    selection = cursor("b1", 3)
    blocks_before = content.blocks

    first = get_entity_key_for_selection(content, selection)
    second = get_entity_key_for_selection(content, selection)

    assert first == second
    assert content.blocks is blocks_before
    assert selection == cursor("b1", 3)


def test_filter_key_returns_sentinel_for_empty_input() -> None:
    registry = EntityMap()

    assert filter_key(registry, NONE) is NONE
    assert filter_key(registry, None) is NONE
    assert filter_key(registry, frozenset()) is NONE


def test_filter_key_keeps_only_mutable_entities() -> None:
    registry, mutable = EntityMap().create("LINK", "MUTABLE")
    registry, immutable = registry.create("TOKEN", "IMMUTABLE")
    registry, segmented = registry.create("MENTION", "SEGMENTED")

    result = filter_key(registry, frozenset({mutable, immutable, segmented}))

    assert result == frozenset({mutable})


def test_filter_key_raises_for_unregistered_key() -> None:
    with pytest.raises(EntityNotFoundError):
        filter_key(EntityMap(), frozenset({"42"}))


def test_overlapping_entities_are_filtered_together() -> None:
    content = make_content("ab")
    content, first = content.create_entity("LINK", "MUTABLE")
    content, second = content.create_entity("COMMENT", "MUTABLE")
    content, third = content.create_entity("TOKEN", "IMMUTABLE")
    block = content.get_block_for_key("b1")
    character = block.characters[0]
    overlapped = CharacterMetadata(style=character.style, entities=frozenset({first, second, third}))
    block = ContentBlock(key="b1", text="ab", characters=(overlapped, block.characters[1]))
    content = ContentState(blocks=(block,), entity_map=content.entity_map)

    result = get_entity_key_for_selection(content, cursor("b1", 1))

    assert result == Candidates(frozenset({first, second}))
    assert len(result) == 2


def test_resolver_matches_function_and_logs(hello_content, caplog: pytest.LogCaptureFixture) -> None:
    content, link = hello_content
    resolver = EntitySelectionResolver()
    caplog.set_level(logging.DEBUG, logger="draftling.model.entity_selection")

    assert resolver.resolve(content, cursor("b1", 3)) == Candidates(frozenset({link}))
    assert resolver.resolve(content, cursor("b1", 0)) is INAPPLICABLE
    messages = [record.getMessage() for record in caplog.records]
    assert any("collapsed selection at b1:3" in message for message in messages)
    assert any("inapplicable" in message for message in messages)
