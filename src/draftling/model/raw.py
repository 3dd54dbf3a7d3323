"""Conversion between :class:`ContentState` and its JSON-compatible raw form."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

from .character import CharacterMetadata
from .content_block import ContentBlock
from .content_state import ContentState
from .entity import DraftEntity, EntityMap
from .keys import resolve_key_factory

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..services.settings import Settings

__all__ = ["RawContentError", "convert_from_raw", "convert_to_raw", "dumps", "loads"]

LOGGER = logging.getLogger(__name__)


class RawContentError(ValueError):
    """Raised when a raw payload cannot be converted into content."""

    def __init__(self, message: str, *, path: str = "", value: Any = None) -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.value = value

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "value": self.value}


def convert_from_raw(
    raw: Mapping[str, Any],
    *,
    key_factory: Callable[[], str] | None = None,
    settings: Settings | None = None,
) -> ContentState:
    """Build a content state from a raw ``{"blocks", "entityMap"}`` payload.

    Blocks without a key get one from ``key_factory``, or from ``settings``
    (honouring ``block_key_length``) when no factory is given.
    """

    if not isinstance(raw, Mapping):
        raise RawContentError("Raw content must be a mapping", value=raw)
    raw_blocks = raw.get("blocks")
    if not isinstance(raw_blocks, list):
        raise RawContentError("'blocks' must be a list", path="blocks", value=raw_blocks)

    entity_map, key_map = _decode_entity_map(raw.get("entityMap") or {})
    make_key = resolve_key_factory(key_factory, settings)
    blocks = [
        _decode_block(raw_block, f"blocks[{index}]", key_map, make_key)
        for index, raw_block in enumerate(raw_blocks)
    ]
    try:
        content = ContentState.create_from_block_list(blocks, entity_map)
    except ValueError as exc:
        raise RawContentError(str(exc), path="blocks") from exc
    LOGGER.debug(
        "Converted raw content with %d blocks and %d entities", len(blocks), len(entity_map)
    )
    return content


def convert_to_raw(content: ContentState) -> dict[str, Any]:
    """Return the raw form of ``content``; entity keys are renumbered from 0."""

    raw_keys: dict[str, str] = {}
    raw_blocks: list[dict[str, Any]] = []
    for block in content.blocks:
        entity_ranges = []
        for entity_range in block.entity_ranges():
            raw_key = raw_keys.setdefault(entity_range.key, str(len(raw_keys)))
            entity_ranges.append(
                {
                    "offset": entity_range.start,
                    "length": entity_range.end - entity_range.start,
                    "key": int(raw_key),
                }
            )
        raw_blocks.append(
            {
                "key": block.key,
                "text": block.text,
                "type": block.type,
                "depth": block.depth,
                "inlineStyleRanges": _encode_style_ranges(block),
                "entityRanges": entity_ranges,
                "data": dict(block.data),
            }
        )
    entity_map: dict[str, Any] = {}
    for key, raw_key in raw_keys.items():
        entity = content.get_entity(key)
        entity_map[raw_key] = {
            "type": entity.type,
            "mutability": entity.mutability.value,
            "data": dict(entity.data),
        }
    return {"blocks": raw_blocks, "entityMap": entity_map}


def loads(text: str) -> ContentState:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RawContentError(f"Invalid JSON: {exc.msg}", value=text) from exc
    return convert_from_raw(payload)


def dumps(content: ContentState, *, indent: int | None = None) -> str:
    return json.dumps(convert_to_raw(content), indent=indent, ensure_ascii=False)


def _decode_entity_map(raw_entities: Any) -> tuple[EntityMap, dict[str, str]]:
    if not isinstance(raw_entities, Mapping):
        raise RawContentError("'entityMap' must be a mapping", path="entityMap", value=raw_entities)
    entity_map = EntityMap()
    key_map: dict[str, str] = {}
    for raw_key, raw_entity in raw_entities.items():
        path = f"entityMap[{raw_key!r}]"
        if not isinstance(raw_entity, Mapping) or "type" not in raw_entity:
            raise RawContentError("Entity must be a mapping with a 'type'", path=path, value=raw_entity)
        data = raw_entity.get("data") or {}
        if not isinstance(data, Mapping):
            raise RawContentError("Entity data must be a mapping", path=f"{path}.data", value=data)
        try:
            entity = DraftEntity(
                type=str(raw_entity["type"]),
                mutability=raw_entity.get("mutability", "MUTABLE"),
                data=data,
            )
        except ValueError as exc:
            raise RawContentError(str(exc), path=f"{path}.mutability") from exc
        entity_map, key = entity_map.add(entity)
        key_map[str(raw_key)] = key
    return entity_map, key_map


def _decode_block(
    raw_block: Any,
    path: str,
    key_map: Mapping[str, str],
    make_key: Callable[[], str],
) -> ContentBlock:
    if not isinstance(raw_block, Mapping):
        raise RawContentError("Block must be a mapping", path=path, value=raw_block)
    text = raw_block.get("text") or ""
    if not isinstance(text, str):
        raise RawContentError("Block text must be a string", path=f"{path}.text", value=text)

    characters = [CharacterMetadata() for _ in text]
    for index, style_range in enumerate(raw_block.get("inlineStyleRanges") or ()):
        range_path = f"{path}.inlineStyleRanges[{index}]"
        start, end = _decode_range(style_range, len(text), range_path)
        style = style_range.get("style")
        if not isinstance(style, str) or not style:
            raise RawContentError("Style range needs a 'style' name", path=range_path, value=style_range)
        for position in range(start, end):
            characters[position] = characters[position].with_style(style)

    for index, entity_range in enumerate(raw_block.get("entityRanges") or ()):
        range_path = f"{path}.entityRanges[{index}]"
        start, end = _decode_range(entity_range, len(text), range_path)
        raw_key = str(entity_range.get("key"))
        if raw_key not in key_map:
            raise RawContentError(
                f"Entity range references unknown entity {raw_key!r}",
                path=range_path,
                value=entity_range,
            )
        for position in range(start, end):
            character = characters[position]
            characters[position] = CharacterMetadata(
                style=character.style,
                entities=character.entities | {key_map[raw_key]},
            )

    data = raw_block.get("data") or {}
    if not isinstance(data, Mapping):
        raise RawContentError("Block data must be a mapping", path=f"{path}.data", value=data)
    key = raw_block.get("key") or make_key()
    if not isinstance(key, str):
        raise RawContentError("Block key must be a string", path=f"{path}.key", value=key)
    return ContentBlock(
        key=key,
        text=text,
        type=str(raw_block.get("type") or "unstyled"),
        characters=tuple(characters),
        depth=_decode_depth(raw_block.get("depth"), path),
        data=data,
    )


def _decode_depth(raw_depth: Any, path: str) -> int:
    if raw_depth is None:
        return 0
    if isinstance(raw_depth, bool) or not isinstance(raw_depth, (int, str)):
        raise RawContentError("Block depth must be an integer", path=f"{path}.depth", value=raw_depth)
    try:
        depth = int(raw_depth)
    except ValueError as exc:
        raise RawContentError(
            "Block depth must be an integer", path=f"{path}.depth", value=raw_depth
        ) from exc
    if depth < 0:
        raise RawContentError("Block depth must be >= 0", path=f"{path}.depth", value=raw_depth)
    return depth


def _decode_range(raw_range: Any, length: int, path: str) -> tuple[int, int]:
    if not isinstance(raw_range, Mapping):
        raise RawContentError("Range must be a mapping", path=path, value=raw_range)
    try:
        offset = int(raw_range["offset"])
        span = int(raw_range["length"])
    except (KeyError, TypeError, ValueError) as exc:
        raise RawContentError("Range needs integer 'offset' and 'length'", path=path, value=raw_range) from exc
    if offset < 0 or span < 0 or offset + span > length:
        raise RawContentError(
            f"Range [{offset}, {offset + span}) falls outside text of length {length}",
            path=path,
            value=raw_range,
        )
    return offset, offset + span


def _encode_style_ranges(block: ContentBlock) -> list[dict[str, Any]]:
    ranges: list[dict[str, Any]] = []
    open_runs: dict[str, int] = {}
    for index, character in enumerate(block.characters):
        for style in list(open_runs):
            if style not in character.style:
                start = open_runs.pop(style)
                ranges.append({"offset": start, "length": index - start, "style": style})
        for style in sorted(character.style):
            open_runs.setdefault(style, index)
    length = block.get_length()
    for style, start in open_runs.items():
        ranges.append({"offset": start, "length": length - start, "style": style})
    ranges.sort(key=lambda item: (item["offset"], item["style"]))
    return ranges
