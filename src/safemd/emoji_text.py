"""Emoji segmentation, sprite lookup, and shortcode expansion."""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

import regex

from safemd.config import SAFEMD_EMOJI_DATA_PATH
from safemd.exceptions import EmojiDataError
from safemd.tree import GlyphSegment, Segment, SpriteCell, TextSegment

logger = logging.getLogger(__name__)

_VARIATION_SELECTOR_16 = "\uFE0F"

# One glyph unit: a flag pair, a keycap sequence, or a pictographic ZWJ chain
# where each element may carry a variation selector and a skin-tone modifier.
EMOJI_PATTERN = (
    r"(?:[\U0001F1E6-\U0001F1FF]{2}"
    r"|[0-9#*]\uFE0F?\u20E3"
    r"|\p{Extended_Pictographic}[\uFE0F\uFE0E]?[\U0001F3FB-\U0001F3FF]?"
    r"(?:\u200D\p{Extended_Pictographic}[\uFE0F\uFE0E]?[\U0001F3FB-\U0001F3FF]?)*)"
)
_EMOJI_RE = regex.compile(EMOJI_PATTERN)

_SHORTCODE_RE = re.compile(r":([a-zA-Z0-9_+\-]+):")
_SHORTCODE_TOKEN_RE = re.compile(r":[a-zA-Z0-9_+\-]+:")

_TABLE_LOCK = threading.Lock()
_shortcode_map: Mapping[str, str] | None = None
_sprite_cells: Mapping[str, SpriteCell] | None = None


def is_emoji(text: str) -> bool:
    """True when ``text`` is exactly one glyph unit."""
    return bool(text) and _EMOJI_RE.fullmatch(text) is not None


def segment_text(text: str) -> list[Segment]:
    """Split text into literal runs and single glyph units.

    Concatenating the ``text`` of the returned segments reproduces the input.
    """
    if not text:
        return []
    cells = sprite_cells()
    segments: list[Segment] = []
    position = 0
    for match in _EMOJI_RE.finditer(text):
        start, end = match.span()
        if start > position:
            segments.append(TextSegment(text[position:start]))
        native = match.group(0)
        segments.append(GlyphSegment(native, _lookup_cell(cells, native)))
        position = end
    if position < len(text):
        segments.append(TextSegment(text[position:]))
    return segments


def _lookup_cell(cells: Mapping[str, SpriteCell], native: str) -> SpriteCell | None:
    cell = cells.get(native)
    if cell is not None:
        return cell
    # Metadata tables disagree on whether a trailing VS16 is part of the key.
    if native.endswith(_VARIATION_SELECTOR_16):
        return cells.get(native[:-1])
    return cells.get(native + _VARIATION_SELECTOR_16)


def load_emoji_data(path: Path = SAFEMD_EMOJI_DATA_PATH) -> dict[str, Any]:
    """Read an emoji-mart style metadata table.

    Raises:
        EmojiDataError: If the file cannot be read or is not a JSON object.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise EmojiDataError(f"Failed to load emoji data from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise EmojiDataError(f"Emoji data at {path} is not a JSON object")
    return data


def _iter_emoji_records(data: Mapping[str, Any]) -> Iterable[tuple[str, dict[str, Any]]]:
    emojis = data.get("emojis")
    if not isinstance(emojis, dict):
        return
    for key, record in emojis.items():
        if isinstance(record, dict):
            yield key, record


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, str)]


def _first_native(record: Mapping[str, Any]) -> str | None:
    skins = record.get("skins")
    if not isinstance(skins, list) or not skins or not isinstance(skins[0], dict):
        return None
    native = skins[0].get("native")
    if isinstance(native, str) and native:
        return native
    return None


def _add_shortcode(table: dict[str, str], shortcode: str, native: str) -> None:
    if _SHORTCODE_TOKEN_RE.fullmatch(shortcode):
        table[shortcode.lower()] = native


def _build_shortcode_map(data: Mapping[str, Any]) -> dict[str, str]:
    table: dict[str, str] = {}
    natives_by_id: dict[str, str] = {}
    for key, record in _iter_emoji_records(data):
        native = _first_native(record)
        if native is None:
            continue
        emoji_id = record.get("id")
        if not isinstance(emoji_id, str) or not emoji_id:
            emoji_id = key
        natives_by_id[emoji_id] = native
        _add_shortcode(table, f":{emoji_id}:", native)
        for alias in _string_list(record.get("aliases")):
            _add_shortcode(table, f":{alias}:", native)
        for shortcode in _string_list(record.get("shortcodes")):
            _add_shortcode(table, shortcode, native)
        for emoticon in _string_list(record.get("emoticons")):
            _add_shortcode(table, emoticon, native)

    # emoji-mart also keeps a top-level alias -> id map.
    aliases = data.get("aliases")
    if isinstance(aliases, dict):
        for alias, target in aliases.items():
            if isinstance(alias, str) and isinstance(target, str) and target in natives_by_id:
                _add_shortcode(table, f":{alias}:", natives_by_id[target])
    return table


def _build_sprite_cells(data: Mapping[str, Any]) -> dict[str, SpriteCell]:
    positions: dict[str, tuple[int, int]] = {}
    max_x = 0
    max_y = 0
    for _, record in _iter_emoji_records(data):
        skins = record.get("skins")
        if not isinstance(skins, list):
            continue
        for skin in skins:
            if not isinstance(skin, dict):
                continue
            native = skin.get("native")
            x = skin.get("x")
            y = skin.get("y")
            if not isinstance(native, str) or not native:
                continue
            if type(x) is not int or type(y) is not int or x < 0 or y < 0:
                continue
            positions[native] = (x, y)
            max_x = max(max_x, x)
            max_y = max(max_y, y)

    columns = max_x + 1
    rows = max_y + 1
    return {
        native: SpriteCell(x=x, y=y, columns=columns, rows=rows)
        for native, (x, y) in positions.items()
    }


def shortcode_map() -> Mapping[str, str]:
    """Lowercased ``:shortcode:`` -> native glyph table, built once."""
    global _shortcode_map
    if _shortcode_map is None:
        with _TABLE_LOCK:
            if _shortcode_map is None:
                table = _build_shortcode_map(load_emoji_data())
                logger.debug("Built emoji shortcode table with %d entries", len(table))
                _shortcode_map = MappingProxyType(table)
    return _shortcode_map


def sprite_cells() -> Mapping[str, SpriteCell]:
    """Native glyph -> sprite cell table, built once."""
    global _sprite_cells
    if _sprite_cells is None:
        with _TABLE_LOCK:
            if _sprite_cells is None:
                cells = _build_sprite_cells(load_emoji_data())
                logger.debug("Built emoji sprite table with %d cells", len(cells))
                _sprite_cells = MappingProxyType(cells)
    return _sprite_cells


def _remap_position(
    position: int | None, match_start: int, match_end: int, replacement_length: int
) -> int | None:
    if position is None:
        return None
    if position <= match_start:
        return position
    if position >= match_end:
        return position + (replacement_length - (match_end - match_start))
    return match_start + replacement_length


@dataclass(frozen=True)
class ShortcodeReplacement:
    """Text after shortcode expansion and the remapped selection.

    Positions are code-point offsets into ``text``.
    """

    text: str
    selection_start: int | None
    selection_end: int | None


def replace_shortcodes_with_selection(
    text: str, selection_start: int | None, selection_end: int | None
) -> ShortcodeReplacement:
    """Expand known ``:shortcode:`` names to glyphs, keeping the caret outside them.

    A selection position at or before a match start is unchanged, one at or
    after a match end shifts by the length difference, and one strictly inside
    a match moves to just after the inserted glyph.
    """
    if ":" not in text:
        return ShortcodeReplacement(text, selection_start, selection_end)

    table = shortcode_map()
    parts: list[str] = []
    changed = False
    previous_end = 0
    # Matches are remapped against original offsets, so track the running shift.
    shift = 0
    next_start = selection_start
    next_end = selection_end

    for match in _SHORTCODE_RE.finditer(text):
        shortcode = match.group(0)
        match_start, match_end = match.span()
        parts.append(text[previous_end:match_start])
        replacement = table.get(shortcode.lower())
        if replacement is not None:
            changed = True
            parts.append(replacement)
            next_start = _remap_position(
                next_start, match_start + shift, match_end + shift, len(replacement)
            )
            next_end = _remap_position(
                next_end, match_start + shift, match_end + shift, len(replacement)
            )
            shift += len(replacement) - len(shortcode)
        else:
            parts.append(shortcode)
        previous_end = match_end

    if not changed:
        return ShortcodeReplacement(text, selection_start, selection_end)

    parts.append(text[previous_end:])
    return ShortcodeReplacement("".join(parts), next_start, next_end)


def replace_shortcodes(text: str) -> str:
    """Expand known ``:shortcode:`` names without tracking a selection."""
    return replace_shortcodes_with_selection(text, None, None).text


def emoji_native_from_selection(selection: Any) -> str | None:
    """Extract the native glyph from an emoji picker selection object."""
    if isinstance(selection, Mapping):
        native = selection.get("native")
    else:
        native = getattr(selection, "native", None)
    if not isinstance(native, str) or not native:
        return None
    return native
