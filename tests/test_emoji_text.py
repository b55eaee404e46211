"""Tests for emoji segmentation and shortcode expansion."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from safemd.emoji_text import (
    emoji_native_from_selection,
    is_emoji,
    load_emoji_data,
    replace_shortcodes,
    replace_shortcodes_with_selection,
    segment_text,
    shortcode_map,
    sprite_cells,
)
from safemd.exceptions import EmojiDataError
from safemd.tree import GlyphSegment, SpriteCell, TextSegment

GRINNING = "\U0001F600"
THUMBS_UP = "\U0001F44D"
MEDIUM_SKIN = "\U0001F3FD"
FAMILY = "\U0001F468\u200D\U0001F469\u200D\U0001F467\u200D\U0001F466"
US_FLAG = "\U0001F1FA\U0001F1F8"
KEYCAP_ONE = "1\uFE0F\u20E3"
RED_HEART = "\u2764\uFE0F"
UNICORN = "\U0001F984"
SMILE = "\U0001F604"
WINK = "\U0001F609"


class TestSegmentText:
    """Tests for segment_text function."""

    def test_empty_text(self) -> None:
        """Empty input yields no segments."""
        assert segment_text("") == []

    def test_plain_text_is_one_segment(self) -> None:
        """Text without emoji stays a single literal run."""
        assert segment_text("plain 123 #*") == [TextSegment("plain 123 #*")]

    def test_splits_text_and_glyphs(self) -> None:
        """Glyphs are separated from the surrounding text."""
        segments = segment_text(f"hi {GRINNING}!")

        assert segments == [
            TextSegment("hi "),
            GlyphSegment(GRINNING, SpriteCell(x=0, y=0, columns=8, rows=7)),
            TextSegment("!"),
        ]

    @pytest.mark.parametrize(
        "glyph",
        [THUMBS_UP + MEDIUM_SKIN, FAMILY, US_FLAG, KEYCAP_ONE, RED_HEART],
    )
    def test_multi_codepoint_glyphs_are_atomic(self, glyph: str) -> None:
        """Composed glyphs come back as one unit."""
        segments = segment_text(f"a{glyph}b")

        assert [type(segment) for segment in segments] == [
            TextSegment,
            GlyphSegment,
            TextSegment,
        ]
        assert segments[1].text == glyph
        assert is_emoji(glyph)

    def test_adjacent_glyphs_are_separate(self) -> None:
        """Two emoji in a row are two glyph units."""
        segments = segment_text(GRINNING + THUMBS_UP)

        assert [segment.text for segment in segments] == [GRINNING, THUMBS_UP]

    def test_known_glyph_gets_sprite_cell(self) -> None:
        """Glyphs present in the metadata table map to their sprite cell."""
        (segment,) = segment_text(THUMBS_UP + MEDIUM_SKIN)

        assert isinstance(segment, GlyphSegment)
        assert segment.cell == SpriteCell(x=5, y=1, columns=8, rows=7)

    def test_variation_selector_fallback(self) -> None:
        """A heart without VS16 still finds the VS16 sprite entry."""
        (segment,) = segment_text("\u2764")

        assert isinstance(segment, GlyphSegment)
        assert segment.cell is not None
        assert (segment.cell.x, segment.cell.y) == (0, 3)

    def test_unknown_glyph_renders_natively(self) -> None:
        """Glyphs missing from the table carry no sprite cell."""
        (segment,) = segment_text(UNICORN)

        assert isinstance(segment, GlyphSegment)
        assert segment.cell is None

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "no emoji here",
            f"{FAMILY}{US_FLAG} mixed {KEYCAP_ONE}\n{RED_HEART}",
            f"dangling zwj {GRINNING}\u200D end",
            f"lone indicator \U0001F1FA and {THUMBS_UP}{MEDIUM_SKIN}{MEDIUM_SKIN}",
            "\uFE0F\u20E3 stray combiners",
        ],
    )
    def test_round_trip(self, text: str) -> None:
        """Concatenated segments reproduce the input exactly."""
        assert "".join(segment.text for segment in segment_text(text)) == text

    def test_plain_digits_are_not_keycaps(self) -> None:
        """Digits only become glyphs with the enclosing keycap mark."""
        assert not is_emoji("1")
        assert not is_emoji("")


class TestSpriteTable:
    """Tests for the lazily built sprite table."""

    def test_built_once(self) -> None:
        """Repeated calls return the same table object."""
        assert sprite_cells() is sprite_cells()

    def test_table_is_read_only(self) -> None:
        """The shared table cannot be mutated by callers."""
        with pytest.raises(TypeError):
            sprite_cells()[UNICORN] = SpriteCell(0, 0, 1, 1)  # type: ignore[index]

    def test_background_geometry(self) -> None:
        """Sheet geometry is derived from the maximum coordinates."""
        cell = SpriteCell(x=2, y=0, columns=3, rows=1)

        assert cell.background_position() == (100.0, 0)
        assert cell.background_size() == (300, 100)

    def test_single_cell_sheet(self) -> None:
        """A one-cell sheet never divides by zero."""
        assert SpriteCell(0, 0, 1, 1).background_position() == (0, 0)


class TestLoadEmojiData:
    """Tests for load_emoji_data function."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing metadata file is reported as EmojiDataError."""
        with pytest.raises(EmojiDataError, match="Failed to load emoji data"):
            load_emoji_data(tmp_path / "missing.json")

    def test_rejects_non_object(self, tmp_path: Path) -> None:
        """The metadata file must hold a JSON object."""
        path = tmp_path / "emoji.json"
        path.write_text(json.dumps(["not", "an", "object"]), encoding="utf-8")

        with pytest.raises(EmojiDataError, match="not a JSON object"):
            load_emoji_data(path)


class TestShortcodes:
    """Tests for shortcode expansion."""

    @pytest.mark.parametrize(
        ("shortcode", "native"),
        [
            (":+1:", THUMBS_UP),
            (":thumbs_up:", THUMBS_UP),
            (":thumbsup:", THUMBS_UP),
            (":THINKING:", "\U0001F914"),
            (":smile:", SMILE),
            (":satisfied:", SMILE),
        ],
    )
    def test_known_shortcodes(self, shortcode: str, native: str) -> None:
        """Ids, aliases and shortcodes are looked up case-insensitively."""
        assert replace_shortcodes(f"ok {shortcode}") == f"ok {native}"

    def test_emoticons_outside_shortcode_form_are_ignored(self) -> None:
        """Only :name: style entries make it into the table."""
        table = shortcode_map()

        assert ":)" not in table
        assert ":smiley:" in table

    def test_unknown_shortcode_is_kept(self) -> None:
        """Unknown names are left untouched."""
        assert replace_shortcodes("a :not_an_emoji: b") == "a :not_an_emoji: b"

    def test_text_without_colon_is_returned_as_is(self) -> None:
        """The selection passes through when nothing can match."""
        result = replace_shortcodes_with_selection("hello", 2, 4)

        assert (result.text, result.selection_start, result.selection_end) == ("hello", 2, 4)

    @pytest.mark.parametrize(
        ("position", "expected"),
        [
            (None, None),
            (2, 2),
            (3, 3),
            (5, 4),
            (9, 4),
            (10, 4),
            (12, 6),
        ],
    )
    def test_selection_remapping(self, position: int | None, expected: int | None) -> None:
        """Positions before, inside and after a match are remapped."""
        result = replace_shortcodes_with_selection("hi :smile: there", position, position)

        assert result.text == f"hi {SMILE} there"
        assert result.selection_start == expected
        assert result.selection_end == expected

    def test_selection_across_several_matches(self) -> None:
        """Each replacement shifts positions relative to the updated text."""
        result = replace_shortcodes_with_selection(":smile::wink:", 9, 13)

        assert result.text == SMILE + WINK
        assert result.selection_start == 2
        assert result.selection_end == 2

    def test_unchanged_text_keeps_selection(self) -> None:
        """Without a replacement the selection is returned untouched."""
        result = replace_shortcodes_with_selection("a :nope: b", 4, 5)

        assert result.text == "a :nope: b"
        assert (result.selection_start, result.selection_end) == (4, 5)


class TestEmojiNativeFromSelection:
    """Tests for emoji_native_from_selection function."""

    def test_mapping_selection(self) -> None:
        assert emoji_native_from_selection({"native": GRINNING, "id": "grinning"}) == GRINNING

    def test_attribute_selection(self) -> None:
        class Picked:
            native = WINK

        assert emoji_native_from_selection(Picked()) == WINK

    @pytest.mark.parametrize("selection", [None, 5, "x", {}, {"native": ""}, {"native": 3}])
    def test_invalid_selection(self, selection: object) -> None:
        assert emoji_native_from_selection(selection) is None
