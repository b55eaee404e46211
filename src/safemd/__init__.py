"""safemd: render markdown token streams into safe trees."""

from safemd.display_text import tokens_to_display_text
from safemd.emoji_text import (
    replace_shortcodes,
    replace_shortcodes_with_selection,
    segment_text,
)
from safemd.exceptions import EmojiDataError, SafemdError, TokenDecodeError
from safemd.highlight import PygmentsHighlighter, flatten_highlight_tree, highlight_code
from safemd.html_output import render_html, render_markdown_html
from safemd.languages import resolve_language
from safemd.links import LinkConfirmation, ValidatedUrl, normalize_link
from safemd.renderer import TokenStreamRenderer, render_tokens
from safemd.schemas import MarkdownToken, tokens_from_payload
from safemd.tree import Document

__all__ = [
    "Document",
    "EmojiDataError",
    "LinkConfirmation",
    "MarkdownToken",
    "PygmentsHighlighter",
    "SafemdError",
    "TokenDecodeError",
    "TokenStreamRenderer",
    "ValidatedUrl",
    "flatten_highlight_tree",
    "highlight_code",
    "normalize_link",
    "render_html",
    "render_markdown_html",
    "render_tokens",
    "replace_shortcodes",
    "replace_shortcodes_with_selection",
    "resolve_language",
    "segment_text",
    "tokens_from_payload",
    "tokens_to_display_text",
]
