"""Flatten a markdown token stream into plain display text."""

from __future__ import annotations

from typing import Iterable

from safemd.schemas.tokens import (
    Code,
    FencedCode,
    HardBreak,
    LinkEnd,
    LinkStart,
    ListItemEnd,
    ListItemStart,
    MarkdownToken,
    ParagraphEnd,
    SoftBreak,
    Text,
)


def tokens_to_display_text(tokens: Iterable[MarkdownToken]) -> str:
    """Render tokens as plain text for previews and notifications.

    Link targets follow their text in parentheses; they are shown verbatim
    and are never turned into anything clickable.
    """
    parts: list[str] = []
    pending_link: str | None = None

    for token in tokens:
        if isinstance(token, Text):
            parts.append(token.text)
        elif isinstance(token, Code):
            parts.append(f"`{token.code}`")
        elif isinstance(token, FencedCode):
            parts.append(f"\n```{token.language or ''}\n{token.code}\n```\n")
        elif isinstance(token, (SoftBreak, HardBreak)):
            parts.append("\n")
        elif isinstance(token, ParagraphEnd):
            parts.append("\n\n")
        elif isinstance(token, ListItemStart):
            parts.append("• ")
        elif isinstance(token, ListItemEnd):
            parts.append("\n")
        elif isinstance(token, LinkStart):
            pending_link = token.href
        elif isinstance(token, LinkEnd):
            if pending_link:
                parts.append(f" ({pending_link})")
            pending_link = None

    return "".join(parts).rstrip()
