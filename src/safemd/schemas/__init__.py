"""Shared schemas for safemd."""

from safemd.schemas.tokens import (
    Code,
    EmphasisEnd,
    EmphasisStart,
    FencedCode,
    HardBreak,
    HeadingEnd,
    HeadingStart,
    LinkEnd,
    LinkStart,
    ListEnd,
    ListItemEnd,
    ListItemStart,
    ListStart,
    MarkdownToken,
    ParagraphEnd,
    ParagraphStart,
    SoftBreak,
    StrongEnd,
    StrongStart,
    Text,
    tokens_from_payload,
)

__all__ = [
    "Code",
    "EmphasisEnd",
    "EmphasisStart",
    "FencedCode",
    "HardBreak",
    "HeadingEnd",
    "HeadingStart",
    "LinkEnd",
    "LinkStart",
    "ListEnd",
    "ListItemEnd",
    "ListItemStart",
    "ListStart",
    "MarkdownToken",
    "ParagraphEnd",
    "ParagraphStart",
    "SoftBreak",
    "StrongEnd",
    "StrongStart",
    "Text",
    "tokens_from_payload",
]
