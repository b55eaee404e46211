"""Markdown token models and payload decoding."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from safemd.config import SAFEMD_MAX_TOKENS
from safemd.exceptions import TokenDecodeError


class _Token(BaseModel):
    model_config = ConfigDict(frozen=True)


class ParagraphStart(_Token):
    type: Literal["paragraph_start"] = "paragraph_start"


class ParagraphEnd(_Token):
    type: Literal["paragraph_end"] = "paragraph_end"


class HeadingStart(_Token):
    type: Literal["heading_start"] = "heading_start"
    level: int = Field(..., ge=1, le=6)


class HeadingEnd(_Token):
    type: Literal["heading_end"] = "heading_end"


class ListStart(_Token):
    type: Literal["list_start"] = "list_start"
    ordered: bool = False


class ListEnd(_Token):
    type: Literal["list_end"] = "list_end"


class ListItemStart(_Token):
    type: Literal["list_item_start"] = "list_item_start"


class ListItemEnd(_Token):
    type: Literal["list_item_end"] = "list_item_end"


class EmphasisStart(_Token):
    type: Literal["emphasis_start"] = "emphasis_start"


class EmphasisEnd(_Token):
    type: Literal["emphasis_end"] = "emphasis_end"


class StrongStart(_Token):
    type: Literal["strong_start"] = "strong_start"


class StrongEnd(_Token):
    type: Literal["strong_end"] = "strong_end"


class LinkStart(_Token):
    type: Literal["link_start"] = "link_start"
    href: str


class LinkEnd(_Token):
    type: Literal["link_end"] = "link_end"


class Text(_Token):
    type: Literal["text"] = "text"
    text: str


class Code(_Token):
    type: Literal["code"] = "code"
    code: str


class FencedCode(_Token):
    type: Literal["fenced_code"] = "fenced_code"
    language: str | None = None
    code: str


class SoftBreak(_Token):
    type: Literal["soft_break"] = "soft_break"


class HardBreak(_Token):
    type: Literal["hard_break"] = "hard_break"


MarkdownToken = Annotated[
    Union[
        ParagraphStart,
        ParagraphEnd,
        HeadingStart,
        HeadingEnd,
        ListStart,
        ListEnd,
        ListItemStart,
        ListItemEnd,
        EmphasisStart,
        EmphasisEnd,
        StrongStart,
        StrongEnd,
        LinkStart,
        LinkEnd,
        Text,
        Code,
        FencedCode,
        SoftBreak,
        HardBreak,
    ],
    Field(discriminator="type"),
]

_TOKEN_LIST_ADAPTER: TypeAdapter[list[MarkdownToken]] = TypeAdapter(list[MarkdownToken])


def tokens_from_payload(payload: Any, *, max_tokens: int = SAFEMD_MAX_TOKENS) -> list[MarkdownToken]:
    """Validate a JSON-decoded token list into token models.

    Args:
        payload: The decoded ``markdown_tokens`` value, expected to be a list
            of ``{"type": ..., ...}`` mappings.
        max_tokens: Upper bound on the number of tokens accepted.

    Returns:
        The validated tokens, in payload order.

    Raises:
        TokenDecodeError: If the payload is not a list, is too long, or any
            entry does not match a known token shape.
    """
    if not isinstance(payload, list):
        raise TokenDecodeError("Markdown token payload must be a list")
    if len(payload) > max_tokens:
        raise TokenDecodeError(
            f"Markdown token payload has {len(payload)} tokens (limit {max_tokens})"
        )
    try:
        return _TOKEN_LIST_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise TokenDecodeError(f"Invalid markdown token payload: {exc.error_count()} error(s)") from exc
