"""Serialize a rendered tree to HTML."""

from __future__ import annotations

from typing import Iterable, Iterator

try:
    from bs4 import BeautifulSoup
    from bs4.element import Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML output (pip install beautifulsoup4)."
    ) from exc

from safemd.config import SAFEMD_INLINE_EMOJI_PX, SAFEMD_SPRITESHEET_URL
from safemd.highlight import Highlighter
from safemd.renderer import render_tokens
from safemd.schemas.tokens import MarkdownToken
from safemd.tree import (
    CodeBlock,
    ContainerKind,
    Document,
    Element,
    GlyphSegment,
    HighlightSpan,
    InlineCode,
    LineBreak,
    SpriteCell,
    TextSegment,
)

_CONTAINER_TAGS: dict[ContainerKind, str] = {
    ContainerKind.PARAGRAPH: "p",
    ContainerKind.HEADING_1: "h1",
    ContainerKind.HEADING_2: "h2",
    ContainerKind.HEADING_3: "h3",
    ContainerKind.HEADING_4: "h4",
    ContainerKind.HEADING_5: "h5",
    ContainerKind.HEADING_6: "h6",
    ContainerKind.EMPHASIS: "em",
    ContainerKind.STRONG: "strong",
    ContainerKind.ANCHOR: "a",
    ContainerKind.LIST_ITEM: "li",
    ContainerKind.UNORDERED_LIST: "ul",
    ContainerKind.ORDERED_LIST: "ol",
}


def sprite_style(cell: SpriteCell, *, spritesheet_url: str, size_px: int) -> str:
    """Inline CSS that shows one sprite cell as a ``size_px`` square."""
    pos_x, pos_y = cell.background_position()
    size_x, size_y = cell.background_size()
    return ";".join(
        [
            f"width:{size_px}px",
            f"height:{size_px}px",
            f'background-image:url("{spritesheet_url}")',
            "background-repeat:no-repeat",
            f"background-size:{size_x}% {size_y}%",
            f"background-position:{pos_x:g}% {pos_y:g}%",
            "display:inline-block",
            "vertical-align:text-bottom",
        ]
    )


def _glyph(soup: BeautifulSoup, glyph: GlyphSegment, spritesheet_url: str, size_px: int):
    if glyph.cell is None:
        return soup.new_string(glyph.text)
    span = soup.new_tag("span")
    span["role"] = "img"
    span["aria-label"] = glyph.text
    span["title"] = glyph.text
    span["style"] = sprite_style(glyph.cell, spritesheet_url=spritesheet_url, size_px=size_px)
    return span


def render_html(
    document: Document,
    *,
    css_class: str | None = None,
    spritesheet_url: str = SAFEMD_SPRITESHEET_URL,
    emoji_px: int = SAFEMD_INLINE_EMOJI_PX,
) -> str:
    """Serialize ``document`` into an HTML fragment.

    All text and attribute values are escaped by BeautifulSoup. Anchors open
    in a new browsing context without an opener reference.

    Args:
        document: Tree returned by ``render_tokens``.
        css_class: Extra class added to the wrapping ``div.safe-markdown``.
        spritesheet_url: Address of the emoji sprite sheet.
        emoji_px: Edge length of inline emoji sprites.
    """
    soup = BeautifulSoup("", "lxml")
    wrapper = soup.new_tag("div")
    wrapper["class"] = f"safe-markdown {css_class or ''}".strip()

    # Explicit stack of (parent tag, pending children) keeps deep trees safe.
    stack: list[tuple[Tag, Iterator[object]]] = [(wrapper, iter(document.children))]
    while stack:
        parent, pending = stack[-1]
        node = next(pending, None)
        if node is None:
            stack.pop()
            continue

        if isinstance(node, TextSegment):
            if node.text:
                parent.append(soup.new_string(node.text))
        elif isinstance(node, GlyphSegment):
            parent.append(_glyph(soup, node, spritesheet_url, emoji_px))
        elif isinstance(node, LineBreak):
            parent.append(soup.new_tag("br"))
        elif isinstance(node, Element):
            tag_name = _CONTAINER_TAGS.get(node.kind)
            if tag_name is None or (tag_name == "a" and not node.href):
                # Unwrap into the current parent.
                stack.append((parent, iter(node.children)))
                continue
            tag = soup.new_tag(tag_name)
            if tag_name == "a":
                tag["href"] = node.href
                tag["target"] = "_blank"
                tag["rel"] = "noopener noreferrer"
            parent.append(tag)
            stack.append((tag, iter(node.children)))
        elif isinstance(node, InlineCode):
            tag = soup.new_tag("code")
            parent.append(tag)
            stack.append((tag, iter(node.children)))
        elif isinstance(node, HighlightSpan):
            tag = soup.new_tag("span")
            if node.class_names:
                tag["class"] = " ".join(node.class_names)
            parent.append(tag)
            stack.append((tag, iter(node.children)))
        elif isinstance(node, CodeBlock):
            block = soup.new_tag("div")
            block["class"] = "safe-markdown-code-block"
            label = soup.new_tag("p")
            label["class"] = "safe-markdown-code-label"
            label.append(soup.new_string(node.label))
            pre = soup.new_tag("pre")
            code = soup.new_tag("code")
            if node.language:
                code["data-language"] = node.language
            pre.append(code)
            block.append(label)
            block.append(pre)
            parent.append(block)
            stack.append((code, iter(node.children)))

    return str(wrapper)


def render_markdown_html(
    tokens: Iterable[MarkdownToken],
    *,
    css_class: str | None = None,
    highlighter: Highlighter | None = None,
) -> str:
    """Render tokens and serialize the resulting tree to HTML."""
    return render_html(render_tokens(tokens, highlighter=highlighter), css_class=css_class)
