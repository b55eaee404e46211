"""Render a markdown token stream into a safe tree.

The renderer is a stack automaton. Start tokens push containers, end tokens
close the nearest open container of the same kind (closing anything opened
above it first), and leaves are appended to the container on top. Closers
with no open match are ignored and anything still open at the end of the
stream is closed, so unbalanced or truncated streams still yield a single
well-formed tree. Nesting depth comes from user content, so the stack is an
explicit list rather than the interpreter call stack.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from safemd.emoji_text import segment_text
from safemd.highlight import Highlighter, highlight_code
from safemd.languages import resolve_language
from safemd.links import normalize_link
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
)
from safemd.tree import (
    HEADING_KINDS,
    CodeBlock,
    ContainerKind,
    Document,
    Element,
    InlineCode,
    LineBreak,
    Node,
    TextSegment,
    heading_kind,
)

logger = logging.getLogger(__name__)

_START_KINDS: dict[type, ContainerKind] = {
    ParagraphStart: ContainerKind.PARAGRAPH,
    ListItemStart: ContainerKind.LIST_ITEM,
    EmphasisStart: ContainerKind.EMPHASIS,
    StrongStart: ContainerKind.STRONG,
}

_END_KINDS: dict[type, tuple[ContainerKind, ...]] = {
    ParagraphEnd: (ContainerKind.PARAGRAPH,),
    ListItemEnd: (ContainerKind.LIST_ITEM,),
    EmphasisEnd: (ContainerKind.EMPHASIS,),
    StrongEnd: (ContainerKind.STRONG,),
    LinkEnd: (ContainerKind.ANCHOR,),
    # list_end does not say which list it closes.
    ListEnd: (ContainerKind.UNORDERED_LIST, ContainerKind.ORDERED_LIST),
    # heading_end does not carry its level; innermost levels are tried first.
    HeadingEnd: tuple(reversed(HEADING_KINDS)),
}


class _Container:
    """A node under construction on the renderer stack."""

    __slots__ = ("kind", "href", "children")

    def __init__(self, kind: ContainerKind, href: str | None = None) -> None:
        self.kind = kind
        self.href = href
        self.children: list[Node] = []

    def to_element(self) -> Element:
        return Element(kind=self.kind, children=self.children, href=self.href)


class _RenderState:
    """Per-call stack of open containers; root is never popped."""

    def __init__(self) -> None:
        self.stack: list[_Container] = [_Container(ContainerKind.ROOT)]
        self.open_counts: Counter[ContainerKind] = Counter()

    def append(self, node: Node) -> None:
        self.stack[-1].children.append(node)

    def extend(self, nodes: Iterable[Node]) -> None:
        self.stack[-1].children.extend(nodes)

    def push(self, kind: ContainerKind, href: str | None = None) -> None:
        self.stack.append(_Container(kind, href))
        self.open_counts[kind] += 1

    def close_top(self) -> None:
        if len(self.stack) <= 1:
            return
        container = self.stack.pop()
        self.open_counts[container.kind] -= 1
        self.append(container.to_element())

    def close_one(self, kind: ContainerKind) -> bool:
        """Close the nearest open ``kind`` and everything above it."""
        if not self.open_counts[kind]:
            return False
        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index].kind is not kind:
                continue
            while len(self.stack) > index:
                self.close_top()
            return True
        return False

    def drain(self) -> Document:
        while len(self.stack) > 1:
            self.close_top()
        return Document(children=self.stack[0].children)


class TokenStreamRenderer:
    """Turns markdown tokens into a :class:`~safemd.tree.Document`.

    Rendering never raises for a sequence of token models. Link targets that
    fail :func:`~safemd.links.normalize_link` lose their anchor, fence labels
    that do not resolve render as plain text, and unmatched closers are
    ignored.
    """

    def __init__(self, highlighter: Highlighter | None = None) -> None:
        self.highlighter = highlighter

    def render(self, tokens: Iterable[MarkdownToken]) -> Document:
        state = _RenderState()
        for token in tokens:
            self._consume(state, token)
        return state.drain()

    def _consume(self, state: _RenderState, token: MarkdownToken) -> None:
        token_type = type(token)

        start_kind = _START_KINDS.get(token_type)
        if start_kind is not None:
            state.push(start_kind)
            return

        end_kinds = _END_KINDS.get(token_type)
        if end_kinds is not None:
            if not any(state.close_one(kind) for kind in end_kinds):
                logger.debug("Ignoring unmatched %s token", token.type)
            return

        if isinstance(token, Text):
            state.extend(segment_text(token.text))
        elif isinstance(token, HeadingStart):
            if 1 <= token.level <= 6:
                state.push(heading_kind(token.level))
            else:
                logger.debug("Ignoring heading with level %r", token.level)
        elif isinstance(token, ListStart):
            state.push(
                ContainerKind.ORDERED_LIST if token.ordered else ContainerKind.UNORDERED_LIST
            )
        elif isinstance(token, LinkStart):
            url = normalize_link(token.href)
            if url is not None:
                state.push(ContainerKind.ANCHOR, href=url.href)
        elif isinstance(token, Code):
            state.append(InlineCode(children=segment_text(token.code)))
        elif isinstance(token, FencedCode):
            state.append(self._code_block(token))
        elif isinstance(token, (SoftBreak, HardBreak)):
            state.append(LineBreak())
        else:
            logger.debug("Ignoring unknown token %r", token_type.__name__)

    def _code_block(self, token: FencedCode) -> CodeBlock:
        language = resolve_language(token.language)
        children = None
        if language is not None:
            children = highlight_code(language, token.code, self.highlighter)
        if children is not None:
            return CodeBlock(
                language=language,
                label=f"```{language}",
                highlighted=True,
                children=children,
            )
        return CodeBlock(
            language=language,
            label=f"```{language}" if language else "```",
            children=[TextSegment(token.code)] if token.code else [],
        )


def render_tokens(
    tokens: Iterable[MarkdownToken], *, highlighter: Highlighter | None = None
) -> Document:
    """Render a token stream into a fully closed, single-rooted tree."""
    return TokenStreamRenderer(highlighter).render(tokens)
