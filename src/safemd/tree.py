"""Rendered tree node types."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Union


class ContainerKind(str, Enum):
    """Kinds of container that can sit on the renderer stack."""

    ROOT = "root"
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading-1"
    HEADING_2 = "heading-2"
    HEADING_3 = "heading-3"
    HEADING_4 = "heading-4"
    HEADING_5 = "heading-5"
    HEADING_6 = "heading-6"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    ANCHOR = "anchor"
    LIST_ITEM = "list-item"
    UNORDERED_LIST = "unordered-list"
    ORDERED_LIST = "ordered-list"


HEADING_KINDS: tuple[ContainerKind, ...] = (
    ContainerKind.HEADING_1,
    ContainerKind.HEADING_2,
    ContainerKind.HEADING_3,
    ContainerKind.HEADING_4,
    ContainerKind.HEADING_5,
    ContainerKind.HEADING_6,
)


def heading_kind(level: int) -> ContainerKind:
    """Return the heading container kind for a level in 1..6."""
    return HEADING_KINDS[level - 1]


@dataclass(frozen=True)
class SpriteCell:
    """Position of one glyph on the shared sprite sheet.

    Attributes:
        x: Column of the glyph.
        y: Row of the glyph.
        columns: Total column count of the sheet.
        rows: Total row count of the sheet.
    """

    x: int
    y: int
    columns: int
    rows: int

    def background_position(self) -> tuple[float, float]:
        """Background position percentages for this cell."""
        pos_x = (100 / (self.columns - 1)) * self.x if self.columns > 1 else 0
        pos_y = (100 / (self.rows - 1)) * self.y if self.rows > 1 else 0
        return pos_x, pos_y

    def background_size(self) -> tuple[int, int]:
        """Background size percentages that scale one cell to the box."""
        return 100 * self.columns, 100 * self.rows


@dataclass
class TextSegment:
    """A literal text run."""

    text: str


@dataclass
class GlyphSegment:
    """One emoji glyph unit, drawn from the sprite sheet when ``cell`` is set."""

    text: str
    cell: SpriteCell | None = None


Segment = Union[TextSegment, GlyphSegment]


@dataclass
class LineBreak:
    """Explicit line-break marker."""


class _Branch:
    """Base for nodes with children; equality is structural and iterative."""

    __hash__ = None  # type: ignore[assignment]

    def _own_fields(self) -> tuple:
        return tuple(getattr(self, f.name) for f in fields(self) if f.name != "children")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Branch):
            return NotImplemented
        return tree_equal(self, other)


@dataclass(eq=False)
class InlineCode(_Branch):
    """Inline code span; its text is segmented like any other text."""

    children: list[Segment] = field(default_factory=list)


@dataclass(eq=False)
class HighlightSpan(_Branch):
    """A highlighter span that survived the class-name allowlist."""

    class_names: list[str] = field(default_factory=list)
    children: list[Union[Segment, HighlightSpan]] = field(default_factory=list)


@dataclass(eq=False)
class CodeBlock(_Branch):
    """A fenced code block.

    Attributes:
        language: Registered language name, or None when unresolved.
        label: Fence label shown above the code ("```" plus the language).
        highlighted: True when children came from the highlighter.
        children: Highlighted spans and segments, or one plain text segment.
    """

    language: str | None
    label: str
    highlighted: bool = False
    children: list[Union[Segment, HighlightSpan]] = field(default_factory=list)


@dataclass(eq=False)
class Element(_Branch):
    """A closed container."""

    kind: ContainerKind
    children: list[Node] = field(default_factory=list)
    href: str | None = None


Node = Union[TextSegment, GlyphSegment, LineBreak, InlineCode, CodeBlock, Element]


@dataclass(eq=False)
class Document(_Branch):
    """Root of a rendered tree."""

    children: list[Node] = field(default_factory=list)


def tree_equal(left: object, right: object) -> bool:
    """Compare two trees node by node without recursion."""
    pending = [(left, right)]
    while pending:
        a, b = pending.pop()
        if type(a) is not type(b):
            return False
        if not isinstance(a, _Branch):
            if a != b:
                return False
            continue
        if a._own_fields() != b._own_fields() or len(a.children) != len(b.children):
            return False
        pending.extend(zip(a.children, b.children))
    return True


def iter_text(nodes: list) -> str:
    """Concatenate every literal text leaf under ``nodes`` in document order.

    Walks with an explicit stack so arbitrarily deep trees are safe.
    """
    parts: list[str] = []
    stack = [iter(nodes)]
    while stack:
        node = next(stack[-1], None)
        if node is None:
            stack.pop()
            continue
        if isinstance(node, (TextSegment, GlyphSegment)):
            parts.append(node.text)
        elif isinstance(node, LineBreak):
            parts.append("\n")
        elif isinstance(node, (InlineCode, HighlightSpan, CodeBlock, Element, Document)):
            stack.append(iter(node.children))
    return "".join(parts)
