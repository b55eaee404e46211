"""Syntax highlighting for fenced code blocks.

Highlighting is split in two. A highlighter collaborator turns code into a
generic tree of ``{"type": "text", "value": ...}`` and
``{"type": "element", "tagName": ..., "properties": {...}, "children": [...]}``
nodes. The adapter then reduces that tree to text segments and ``span``
elements carrying allowlisted class names, so nothing else the collaborator
emits reaches the rendered output.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Any, Mapping, Protocol, Union

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import STANDARD_TYPES

from safemd.config import SAFEMD_HIGHLIGHT_MAX_DEPTH
from safemd.emoji_text import segment_text
from safemd.languages import REGISTERED_LANGUAGES
from safemd.tree import HighlightSpan, Segment, iter_text

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS_PREFIX = "hljs-"
_HIGHLIGHT_CLASS_RE = re.compile(r"hljs[0-9a-z-]*", re.IGNORECASE)

HighlightChild = Union[Segment, HighlightSpan]


class Highlighter(Protocol):
    """Collaborator that produces a generic highlight tree."""

    def highlight(self, language: str, code: str) -> Any:
        ...


def _token_class(ttype: Any) -> str:
    while ttype not in STANDARD_TYPES:
        ttype = ttype.parent
    return STANDARD_TYPES[ttype]


class PygmentsHighlighter:
    """Highlighter backed by Pygments lexers for the registered languages.

    Each classed Pygments token becomes a ``span`` element whose class is the
    token's short CSS class with the ``hljs-`` prefix; unclassed tokens become
    bare text nodes.
    """

    def __init__(self, class_prefix: str = HIGHLIGHT_CLASS_PREFIX) -> None:
        self.class_prefix = class_prefix
        self._lexers: dict[str, Lexer] = {}
        self._lock = threading.Lock()

    def _lexer(self, language: str) -> Lexer:
        lexer = self._lexers.get(language)
        if lexer is None:
            with self._lock:
                lexer = self._lexers.get(language)
                if lexer is None:
                    alias = REGISTERED_LANGUAGES[language]
                    lexer = get_lexer_by_name(alias, stripnl=False, ensurenl=False)
                    self._lexers[language] = lexer
        return lexer

    def highlight(self, language: str, code: str) -> dict[str, Any]:
        children: list[dict[str, Any]] = []
        for ttype, value in self._lexer(language).get_tokens(code):
            if not value:
                continue
            text_node = {"type": "text", "value": value}
            css_class = _token_class(ttype)
            if css_class:
                children.append(
                    {
                        "type": "element",
                        "tagName": "span",
                        "properties": {"className": [self.class_prefix + css_class]},
                        "children": [text_node],
                    }
                )
            else:
                children.append(text_node)
        return {"type": "root", "children": children}


DEFAULT_HIGHLIGHTER = PygmentsHighlighter()


def highlight_code(
    language: str, code: str, highlighter: Highlighter | None = None
) -> list[HighlightChild] | None:
    """Highlight ``code`` and flatten the result.

    Args:
        language: A registered language name from ``resolve_language``.
        code: Source code of the fenced block.
        highlighter: Collaborator to delegate to; defaults to Pygments.

    Returns:
        The flattened children, or None when the collaborator raised, returned
        something other than a mapping, or lost all of the code text. The
        caller then renders the code as plain text.
    """
    collaborator = highlighter or DEFAULT_HIGHLIGHTER
    try:
        tree = collaborator.highlight(language, code)
    except Exception as exc:
        logger.warning("Highlighting failed for language %r: %s", language, exc)
        return None
    if not isinstance(tree, Mapping):
        logger.warning(
            "Highlighter returned %s for language %r, expected a mapping",
            type(tree).__name__,
            language,
        )
        return None
    flattened = flatten_highlight_tree(tree)
    if code and not iter_text(flattened):
        logger.warning("Highlighter produced no text for language %r", language)
        return None
    return flattened


def flatten_highlight_tree(
    tree: Any, *, max_depth: int = SAFEMD_HIGHLIGHT_MAX_DEPTH
) -> list[HighlightChild]:
    """Reduce an untrusted highlight tree to text segments and classed spans.

    Only ``span`` elements survive; any other element is unwrapped and its
    children spliced into the parent. Span class names are filtered to the
    highlighting class pattern and every other property is dropped. Subtrees
    deeper than ``max_depth`` are reduced to their text.
    """
    return _flatten_node(tree, 0, max_depth)


def _flatten_node(node: Any, depth: int, max_depth: int) -> list[HighlightChild]:
    if not isinstance(node, Mapping):
        return []
    node_type = node.get("type")
    if node_type == "text":
        value = node.get("value")
        return segment_text(value) if isinstance(value, str) else []

    if depth >= max_depth:
        return segment_text(_collect_text(node))

    flattened: list[HighlightChild] = []
    children = node.get("children")
    if isinstance(children, list):
        for child in children:
            flattened.extend(_flatten_node(child, depth + 1, max_depth))

    if node_type != "element" or node.get("tagName") != "span":
        return flattened
    return [
        HighlightSpan(
            class_names=_extract_class_names(node.get("properties")),
            children=flattened,
        )
    ]


def _extract_class_names(properties: Any) -> list[str]:
    if not isinstance(properties, Mapping):
        return []
    class_names = properties.get("className")
    if not isinstance(class_names, list):
        return []
    return [
        entry
        for entry in class_names
        if isinstance(entry, str) and _HIGHLIGHT_CLASS_RE.fullmatch(entry)
    ]


def _collect_text(node: Mapping[str, Any]) -> str:
    """Gather text values below ``node`` without recursion, skipping revisits."""
    parts: list[str] = []
    seen: set[int] = set()
    stack: list[Any] = [node]
    while stack:
        current = stack.pop()
        if not isinstance(current, Mapping) or id(current) in seen:
            continue
        seen.add(id(current))
        if current.get("type") == "text":
            value = current.get("value")
            if isinstance(value, str):
                parts.append(value)
            continue
        children = current.get("children")
        if isinstance(children, list):
            stack.extend(reversed(children))
    return "".join(parts)
