"""Fenced-code language label resolution."""

from __future__ import annotations

import re
from typing import Final

_LANGUAGE_LABEL_RE = re.compile(r"^[a-z0-9_.+-]{1,32}$")

# Registered grammar name -> Pygments lexer alias.
REGISTERED_LANGUAGES: Final[dict[str, str]] = {
    "bash": "bash",
    "c": "c",
    "cpp": "cpp",
    "css": "css",
    "go": "go",
    "java": "java",
    "javascript": "javascript",
    "json": "json",
    "markdown": "markdown",
    "plaintext": "text",
    "python": "python",
    "rust": "rust",
    "sql": "sql",
    "typescript": "typescript",
    "xml": "xml",
    "yaml": "yaml",
}

ALLOWED_FENCED_CODE_LANGUAGES: Final[frozenset[str]] = frozenset(REGISTERED_LANGUAGES)

LANGUAGE_ALIASES: Final[dict[str, str]] = {
    "csharp": "plaintext",
    "html": "xml",
    "js": "javascript",
    "plaintext": "plaintext",
    "py": "python",
    "rs": "rust",
    "shell": "bash",
    "sh": "bash",
    "ts": "typescript",
}


def resolve_language(raw_language: str | None) -> str | None:
    """Map a fence label to a registered language name.

    Labels are trimmed and lowercased, and must match a short, restricted
    character pattern before any lookup. Returns None when the label is
    missing, malformed, or not registered.
    """
    if not raw_language or not isinstance(raw_language, str):
        return None
    normalized = raw_language.strip().lower()
    if not _LANGUAGE_LABEL_RE.match(normalized):
        return None
    alias = LANGUAGE_ALIASES.get(normalized)
    if alias:
        return alias
    if normalized in ALLOWED_FENCED_CODE_LANGUAGES:
        return normalized
    return None
