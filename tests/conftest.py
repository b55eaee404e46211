"""Test setup for safemd."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from safemd.schemas.tokens import (  # noqa: E402
    LinkEnd,
    LinkStart,
    ParagraphEnd,
    ParagraphStart,
    Text,
)


@pytest.fixture
def link_paragraph_tokens() -> list:
    """A paragraph containing text followed by a link."""
    return [
        ParagraphStart(),
        Text(text="hello "),
        LinkStart(href="https://x.test"),
        Text(text="there"),
        LinkEnd(),
        ParagraphEnd(),
    ]
