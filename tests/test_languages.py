"""Tests for fenced-code language resolution."""

from __future__ import annotations

import pytest

from safemd.languages import ALLOWED_FENCED_CODE_LANGUAGES, resolve_language


@pytest.mark.parametrize(
    ("raw_language", "expected"),
    [
        ("python", "python"),
        ("  Python ", "python"),
        ("py", "python"),
        ("JS", "javascript"),
        ("ts", "typescript"),
        ("html", "xml"),
        ("sh", "bash"),
        ("shell", "bash"),
        ("rs", "rust"),
        ("csharp", "plaintext"),
        ("plaintext", "plaintext"),
        ("yaml", "yaml"),
    ],
)
def test_resolves_registered_languages(raw_language: str, expected: str) -> None:
    assert resolve_language(raw_language) == expected


@pytest.mark.parametrize(
    "raw_language",
    [
        None,
        "",
        "   ",
        "not-a-real-lang",
        "python3",
        "c++",
        "<script>",
        "py thon",
        "a" * 33,
        "ruby",
    ],
)
def test_rejects_unknown_or_malformed_labels(raw_language: str | None) -> None:
    assert resolve_language(raw_language) is None


def test_every_alias_targets_a_registered_language() -> None:
    """Aliases never resolve outside the allowlist."""
    from safemd.languages import LANGUAGE_ALIASES

    assert set(LANGUAGE_ALIASES.values()) <= ALLOWED_FENCED_CODE_LANGUAGES
