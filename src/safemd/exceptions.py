"""Custom exceptions for safemd."""


class SafemdError(Exception):
    """Base exception for safemd operations."""


class TokenDecodeError(SafemdError):
    """Token payload does not match the markdown token schema."""


class EmojiDataError(SafemdError):
    """Emoji metadata table could not be loaded."""
