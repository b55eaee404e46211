"""Link target validation and the external-link confirmation step."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Final
from urllib.parse import unquote, urlsplit

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES: Final[frozenset[str]] = frozenset({"https", "http", "mailto"})
_HOST_SCHEMES: Final[frozenset[str]] = frozenset({"https", "http"})
# Control characters and whitespace never survive a strict parse.
_FORBIDDEN_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
# Characters that cannot appear in a host; browsers treat a backslash as "/".
_AUTHORITY_FORBIDDEN_RE = re.compile(r"[\\%^|<>\"`{}]")


@dataclass(frozen=True)
class ValidatedUrl:
    """A link target that passed :func:`normalize_link`.

    Attributes:
        href: The trimmed link target, also returned by ``str()``.
        scheme: Lowercased scheme (https, http or mailto).
        host: Lowercased hostname, or None for mailto links.
    """

    href: str
    scheme: str
    host: str | None

    def __str__(self) -> str:
        return self.href

    @property
    def decoded(self) -> str:
        """The destination with percent-escapes decoded, for display."""
        return unquote(self.href)


def normalize_link(raw_href: str) -> ValidatedUrl | None:
    """Validate a user-authored link target.

    Returns None when the target is empty, is not a strict absolute URL,
    uses a scheme other than https/http/mailto, carries userinfo,
    has characters that are not valid in a host, or is an http(s) URL with an
    empty host. Backslashes are refused anywhere in the target.
    """
    if not isinstance(raw_href, str):
        return None
    trimmed = raw_href.strip()
    if not trimmed:
        return None
    if (
        _FORBIDDEN_CHARS_RE.search(trimmed)
        or "\\" in trimmed
        or not _SCHEME_RE.match(trimmed)
    ):
        logger.debug("Rejected link target that is not an absolute URL")
        return None

    try:
        parts = urlsplit(trimmed)
        hostname = parts.hostname
        username = parts.username
        password = parts.password
        _ = parts.port  # raises ValueError on a malformed port
    except ValueError:
        logger.debug("Rejected unparseable link target")
        return None

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        logger.debug("Rejected link with disallowed scheme %r", scheme)
        return None
    if username or password:
        logger.debug("Rejected link carrying userinfo")
        return None
    if _AUTHORITY_FORBIDDEN_RE.search(parts.netloc):
        logger.debug("Rejected link with invalid characters in its host")
        return None
    if scheme in _HOST_SCHEMES and not hostname:
        logger.debug("Rejected %s link with empty host", scheme)
        return None

    return ValidatedUrl(href=trimmed, scheme=scheme, host=hostname or None)


@dataclass
class LinkConfirmation:
    """Pending navigation to an external link, awaiting an explicit decision.

    Shows the decoded destination and host. :meth:`confirm` validates the
    stored href again right before navigating instead of trusting the value
    that was validated at render time.
    """

    href: str
    destination: str
    host: str | None
    resolved: bool = False

    @classmethod
    def prepare(cls, href: str) -> LinkConfirmation | None:
        """Build a confirmation for ``href``, or None if it does not validate."""
        url = normalize_link(href)
        if url is None:
            return None
        return cls(href=href, destination=url.decoded, host=url.host)

    def cancel(self) -> None:
        """Dismiss the confirmation without navigating."""
        self.resolved = True

    def confirm(self, navigate: Callable[[str], None]) -> bool:
        """Re-validate the stored href and hand it to ``navigate``.

        ``navigate`` is expected to open the URL in a new browsing context
        without an opener reference.

        Returns:
            True if navigation happened, False if the confirmation was already
            resolved or the href no longer validates.
        """
        if self.resolved:
            return False
        self.resolved = True
        url = normalize_link(self.href)
        if url is None:
            logger.debug("Link failed validation at confirmation time")
            return False
        navigate(url.href)
        return True
