"""URL validation performed before any network access."""

from __future__ import annotations

from urllib.parse import unquote, urlparse

__all__ = ["ALLOWED_SCHEMES", "FORBIDDEN_HOST_CHARACTERS", "is_valid_url"]

ALLOWED_SCHEMES = frozenset({"http", "https"})
# Forbidden domain code points of the URL Standard, besides controls and whitespace.
FORBIDDEN_HOST_CHARACTERS = frozenset('#%/:<>?@[\\]^|')


def _is_valid_hostname(netloc: str, hostname: str) -> bool:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        # Bracketed IPv6 literals are checked by urlparse itself.
        return True

    decoded = unquote(hostname)
    return not any(
        char.isspace() or ord(char) < 0x20 or char == "\x7f" or char in FORBIDDEN_HOST_CHARACTERS
        for char in decoded
    )


def is_valid_url(url: object) -> bool:
    """Return ``True`` when ``url`` is an absolute ``http``/``https`` URL.

    The authority must be spelled out: ``https:example.com`` is rejected even
    though browsers would read it as ``https://example.com/``. Hosts containing
    whitespace or characters that cannot appear in a domain name are rejected.
    """

    if not isinstance(url, str) or not url.strip():
        return False

    try:
        parsed = urlparse(url.strip())
        # Accessing ``port`` validates the authority component.
        parsed.port
    except ValueError:
        return False

    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.hostname:
        return False

    return _is_valid_hostname(parsed.netloc, parsed.hostname)
