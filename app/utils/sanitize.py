"""
Input sanitizing helpers.

Each value coming from a form field, a query parameter or a server variable is
cleaned on its own; a bad field falls back to its default without affecting
the others.
"""

import re
from typing import Any, Mapping, Optional

DEFAULT_CURRENCY = "usd"
DEFAULT_DESCRIPTION = "Custom Payment"
DEFAULT_MODE = "payment"

_TAG_BLOCK_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALPHA_RE = re.compile(r"[^a-z]")
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_HOST_RE = re.compile(r"[^a-z0-9.\-]")

_TRUE_VALUES = {"1", "true", "on", "yes"}


def sanitize_text(value: Any) -> str:
    """
    Strip markup from a single-line text value.

    Tags (and the content of script/style blocks) are removed, percent-encoded
    octets are dropped, and runs of whitespace collapse to a single space.
    """
    if value is None:
        return ""

    text = str(value)
    text = _TAG_BLOCK_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = _OCTET_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)

    return text.strip()


def sanitize_message(value: Any) -> str:
    """Like sanitize_text, but percent sequences are part of the message and stay."""
    if value is None:
        return ""

    text = str(value)
    text = _TAG_BLOCK_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)

    return text.strip()


def sanitize_currency(value: Any, default: str = DEFAULT_CURRENCY) -> str:
    """Lowercase an ISO currency code and keep letters only."""
    if value is None:
        return default

    currency = _NON_ALPHA_RE.sub("", str(value).lower())
    return currency or default


def sanitize_int(value: Any) -> int:
    """Leading integer of the value; anything non-numeric becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value

    match = _INT_PREFIX_RE.match(str(value))
    return int(match.group(1)) if match else 0


def sanitize_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


def sanitize_host(value: Any) -> str:
    """Hostname from a Host header, without port, lowercased."""
    host = sanitize_text(value).lower()
    if host.startswith("["):
        # IPv6 literal
        return host.split("]")[0] + "]"

    host = host.split(":")[0]
    return _HOST_RE.sub("", host)


def filter_input(source: Optional[Mapping[str, Any]], name: str, default: str = "") -> str:
    """
    Sanitized text value of `name` in a form, query or header mapping.

    Missing keys resolve to `default`. Nonce checks belong to the caller.
    """
    if not source or name not in source:
        return default

    value = source[name]
    if value is None:
        return default

    return sanitize_text(value)
