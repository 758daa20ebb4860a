"""
Redirect helpers with a host allowlist.
"""

import logging
from typing import Iterable, Mapping, Optional, Set
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from fastapi import status
from fastapi.responses import RedirectResponse

from ..config import settings

logger = logging.getLogger(__name__)


def allowed_redirect_hosts() -> Set[str]:
    hosts = {h.lower() for h in settings.ALLOWED_REDIRECT_HOSTS}
    site_host = urlparse(settings.SITE_URL).hostname
    if site_host:
        hosts.add(site_host.lower())
    return hosts


def is_safe_redirect(url: str, extra_hosts: Iterable[str] = ()) -> bool:
    parsed = urlparse(url)

    # Relative URLs stay on this site
    if not parsed.scheme and not parsed.netloc:
        return url.startswith("/") and not url.startswith("//")

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    hosts = allowed_redirect_hosts() | {h.lower() for h in extra_hosts}
    return parsed.hostname.lower() in hosts


def safe_redirect(
    url: str,
    extra_hosts: Iterable[str] = (),
    fallback: Optional[str] = None,
) -> RedirectResponse:
    """
    Redirect to `url` if its host is allowed, otherwise to `fallback`.

    `extra_hosts` are trusted for this call only.
    """
    if not is_safe_redirect(url, extra_hosts):
        logger.warning(f"Refusing redirect to untrusted host: {urlparse(url).hostname}")
        url = fallback or settings.SITE_URL

    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def add_query_args(url: str, args: Mapping[str, str], raw_suffix: str = "") -> str:
    """
    Set query arguments on a URL, replacing existing values with the same keys.

    `raw_suffix` is appended without encoding, for provider placeholders such
    as `session_id={CHECKOUT_SESSION_ID}`.
    """
    parsed = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k not in args]
    if raw_suffix:
        raw_key = raw_suffix.split("=", 1)[0]
        query = [(k, v) for k, v in query if k != raw_key]
    query.extend(args.items())

    encoded = urlencode(query)
    if raw_suffix:
        encoded = f"{encoded}&{raw_suffix}" if encoded else raw_suffix

    return urlunparse(parsed._replace(query=encoded))


def remove_query_args(url: str, keys: Iterable[str]) -> str:
    parsed = urlparse(url)
    drop = set(keys)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k not in drop]
    return urlunparse(parsed._replace(query=urlencode(query)))


def site_relative(url: str) -> str:
    """Path and query of a URL, so a redirect stays on whichever host served the request"""
    parsed = urlparse(url)
    return urlunparse(("", "", parsed.path or "/", "", parsed.query, ""))
