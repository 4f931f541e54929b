"""URL helpers shared by the resolver, the API and the client.

All checks here are pure string/URL operations so they can be used before a
browser is ever launched.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence
from urllib.parse import urlparse

GOOGLE_NEWS_HOST = "news.google.com"

DEFAULT_EXCLUDED_DOMAINS: Sequence[str] = (
    "google.com",
    "gstatic.com",
    "googleapis.com",
    "googleusercontent.com",
    "googletagmanager.com",
    "doubleclick.net",
)

_REFRESH_URL_RE = re.compile(
    r"url\s*=\s*(?:'(?P<single>[^']+)'|\"(?P<double>[^\"]+)\"|(?P<bare>[^;\s]+))",
    re.IGNORECASE,
)


def normalize_input_url(raw: Optional[str]) -> str:
    """Trim user input and make sure it is an absolute URL.

    Raises:
        ValueError: if the value does not parse as scheme://host/...
    """
    candidate = (raw or "").strip()
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise ValueError("Please enter a valid URL") from exc
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("Please enter a valid URL")
    return candidate


def is_google_news_url(url: str, host: str = GOOGLE_NEWS_HOST) -> bool:
    return bool(url) and host in url


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def is_external_article_url(url: Optional[str], excluded_domains: Iterable[str] = DEFAULT_EXCLUDED_DOMAINS) -> bool:
    """
    Check whether a URL can be the outbound article link.

    Only http(s) URLs qualify, and the host must not be (a subdomain of) any
    excluded domain.
    """
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    host = parsed.hostname.lower()
    return not any(_host_matches(host, domain.lower()) for domain in excluded_domains)


def first_external_url(
    candidates: Iterable[Optional[str]],
    excluded_domains: Iterable[str] = DEFAULT_EXCLUDED_DOMAINS,
) -> Optional[str]:
    """Return the first candidate that passes `is_external_article_url`."""
    excluded = list(excluded_domains)
    for candidate in candidates:
        if not candidate:
            continue
        candidate = str(candidate).strip()
        if is_external_article_url(candidate, excluded):
            return candidate
    return None


def parse_meta_refresh(content: Optional[str]) -> Optional[str]:
    """
    Pull the target out of a meta refresh value such as ``0;url=https://a.b/c``.

    Args:
        content: The ``content`` attribute of the meta tag

    Returns:
        The URL part, or None if there is none
    """
    if not content:
        return None
    match = _REFRESH_URL_RE.search(content)
    if not match:
        return None
    url = (match.group("single") or match.group("double") or match.group("bare") or "").strip()
    return url or None
