from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)


def has_scheme_and_host(url: str | None) -> bool:
    """Return True when ``url`` parses with both a scheme and a network location."""
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.hostname)


def extract_search_query(url: str | None, param: str = "q") -> str | None:
    """Return the first value of ``param`` in the URL query string.

    ``None`` when the URL has no query string, lacks the parameter, or the
    parameter is blank. ``+`` and percent escapes are decoded.
    """
    if not url:
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        logger.warning("invalid_url_format", extra={"url": url})
        return None
    if not parsed.query:
        return None

    values = parse_qs(parsed.query).get(param)
    if not values:
        return None
    query = values[0].strip()
    return query or None
