"""Allow-list checks for GEDS export URLs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from gedsimport.config.geds import GEDS_ALLOWED_DOMAINS
from gedsimport.domain.errors import InvalidUrlError

if TYPE_CHECKING:
    from collections.abc import Sequence

PAGE_ID_PARAM = "pgid"
PROFILE_PAGE_ID = "015"
XML_EXPORT_PAGE_ID = "026"
REQUIRED_SCHEME = "https"


def normalize_geds_url(url: str) -> str:
    """Point a GEDS profile-page URL at the XML export of the same record.

    Anything that does not parse, or does not select the profile page, is returned
    unchanged so that :func:`validate_geds_url` can reject it if needed.
    """

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        return url
    if parsed.params.get(PAGE_ID_PARAM) != PROFILE_PAGE_ID:
        return url
    return str(parsed.copy_set_param(PAGE_ID_PARAM, XML_EXPORT_PAGE_ID))


def validate_geds_url(url: str, *, allowed_domains: Sequence[str] = GEDS_ALLOWED_DOMAINS) -> bool:
    """Return ``True`` for HTTPS URLs on an allowed government domain.

    Raises :class:`InvalidUrlError` otherwise. Hostnames are matched by suffix,
    so subdomains of an allowed domain are accepted.
    """

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidUrlError("Invalid URL format") from exc
    if not parsed.is_absolute_url or not parsed.host:
        raise InvalidUrlError("Invalid URL format")

    if parsed.scheme != REQUIRED_SCHEME:
        raise InvalidUrlError("URL must use HTTPS protocol")

    hostname = parsed.host.lower()
    if not any(hostname.endswith(domain) for domain in allowed_domains):
        allowed = ", ".join(allowed_domains)
        raise InvalidUrlError(f"URL must be from an allowed domain: {allowed}")

    return True
