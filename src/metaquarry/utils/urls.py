"""URL helpers."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlsplit


def resolve_url(base_url: Optional[str], value: str) -> str:
    """Resolve ``value`` against ``base_url``.

    Without a base the value is returned unchanged (after trimming), and a
    value that cannot be joined is returned as written.
    """
    value = value.strip()
    if not base_url:
        return value
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value


def is_absolute_iri(value: str) -> bool:
    """True for ``scheme:...`` values such as ``http://x`` or ``urn:isbn:1``."""
    try:
        return bool(urlsplit(value).scheme)
    except ValueError:
        return False
