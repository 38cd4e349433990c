"""
Web App Manifest normalization.

Parses a manifest document and resolves its URL-bearing members against the
manifest's base URL. Members of unexpected shape are left exactly as written.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from ..errors import MalformedManifestError
from ..models import from_json_text
from ..utils.urls import resolve_url

logger = structlog.get_logger(__name__)

_URL_MEMBERS = ("start_url", "scope")


def _resolve_member(obj: Dict[str, Any], key: str, base_url: Optional[str]) -> None:
    value = obj.get(key)
    if isinstance(value, str) and value.strip():
        obj[key] = resolve_url(base_url, value)


def _resolve_each(items: Any, key: str, base_url: Optional[str]) -> List[Dict[str, Any]]:
    """Resolve ``key`` in every object of ``items``; returns the objects touched."""
    if not isinstance(items, list):
        return []
    objects = [item for item in items if isinstance(item, dict)]
    for item in objects:
        _resolve_member(item, key, base_url)
    return objects


def normalize_manifest(manifest: Dict[str, Any], base_url: Optional[str]) -> Dict[str, Any]:
    """Resolve relative URLs inside an already decoded manifest object in place."""
    for key in _URL_MEMBERS:
        _resolve_member(manifest, key, base_url)
    _resolve_each(manifest.get("icons"), "src", base_url)
    _resolve_each(manifest.get("screenshots"), "src", base_url)
    for shortcut in _resolve_each(manifest.get("shortcuts"), "url", base_url):
        _resolve_each(shortcut.get("icons"), "src", base_url)
    _resolve_each(manifest.get("related_applications"), "url", base_url)
    return manifest


def parse_manifest_document(manifest_json: str, base_url: Optional[str] = None) -> Dict[str, Any]:
    """Decode and normalize a manifest.

    Raises:
        MalformedManifestError: The text is not JSON or not a JSON object.
    """
    try:
        manifest = from_json_text(manifest_json)
    except (ValueError, RecursionError) as e:
        raise MalformedManifestError(f"Manifest is not valid JSON: {e}") from e
    if not isinstance(manifest, dict):
        raise MalformedManifestError(f"Manifest must be a JSON object, got {type(manifest).__name__}")
    logger.debug("manifest_parsed", members=len(manifest), base_url=base_url)
    return normalize_manifest(manifest, base_url)
