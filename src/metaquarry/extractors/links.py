"""
Link-based discovery: Web App Manifest link, oEmbed endpoints and rel-links.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from bs4 import Tag

from ..document import attr, descendants, tokens
from ..errors import MalformedManifestError
from ..models import ManifestDiscovery, to_json_text
from ..utils.urls import is_absolute_iri, resolve_url
from .manifest import parse_manifest_document
from .protocols import ExtractionContext
from .tags import Pair, accumulate, collect_pairs

logger = structlog.get_logger(__name__)


def _rel_tokens(element: Tag) -> List[str]:
    return [token.lower() for token in tokens(element, "rel")]


class ManifestLinkExtractor:
    """The first ``<link rel="manifest">``, plus the supplied manifest if any."""

    name = "manifest"

    def discover(self, context: ExtractionContext, strict: bool = False) -> Optional[ManifestDiscovery]:
        """Locate the manifest link.

        With ``strict`` a malformed supplied manifest raises
        ``MalformedManifestError``; otherwise it is logged and dropped and only
        the href is reported.
        """
        href = None
        for element in descendants(context.document):
            if element.name == "link" and "manifest" in _rel_tokens(element):
                value = (attr(element, "href") or "").strip()
                if value:
                    href = resolve_url(context.base_url, value)
                    break
        if href is None:
            return None

        manifest_text = None
        if context.manifest_json is not None:
            manifest_base = href if is_absolute_iri(href) else context.base_url
            try:
                manifest = parse_manifest_document(context.manifest_json, manifest_base)
            except MalformedManifestError as e:
                if strict:
                    raise
                logger.warning("manifest_dropped", href=href, error=e.message)
            else:
                manifest_text = to_json_text(manifest)
        return ManifestDiscovery(href=href, manifest=manifest_text)

    def extract(self, context: ExtractionContext) -> Optional[Dict[str, Any]]:
        discovery = self.discover(context)
        return discovery.to_value() if discovery is not None else None


class OEmbedExtractor:
    """``<link rel="alternate">`` elements whose type names an oEmbed format."""

    name = "oembed"

    def extract(self, context: ExtractionContext) -> Dict[str, Any]:
        endpoints: Dict[str, List[Dict[str, str]]] = {"json": [], "xml": []}
        for element in descendants(context.document):
            if element.name != "link" or "alternate" not in _rel_tokens(element):
                continue
            link_type = (attr(element, "type") or "").strip().lower()
            href = (attr(element, "href") or "").strip()
            if "oembed" not in link_type or not href:
                continue
            fmt = "json" if "json" in link_type else "xml"
            endpoint = {"href": resolve_url(context.base_url, href), "format": fmt}
            title = (attr(element, "title") or "").strip()
            if title:
                endpoint["title"] = title
            endpoints[fmt].append(endpoint)

        result: Dict[str, Any] = {}
        if endpoints["json"]:
            result["json_endpoints"] = endpoints["json"]
        if endpoints["xml"]:
            result["xml_endpoints"] = endpoints["xml"]
        return result


class RelLinksExtractor:
    """Every element with both ``rel`` and ``href``, grouped by rel token."""

    name = "rel_links"

    def extract(self, context: ExtractionContext) -> Dict[str, List[str]]:
        def select(element: Tag) -> Optional[Pair]:
            rel = (attr(element, "rel") or "").strip()
            href = (attr(element, "href") or "").strip()
            if not rel or not href:
                return None
            return rel, resolve_url(context.base_url, href)

        pairs = []
        for rel, url in collect_pairs(context.document, select):
            pairs.extend((token.lower(), url) for token in rel.split())
        return accumulate(pairs)
