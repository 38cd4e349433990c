"""
Tag scrapers: meta tags, Open Graph, Twitter Cards and Dublin Core.

All four share one algorithm: a single pass over the document's elements,
a selector that turns a matching element into a ``(key, value)`` pair, and
accumulation of the pairs into an object. Singleton keys are last-write-wins.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import structlog
from bs4 import Tag

from ..document import attr, descendants, text_content, tokens
from ..utils.urls import resolve_url
from .protocols import ExtractionContext

logger = structlog.get_logger(__name__)

Pair = Tuple[str, str]
Selector = Callable[[Tag], Optional[Pair]]


def collect_pairs(root: Tag, select: Selector) -> List[Pair]:
    """Run ``select`` over every element below ``root`` in document order."""
    pairs: List[Pair] = []
    for element in descendants(root):
        pair = select(element)
        if pair is not None:
            pairs.append(pair)
    return pairs


def set_nested(target: Dict[str, Any], path: Sequence[str], value: str) -> None:
    """Store ``value`` under a ``:``-split key path.

    A scalar that later receives a sub-key is promoted to ``{"url": scalar}``,
    and a scalar written onto an existing object becomes its ``url`` member.
    """
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if isinstance(existing, str):
            existing = {"url": existing}
            node[segment] = existing
        elif not isinstance(existing, dict):
            existing = {}
            node[segment] = existing
        node = existing
    leaf = path[-1]
    if isinstance(node.get(leaf), dict):
        node[leaf]["url"] = value
    else:
        node[leaf] = value


def _split_key(key: str) -> List[str]:
    return [segment for segment in key.split(":") if segment]


def _meta_content(element: Tag) -> Optional[str]:
    if element.name != "meta":
        return None
    content = attr(element, "content")
    if content is None or not content.strip():
        return None
    return content.strip()


# ---------------------------------------------------------------------------
# Meta tags
# ---------------------------------------------------------------------------

_CHARSET_IN_CONTENT_TYPE = re.compile(r"charset\s*=\s*[\"']?([^\s;\"']+)", re.IGNORECASE)

# rel token -> (meta key, keep first occurrence only)
_LINK_FIELDS = {
    "canonical": ("canonical", True),
    "icon": ("icon", True),
    "apple-touch-icon": ("apple_touch_icon", True),
    "shortlink": ("shortlink", False),
    "prev": ("prev", False),
    "next": ("next", False),
}
_META_LIST_KEYS = frozenset({"feeds", "alternate"})
_FB_PROPERTIES = {"fb:app_id": "fb_app_id", "fb:pages": "fb_pages"}
_ROBOTS_NAMES = frozenset({"robots", "googlebot"})

_ROBOTS_FLAGS = {
    "index": ("index", True),
    "noindex": ("index", False),
    "follow": ("follow", True),
    "nofollow": ("follow", False),
    "archive": ("archive", True),
    "noarchive": ("archive", False),
    "snippet": ("snippet", True),
    "nosnippet": ("snippet", False),
    "translate": ("translate", True),
    "notranslate": ("translate", False),
    "imageindex": ("imageindex", True),
    "noimageindex": ("imageindex", False),
}


def parse_robots(content: str) -> Dict[str, Any]:
    """Parse a robots directive list such as ``"noindex, follow"``.

    Only directives that appear are reported; ``all`` and ``none`` set both
    ``index`` and ``follow``. Unknown directives are ignored and the original
    text is kept under ``raw``.
    """
    directive: Dict[str, Any] = {"raw": content}
    for token in content.lower().split(","):
        token = token.strip()
        if token in ("all", "none"):
            directive["index"] = directive["follow"] = token == "all"
        elif token in _ROBOTS_FLAGS:
            key, flag = _ROBOTS_FLAGS[token]
            directive[key] = flag
    return directive


class MetaExtractor:
    """Standard ``<meta name>`` tags plus page-level fields.

    Title, language and charset come from ``<title>``, ``<html lang>`` and the
    charset declarations; canonical, icons, pagination, feeds and alternates
    come from ``<link rel>``.
    """

    name = "meta"

    def _link_pairs(self, element: Tag, context: ExtractionContext, result: Dict[str, Any]) -> List[Tuple[str, Any]]:
        href = (attr(element, "href") or "").strip()
        if not href:
            return []
        url = resolve_url(context.base_url, href)
        pairs: List[Tuple[str, Any]] = []
        for rel in dict.fromkeys(token.lower() for token in tokens(element, "rel")):
            if rel in _LINK_FIELDS:
                key, first_only = _LINK_FIELDS[rel]
                if not (first_only and key in result):
                    pairs.append((key, url))
            elif rel == "alternate":
                link_type = (attr(element, "type") or "").strip()
                if "rss" in link_type.lower() or "atom" in link_type.lower():
                    feed = {"href": url, "type": link_type}
                    title = (attr(element, "title") or "").strip()
                    if title:
                        feed["title"] = title
                    pairs.append(("feeds", feed))
                    continue
                alternate = {"href": url}
                for name in ("hreflang", "media", "type"):
                    value = (attr(element, name) or "").strip()
                    if value:
                        alternate[name] = value
                pairs.append(("alternate", alternate))
        return pairs

    def _meta_pairs(self, element: Tag) -> List[Tuple[str, Any]]:
        charset = (attr(element, "charset") or "").strip()
        if charset:
            return [("charset", charset)]
        http_equiv = (attr(element, "http-equiv") or "").strip().lower()
        if http_equiv == "content-type":
            match = _CHARSET_IN_CONTENT_TYPE.search(attr(element, "content") or "")
            return [("charset", match.group(1))] if match else []
        content = _meta_content(element)
        if content is None:
            return []
        name = (attr(element, "name") or "").strip().lower()
        if name in _ROBOTS_NAMES:
            return [(name, parse_robots(content))]
        if name:
            return [(name, content)]
        prop = (attr(element, "property") or "").strip().lower()
        if prop in _FB_PROPERTIES:
            return [(_FB_PROPERTIES[prop], content)]
        return []

    def extract(self, context: ExtractionContext) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        # Pairs are applied as they are found so the first-only keys can see
        # what is already recorded.
        for element in descendants(context.document):
            pairs: List[Tuple[str, Any]] = []
            if element.name == "html":
                lang = (attr(element, "lang") or "").strip()
                if lang:
                    pairs.append(("language", lang))
            elif element.name == "title":
                title = text_content(element)
                if title and "title" not in result:
                    pairs.append(("title", title))
            elif element.name == "link":
                pairs = self._link_pairs(element, context, result)
            elif element.name == "meta":
                pairs = self._meta_pairs(element)
            for key, value in pairs:
                if key in _META_LIST_KEYS:
                    result.setdefault(key, []).append(value)
                else:
                    result[key] = value
        return result


# ---------------------------------------------------------------------------
# Open Graph
# ---------------------------------------------------------------------------

_OG_NAMESPACES = ("article", "book", "profile", "fb")

_OG_URL_PATHS = frozenset(
    {
        ("url",),
        ("image",),
        ("image", "url"),
        ("image", "secure_url"),
        ("video",),
        ("video", "url"),
        ("video", "secure_url"),
        ("audio",),
        ("audio", "url"),
        ("audio", "secure_url"),
    }
)

# Each bare og:image / og:video / og:audio starts a new structured object.
_OG_STRUCTURED = ("image", "video", "audio")


class OpenGraphExtractor:
    """``og:*`` properties plus the ``article:``, ``book:``, ``profile:`` and ``fb:`` namespaces.

    The first image (likewise video and audio) is reported under ``image``:
    a URL string, or an object once it has sub-properties. When a page
    declares several, every one is also listed under ``images`` with its own
    sub-properties.
    """

    name = "open_graph"

    @staticmethod
    def _select(element: Tag) -> Optional[Pair]:
        content = _meta_content(element)
        if content is None:
            return None
        key = (attr(element, "property") or attr(element, "name") or "").strip()
        prefix = key.split(":", 1)[0].lower()
        if prefix == "og" or prefix in _OG_NAMESPACES:
            return key, content
        return None

    @staticmethod
    def _add_structured(items: List[Dict[str, str]], path: List[str], content: str) -> None:
        if len(path) == 1:
            if items and "url" not in items[-1]:
                items[-1]["url"] = content
            else:
                items.append({"url": content})
            return
        if not items:
            items.append({})
        set_nested(items[-1], path[1:], content)

    def extract(self, context: ExtractionContext) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        structured: Dict[str, List[Dict[str, str]]] = {}
        for key, content in collect_pairs(context.document, self._select):
            segments = _split_key(key)
            namespace = segments[0].lower()
            path = [segment.lower() for segment in segments[1:]]
            if not path:
                continue
            if namespace != "og":
                set_nested(result, [namespace, *path], content)
                continue
            if tuple(path) in _OG_URL_PATHS:
                content = resolve_url(context.base_url, content)
            if path[0] in _OG_STRUCTURED:
                items = structured.setdefault(path[0], [])
                self._add_structured(items, path, content)
                # Keeps the key at its first position; the value is set below.
                result.setdefault(path[0], None)
            else:
                set_nested(result, path, content)

        for root, items in structured.items():
            first = items[0]
            result[root] = first["url"] if list(first) == ["url"] else first
            if len(items) > 1:
                result[f"{root}s"] = items
        return result


# ---------------------------------------------------------------------------
# Twitter Cards
# ---------------------------------------------------------------------------

_TWITTER_URL_PATHS = frozenset({("image",), ("image", "src"), ("image", "url"), ("player",), ("player", "stream")})


class TwitterExtractor:
    """``twitter:*`` cards, declared through either ``name`` or ``property``."""

    name = "twitter"

    @staticmethod
    def _select(element: Tag) -> Optional[Pair]:
        content = _meta_content(element)
        if content is None:
            return None
        for attribute in ("name", "property"):
            key = (attr(element, attribute) or "").strip()
            if key.lower().startswith("twitter:"):
                return key[len("twitter:") :], content
        return None

    def extract(self, context: ExtractionContext) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, content in collect_pairs(context.document, self._select):
            path = [segment.lower() for segment in _split_key(key)]
            if not path:
                continue
            if tuple(path) in _TWITTER_URL_PATHS:
                content = resolve_url(context.base_url, content)
            set_nested(result, path, content)
        return result


# ---------------------------------------------------------------------------
# Dublin Core
# ---------------------------------------------------------------------------

_DC_PREFIXES = ("dcterms.", "dc.")
_DC_LIST_KEYS = frozenset({"subject", "contributor"})
_DC_LIST_SEPARATOR = re.compile(r"[,;]")


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in _DC_LIST_SEPARATOR.split(value) if part.strip()]


class DublinCoreExtractor:
    """``DC.*`` and ``DCTERMS.*`` meta tags, keys lower-cased."""

    name = "dublin_core"

    @staticmethod
    def _select(element: Tag) -> Optional[Pair]:
        content = _meta_content(element)
        if content is None:
            return None
        name = (attr(element, "name") or "").strip()
        lowered = name.lower()
        for prefix in _DC_PREFIXES:
            if lowered.startswith(prefix) and len(lowered) > len(prefix):
                return lowered[len(prefix) :], content
        return None

    def extract(self, context: ExtractionContext) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, content in collect_pairs(context.document, self._select):
            if key in _DC_LIST_KEYS:
                values: List[str] = result.setdefault(key, [])
                values.extend(_split_list(content))
                if not values:
                    del result[key]
            else:
                result[key] = content
        return result


def accumulate(pairs: Iterable[Pair]) -> Dict[str, List[str]]:
    """Group pairs by key, keeping every value in order of appearance."""
    grouped: Dict[str, List[str]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return grouped
