"""
Microformats2 parsing.

Roots are elements with ``h-*`` classes (or a classic root class such as
``vcard``). Properties are read from ``p-*``, ``u-*``, ``dt-*`` and ``e-*``
classes on descendants, stopping at nested roots. A nested root that is also
a property becomes that property's value; otherwise it is a child item.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from ...document import attr, children, class_list, has_attr, has_child_elements, inner_html, text_content
from ...models import MicroformatItem
from ...utils.urls import resolve_url
from ..protocols import ExtractionContext
from .backcompat import LEGACY_ROOTS, PropertyTable, legacy_types, property_table
from .datetimes import combine_fragments, date_part, is_time_only, normalize_datetime, parse_datetime

logger = structlog.get_logger(__name__)

ROOT_CLASS = re.compile(r"^h-[a-z0-9-]+$")
PROPERTY_CLASS = re.compile(r"^(p|u|dt|e)-([a-z0-9-]+)$")

_URL_ATTRIBUTES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("a", "area", "link"), "href"),
    (("img", "audio", "video", "source", "iframe"), "src"),
    (("video",), "poster"),
    (("object",), "data"),
)

PropertyClass = Tuple[str, str]


@dataclass(frozen=True)
class RootInfo:
    """Types of a root element; ``table`` is set for classic roots."""

    types: Tuple[str, ...]
    table: Optional[PropertyTable] = None


@dataclass
class _ItemState:
    """Per-item state shared by all of its ``dt-*`` properties."""

    last_date: Optional[str] = None


def _unique(values: List[Any]) -> List[Any]:
    result: List[Any] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def root_info(element: Tag) -> Optional[RootInfo]:
    classes = class_list(element)
    modern = [name for name in classes if ROOT_CLASS.match(name)]
    if modern:
        return RootInfo(types=tuple(modern))
    legacy = legacy_types(classes)
    if legacy:
        types = _unique([LEGACY_ROOTS[name][0] for name in legacy])
        return RootInfo(types=tuple(types), table=property_table(legacy))
    return None


def property_classes(element: Tag, table: Optional[PropertyTable]) -> List[PropertyClass]:
    """Property classes of ``element`` as seen by an item using ``table``."""
    found: List[PropertyClass] = []
    for name in class_list(element):
        if table is None:
            match = PROPERTY_CLASS.match(name)
            if match:
                found.append((match.group(1), match.group(2)))
        elif name in table:
            found.append(table[name])
    return _unique(found)


def _is_value_boundary(element: Tag) -> bool:
    if root_info(element) is not None:
        return True
    return any(PROPERTY_CLASS.match(name) for name in class_list(element))


class MicroformatsParser:
    """Parses every microformat in one document."""

    def __init__(self, document: BeautifulSoup, base_url: Optional[str] = None) -> None:
        self.document = document
        self.base_url = base_url

    def items(self) -> List[MicroformatItem]:
        """Top-level items in document order; nested items stay with their parent."""
        results: List[MicroformatItem] = []
        stack = list(reversed(children(self.document)))
        while stack:
            element = stack.pop()
            info = root_info(element)
            if info is not None:
                results.append(self.parse_item(element, info))
                continue
            stack.extend(reversed(children(element)))
        return results

    def parse_item(self, root: Tag, info: RootInfo) -> MicroformatItem:
        item = MicroformatItem(types=list(info.types))
        state = _ItemState()
        for child in children(root):
            self._walk(child, item, info.table, state)
        self._apply_implied(root, item)
        return item

    def _walk(self, element: Tag, item: MicroformatItem, table: Optional[PropertyTable], state: _ItemState) -> None:
        props = property_classes(element, table)
        info = root_info(element)
        if info is not None:
            nested = self.parse_item(element, info)
            if not props:
                item.children.append(nested)
                return
            for prefix, name in props:
                item.add(name, replace(nested, value=self._nested_value(prefix, element, nested, state)))
            return

        for prefix, name in props:
            item.add(name, self._property_value(prefix, element, state))
        for child in children(element):
            self._walk(child, item, table, state)

    # --- property values ---

    def _property_value(self, prefix: str, element: Tag, state: _ItemState) -> Any:
        if prefix == "p":
            return self.parse_p(element)
        if prefix == "u":
            return self.parse_u(element)
        if prefix == "dt":
            return self.parse_dt(element, state)
        return self.parse_e(element)

    def _nested_value(self, prefix: str, element: Tag, nested: MicroformatItem, state: _ItemState) -> Any:
        if prefix == "p":
            names = nested.properties.get("name")
            if names and isinstance(names[0], str):
                return names[0]
            return text_content(element)
        if prefix == "u":
            urls = nested.properties.get("url")
            if urls and isinstance(urls[0], str):
                return urls[0]
            return self.parse_u(element)
        if prefix == "dt":
            return self.parse_dt(element, state)
        return text_content(element)

    def _value_class(self, element: Tag, for_datetime: bool = False) -> Optional[List[str]]:
        """Fragments from ``value``/``value-title`` descendants, or None if there are none."""
        fragments: List[str] = []
        stack = list(reversed(children(element)))
        while stack:
            current = stack.pop()
            if _is_value_boundary(current):
                continue
            classes = class_list(current)
            if "value-title" in classes:
                fragments.append(attr(current, "title") or "")
            elif "value" in classes:
                fragments.append(self._value_fragment(current, for_datetime))
            else:
                stack.extend(reversed(children(current)))
        return fragments if fragments else None

    @staticmethod
    def _value_fragment(element: Tag, for_datetime: bool) -> str:
        name = element.name
        if name in ("img", "area") and has_attr(element, "alt"):
            return attr(element, "alt") or ""
        if name == "data" and has_attr(element, "value"):
            return attr(element, "value") or ""
        if name == "abbr" and has_attr(element, "title"):
            return attr(element, "title") or ""
        if for_datetime and name in ("del", "ins", "time") and has_attr(element, "datetime"):
            return attr(element, "datetime") or ""
        return text_content(element)

    def parse_p(self, element: Tag) -> str:
        fragments = self._value_class(element)
        if fragments is not None:
            return "".join(fragments).strip()
        name = element.name
        if name in ("abbr", "link") and has_attr(element, "title"):
            return (attr(element, "title") or "").strip()
        if name in ("data", "input") and has_attr(element, "value"):
            return (attr(element, "value") or "").strip()
        if name in ("img", "area") and has_attr(element, "alt"):
            return (attr(element, "alt") or "").strip()
        return text_content(element)

    def parse_u(self, element: Tag) -> str:
        for tags, attribute in _URL_ATTRIBUTES:
            if element.name in tags and has_attr(element, attribute):
                return resolve_url(self.base_url, attr(element, attribute) or "")
        fragments = self._value_class(element)
        if fragments is not None:
            return "".join(fragments).strip()
        if element.name == "abbr" and has_attr(element, "title"):
            return (attr(element, "title") or "").strip()
        if element.name in ("data", "input") and has_attr(element, "value"):
            return (attr(element, "value") or "").strip()
        return text_content(element)

    def parse_dt(self, element: Tag, state: _ItemState) -> str:
        fragments = self._value_class(element, for_datetime=True)
        if fragments is not None:
            value = combine_fragments(fragment.strip() for fragment in fragments)
        else:
            name = element.name
            if name in ("time", "ins", "del") and has_attr(element, "datetime"):
                raw = attr(element, "datetime") or ""
            elif name == "abbr" and has_attr(element, "title"):
                raw = attr(element, "title") or ""
            elif name in ("data", "input") and has_attr(element, "value"):
                raw = attr(element, "value") or ""
            else:
                raw = text_content(element)
            value = normalize_datetime(raw)

        date = date_part(value)
        if date is not None:
            state.last_date = date
        elif state.last_date is not None and is_time_only(value):
            parsed = parse_datetime(value)
            if parsed is not None:
                parsed.date = state.last_date
                value = parsed.render()
        return value

    @staticmethod
    def parse_e(element: Tag) -> Dict[str, str]:
        return {"html": inner_html(element).strip(), "value": text_content(element)}

    # --- implied properties ---

    def _own_descendants(self, root: Tag) -> Iterator[Tag]:
        """Descendants of ``root`` outside any nested root."""
        stack = list(reversed(children(root)))
        while stack:
            element = stack.pop()
            if root_info(element) is not None:
                continue
            yield element
            stack.extend(reversed(children(element)))

    def _apply_implied(self, root: Tag, item: MicroformatItem) -> None:
        if "name" not in item.properties:
            name = self._implied_name(root)
            if name:
                item.add("name", name)
        if "photo" not in item.properties:
            photo = self._implied_photo(root)
            if photo is not None:
                item.add("photo", photo)
        if "url" not in item.properties:
            url = self._implied_url(root)
            if url is not None:
                item.add("url", url)

    def _implied_name(self, root: Tag) -> Optional[str]:
        if root.name in ("img", "area") and (attr(root, "alt") or "").strip():
            return (attr(root, "alt") or "").strip()
        if root.name == "abbr" and (attr(root, "title") or "").strip():
            return (attr(root, "title") or "").strip()
        for element in self._own_descendants(root):
            if element.name == "img":
                alt = (attr(element, "alt") or "").strip()
                if alt:
                    return alt
        if not has_child_elements(root):
            return text_content(root) or None
        return None

    def _implied_photo(self, root: Tag) -> Optional[str]:
        if root.name == "img" and has_attr(root, "src"):
            return resolve_url(self.base_url, attr(root, "src") or "")
        images = [e for e in self._own_descendants(root) if e.name == "img" and has_attr(e, "src")]
        if len(images) == 1 and not text_content(root):
            return resolve_url(self.base_url, attr(images[0], "src") or "")
        return None

    def _implied_url(self, root: Tag) -> Optional[str]:
        if root.name in ("a", "area") and has_attr(root, "href"):
            return resolve_url(self.base_url, attr(root, "href") or "")
        links = [e for e in self._own_descendants(root) if e.name in ("a", "area") and has_attr(e, "href")]
        if len(links) == 1:
            return resolve_url(self.base_url, attr(links[0], "href") or "")
        return None


def iter_items(items: List[MicroformatItem]) -> Iterator[MicroformatItem]:
    """Walk items depth-first: each item, then its property values, then its children."""
    for item in items:
        yield item
        nested = [v for values in item.properties.values() for v in values if isinstance(v, MicroformatItem)]
        yield from iter_items(nested)
        yield from iter_items(item.children)


def items_of_type(items: List[MicroformatItem], mf_type: str) -> List[MicroformatItem]:
    return [item for item in iter_items(items) if mf_type in item.types]


class MicroformatsExtractor:
    name = "microformats"

    def extract(self, context: ExtractionContext) -> List[Dict[str, Any]]:
        parser = MicroformatsParser(context.document, context.base_url)
        return [item.to_value() for item in parser.items()]
