"""
Microdata extraction (itemscope, itemprop, itemtype, itemid, itemref).

An item's properties are the ``itemprop`` elements found by crawling its
subtree, stopping at nested ``itemscope`` elements, followed by the subtrees
of its ``itemref`` targets in itemref order. Each element is visited at most
once per item, so an element reachable both ways is counted once.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set, Tuple, Union

import structlog
from bs4 import BeautifulSoup, Tag

from ..document import attr, children, descendants, has_attr, text_content, tokens
from ..models import MicrodataItem
from ..utils.urls import resolve_url
from .protocols import ExtractionContext

logger = structlog.get_logger(__name__)


class ValueRule(Enum):
    """How a property element yields its value."""

    ATTRIBUTE = "attribute"
    URL = "url"
    DATETIME = "datetime"


_VALUE_RULES: Dict[str, Tuple[ValueRule, str]] = {
    "meta": (ValueRule.ATTRIBUTE, "content"),
    "audio": (ValueRule.URL, "src"),
    "embed": (ValueRule.URL, "src"),
    "iframe": (ValueRule.URL, "src"),
    "img": (ValueRule.URL, "src"),
    "source": (ValueRule.URL, "src"),
    "track": (ValueRule.URL, "src"),
    "video": (ValueRule.URL, "src"),
    "a": (ValueRule.URL, "href"),
    "area": (ValueRule.URL, "href"),
    "link": (ValueRule.URL, "href"),
    "object": (ValueRule.URL, "data"),
    "data": (ValueRule.ATTRIBUTE, "value"),
    "meter": (ValueRule.ATTRIBUTE, "value"),
    "time": (ValueRule.DATETIME, "datetime"),
}


class MicrodataParser:
    """Builds the item graph for one document."""

    def __init__(self, document: BeautifulSoup, base_url: Optional[str] = None) -> None:
        self.base_url = base_url
        self._scopes: List[Tag] = []
        self._ids: Dict[str, Tag] = {}
        for element in descendants(document):
            if has_attr(element, "itemscope"):
                self._scopes.append(element)
            element_id = attr(element, "id")
            if element_id and element_id not in self._ids:
                self._ids[element_id] = element

    def items(self) -> List[MicrodataItem]:
        """Top-level items in document order."""
        consumed: Set[int] = set()
        for scope in self._scopes:
            for element in self.property_elements(scope):
                if has_attr(element, "itemscope"):
                    consumed.add(id(element))
        roots = [scope for scope in self._scopes if id(scope) not in consumed]
        items = []
        for root in roots:
            item = self._build(root, frozenset())
            if item is not None:
                items.append(item)
        return items

    def property_elements(self, scope: Tag) -> List[Tag]:
        """Elements contributing properties to the item rooted at ``scope``."""
        found: List[Tag] = []
        seen: Set[int] = {id(scope)}
        for child in children(scope):
            self._crawl(child, seen, found)
        ancestors = {id(parent) for parent in scope.parents}
        for ref in tokens(scope, "itemref"):
            target = self._ids.get(ref)
            if target is None:
                continue
            if id(target) in ancestors or target is scope:
                logger.debug("itemref_cycle_skipped", itemref=ref)
                continue
            self._crawl(target, seen, found)
        return found

    @staticmethod
    def _crawl(start: Tag, seen: Set[int], found: List[Tag]) -> None:
        stack = [start]
        while stack:
            element = stack.pop()
            if id(element) in seen:
                continue
            seen.add(id(element))
            if has_attr(element, "itemprop"):
                found.append(element)
            if not has_attr(element, "itemscope"):
                stack.extend(reversed(children(element)))

    def _build(self, scope: Tag, building: FrozenSet[int]) -> Optional[MicrodataItem]:
        if id(scope) in building:
            logger.debug("nested_item_cycle_skipped", tag=scope.name)
            return None
        building = building | {id(scope)}

        item = MicrodataItem()
        item.types = [resolve_url(self.base_url, t) for t in tokens(scope, "itemtype")]
        itemid = attr(scope, "itemid")
        if item.types and itemid is not None:
            item.id = itemid.strip()

        for element in self.property_elements(scope):
            names = tokens(element, "itemprop")
            if not names:
                continue
            value = self._value(element, building)
            if value is None:
                continue
            for name in names:
                item.add(name, value)
        return item

    def _value(self, element: Tag, building: FrozenSet[int]) -> Union[str, MicrodataItem, None]:
        if has_attr(element, "itemscope"):
            return self._build(element, building)
        rule = _VALUE_RULES.get(element.name)
        if rule is None:
            return text_content(element)
        kind, attribute = rule
        value = attr(element, attribute)
        if kind is ValueRule.DATETIME:
            return value.strip() if value is not None else text_content(element)
        if value is None or not value.strip():
            return ""
        if kind is ValueRule.URL:
            return resolve_url(self.base_url, value)
        return value


class MicrodataExtractor:
    name = "microdata"

    def extract(self, context: ExtractionContext) -> List[dict]:
        parser = MicrodataParser(context.document, context.base_url)
        return [item.to_value() for item in parser.items()]
