"""
Read-only access to a parsed HTML document.

Every extractor walks the tree through these helpers instead of calling
BeautifulSoup directly, so attribute lookup, class matching and text
accumulation behave identically across formats.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

# Text under these elements never contributes to textContent.
_OPAQUE_TEXT_TAGS = frozenset({"script", "style", "template"})

# HTML's whitespace set is ASCII only; NBSP is content.
_HTML_WHITESPACE = " \t\n\r\f"
_WHITESPACE_RUN = re.compile(r"[ \t\n\r\f]+")


def parse_document(html: str, parser: str = "html.parser") -> BeautifulSoup:
    """Build a tree from HTML text.

    Attribute values are kept as plain strings (``class="a b"`` stays
    ``"a b"``) and, for the built-in parser, the first of duplicated
    attributes wins as in browsers.
    """
    if parser == "html.parser":
        return BeautifulSoup(html, parser, multi_valued_attributes=None, on_duplicate_attribute="ignore")
    return BeautifulSoup(html, parser, multi_valued_attributes=None)


def children(node: Tag) -> List[Tag]:
    """Direct element children in document order."""
    return [child for child in node.children if isinstance(child, Tag)]


def has_child_elements(node: Tag) -> bool:
    return any(isinstance(child, Tag) for child in node.children)


def attr(node: Tag, name: str) -> Optional[str]:
    """Return an attribute value, or None when the attribute is missing."""
    value = node.attrs.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return value


def has_attr(node: Tag, name: str) -> bool:
    return name in node.attrs


def tokens(node: Tag, name: str) -> List[str]:
    """Split a space-separated attribute into tokens, keeping order."""
    value = attr(node, name)
    if not value:
        return []
    return value.split()


def class_list(node: Tag) -> List[str]:
    """The element's class tokens, in source order and without duplicates."""
    seen: List[str] = []
    for token in tokens(node, "class"):
        if token not in seen:
            seen.append(token)
    return seen


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip(_HTML_WHITESPACE)


def raw_text(node: Tag) -> str:
    """Concatenate every text node below ``node`` without normalization."""
    parts: List[str] = []
    stack = list(reversed(list(node.children)))
    while stack:
        current = stack.pop()
        if isinstance(current, Tag):
            stack.extend(reversed(list(current.children)))
        elif isinstance(current, NavigableString) and not isinstance(current, PreformattedString):
            parts.append(str(current))
    return "".join(parts)


def text_content(node: Tag) -> str:
    """Whitespace-collapsed text of ``node``.

    Comments, doctypes and processing instructions are skipped, as is the
    content of nested script, style and template elements.
    """
    parts: List[str] = []
    stack = list(reversed(list(node.children)))
    while stack:
        current = stack.pop()
        if isinstance(current, Tag):
            if current.name in _OPAQUE_TEXT_TAGS:
                continue
            stack.extend(reversed(list(current.children)))
        elif isinstance(current, NavigableString) and not isinstance(current, PreformattedString):
            parts.append(str(current))
    return collapse_whitespace("".join(parts))


def descendants(node: Tag) -> Iterator[Tag]:
    """Lazily yield every element below ``node``, depth-first in document order."""
    for child in node.descendants:
        if isinstance(child, Tag):
            yield child


def inner_html(node: Tag) -> str:
    """Serialize the children of ``node`` back to markup."""
    return node.decode_contents()
