"""
Value model and result types shared by every extractor.

Extractors build plain JSON-compatible Python values (dict, list, str, float,
bool, None). Dicts keep insertion order, so serializing the same value twice
always yields the same text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def to_json_text(value: JsonValue, indent: Optional[int] = None) -> str:
    """Serialize a value model instance to JSON text."""
    if indent is None:
        return json.dumps(value, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    return json.dumps(value, ensure_ascii=False, allow_nan=False, indent=indent)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def from_json_text(text: str) -> Any:
    """Decode standard JSON text.

    ``NaN``, ``Infinity`` and ``-Infinity`` are rejected with ``ValueError``
    like any other syntax error.
    """
    return json.loads(text, parse_constant=_reject_constant)


def is_meaningful(value: JsonValue) -> bool:
    """True when a value carries at least one item worth reporting."""
    if value is None:
        return False
    if isinstance(value, (dict, list, str)):
        return len(value) > 0
    return True


# ---------------------------------------------------------------------------
# Microdata
# ---------------------------------------------------------------------------


@dataclass
class MicrodataItem:
    """An item built from one ``itemscope`` element."""

    types: List[str] = field(default_factory=list)
    id: Optional[str] = None
    properties: Dict[str, List[Union[str, "MicrodataItem"]]] = field(default_factory=dict)

    def add(self, name: str, value: Union[str, "MicrodataItem"]) -> None:
        self.properties.setdefault(name, []).append(value)

    def to_value(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.types:
            result["type"] = list(self.types)
        if self.id is not None:
            result["id"] = self.id
        result["properties"] = {
            name: [v.to_value() if isinstance(v, MicrodataItem) else v for v in values]
            for name, values in self.properties.items()
        }
        return result


# ---------------------------------------------------------------------------
# Microformats
# ---------------------------------------------------------------------------


@dataclass
class MicroformatItem:
    """A parsed microformats2 item."""

    types: List[str] = field(default_factory=list)
    properties: Dict[str, List[Any]] = field(default_factory=dict)
    children: List["MicroformatItem"] = field(default_factory=list)
    value: Optional[Any] = None

    def add(self, name: str, value: Any) -> None:
        self.properties.setdefault(name, []).append(value)

    def to_value(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": list(self.types), "properties": {}}
        for name, values in self.properties.items():
            result["properties"][name] = [v.to_value() if isinstance(v, MicroformatItem) else v for v in values]
        if self.children:
            result["children"] = [child.to_value() for child in self.children]
        if self.value is not None:
            result["value"] = self.value
        return result


# ---------------------------------------------------------------------------
# RDFa
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RdfaResource:
    """An IRI or a blank node id (``_:b0``)."""

    value: str

    @property
    def is_blank(self) -> bool:
        return self.value.startswith("_:")

    def to_value(self) -> Dict[str, Any]:
        return {"type": "bnode" if self.is_blank else "uri", "value": self.value}


@dataclass(frozen=True)
class RdfaLiteral:
    value: str
    lang: Optional[str] = None
    datatype: Optional[str] = None

    def to_value(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": "literal", "value": self.value}
        if self.lang:
            result["lang"] = self.lang
        if self.datatype:
            result["datatype"] = self.datatype
        return result


@dataclass(frozen=True)
class RdfaTriple:
    subject: str
    predicate: str
    object: Union[RdfaResource, RdfaLiteral]

    def to_value(self) -> Dict[str, Any]:
        return {"subject": self.subject, "predicate": self.predicate, "object": self.object.to_value()}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExtractionResult:
    """One JSON text per format; a field is None when its format was not found."""

    meta: Optional[str] = None
    open_graph: Optional[str] = None
    twitter: Optional[str] = None
    json_ld: Optional[str] = None
    microdata: Optional[str] = None
    microformats: Optional[str] = None
    rdfa: Optional[str] = None
    dublin_core: Optional[str] = None
    manifest: Optional[str] = None
    oembed: Optional[str] = None
    rel_links: Optional[str] = None

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in self.field_names()}

    def as_json(self) -> Dict[str, JsonValue]:
        """Decode every present field back into Python values."""
        return {name: (json.loads(text) if text is not None else None) for name, text in self.to_dict().items()}

    def present_fields(self) -> List[str]:
        return [name for name, text in self.to_dict().items() if text is not None]


@dataclass(frozen=True)
class ManifestDiscovery:
    """A discovered ``<link rel="manifest">`` and, if supplied, the normalized manifest."""

    href: str
    manifest: Optional[str] = None

    def to_value(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"href": self.href}
        if self.manifest is not None:
            result["manifest"] = json.loads(self.manifest)
        return result
