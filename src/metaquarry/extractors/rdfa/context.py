"""
RDFa evaluation context and IRI/CURIE resolution.

The context is immutable: every element derives its own copy with
``dataclasses.replace`` so siblings never see each other's local prefix,
vocabulary or language changes. The list mapping is the one mutable member;
it is owned by the element that created it and completed when that element
is left.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ...utils.urls import is_absolute_iri, resolve_url

RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XSD = "http://www.w3.org/2001/XMLSchema#"
XHV = "http://www.w3.org/1999/xhtml/vocab#"

RDF_TYPE = RDF + "type"
RDF_FIRST = RDF + "first"
RDF_REST = RDF + "rest"
RDF_NIL = RDF + "nil"
RDF_XML_LITERAL = RDF + "XMLLiteral"
RDF_HTML = RDF + "HTML"

# A list member is either a resource or a literal.
ListMapping = Dict[str, List[object]]


@dataclass(frozen=True)
class IncompleteTriple:
    """A ``rel``/``rev`` predicate waiting for a subject from a descendant.

    ``target`` is set for ``inlist`` rels: the list the completing subject is
    appended to.
    """

    predicate: str
    forward: bool = True
    target: Optional[List[object]] = field(default=None, compare=False)


class BlankNodes:
    """Allocates ``_:b0``, ``_:b1``, ... for one extraction."""

    def __init__(self) -> None:
        self._count = 0
        self._named: Dict[str, str] = {}

    def new(self) -> str:
        node = f"_:b{self._count}"
        self._count += 1
        return node

    def named(self, name: str) -> str:
        """The same blank node for every use of ``_:name`` in a document."""
        if name not in self._named:
            self._named[name] = self.new()
        return self._named[name]


@dataclass(frozen=True)
class EvaluationContext:
    base: str
    parent_subject: str
    parent_object: Optional[str]
    prefixes: Dict[str, str]
    vocab: Optional[str] = None
    language: Optional[str] = None
    incomplete: Tuple[IncompleteTriple, ...] = ()
    list_mapping: ListMapping = field(default_factory=dict, compare=False)

    # --- resolution ---

    def expand_curie(self, value: str) -> Optional[str]:
        """Expand ``prefix:reference`` with a known prefix, or return None."""
        if ":" not in value:
            return None
        prefix, reference = value.split(":", 1)
        if prefix == "_":
            return None
        if prefix == "":
            return XHV + reference
        iri = self.prefixes.get(prefix.lower())
        if iri is None:
            return None
        return iri + reference

    def resolve_term(self, token: str) -> Optional[str]:
        """Resolve a term, CURIE or absolute IRI (``property``, ``rel``, ``typeof`` ...)."""
        if ":" in token:
            expanded = self.expand_curie(token)
            if expanded is not None:
                return expanded
            if token.startswith("_:"):
                return None
            return token if is_absolute_iri(token) else None
        if self.vocab:
            return self.vocab + token
        return None

    def resolve_terms(self, tokens: List[str]) -> List[str]:
        resolved = []
        for token in tokens:
            iri = self.resolve_term(token)
            if iri is not None:
                resolved.append(iri)
        return resolved

    def resolve_resource(self, value: str, bnodes: BlankNodes) -> Optional[str]:
        """Resolve a safe CURIE, CURIE or relative IRI (``about``, ``resource``)."""
        value = value.strip()
        if value.startswith("[") and value.endswith("]"):
            inner = value[1:-1].strip()
            if inner.startswith("_:"):
                return bnodes.named(inner[2:])
            return self.expand_curie(inner)
        if value.startswith("_:"):
            return bnodes.named(value[2:])
        expanded = self.expand_curie(value)
        if expanded is not None:
            return expanded
        return self.resolve_iri(value)

    def resolve_iri(self, value: str) -> str:
        """Resolve a plain IRI attribute (``href``, ``src``) against the base."""
        return resolve_url(self.base or None, value)


# ---------------------------------------------------------------------------
# Prefix declarations
# ---------------------------------------------------------------------------


def parse_prefix_attribute(value: str) -> Dict[str, str]:
    """Parse ``prefix="foaf: http://xmlns.com/foaf/0.1/ dc: ..."``."""
    mappings: Dict[str, str] = {}
    parts = value.split()
    index = 0
    while index < len(parts) - 1:
        token = parts[index]
        if token.endswith(":") and len(token) > 1:
            prefix = token[:-1].lower()
            if prefix != "_":
                mappings[prefix] = parts[index + 1]
            index += 2
        else:
            index += 1
    return mappings


# ---------------------------------------------------------------------------
# Datatype inference for the datetime attribute
# ---------------------------------------------------------------------------

_ZONE = r"(?:Z|[+-]\d{2}:\d{2})?"
_DATETIME_TYPES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"^-?P(?=\d|T\d)(?:\d+Y)?(?:\d+M)?(?:\d+D)?(?:T(?=\d)(?:\d+H)?(?:\d+M)?(?:\d+(?:\.\d+)?S)?)?$"), "duration"),
    (re.compile(r"^-?\d{4,}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?" + _ZONE + "$"), "dateTime"),
    (re.compile(r"^-?\d{4,}-\d{2}-\d{2}" + _ZONE + "$"), "date"),
    (re.compile(r"^\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?" + _ZONE + "$"), "time"),
    (re.compile(r"^-?\d{4,}-\d{2}$"), "gYearMonth"),
    (re.compile(r"^-?\d{4,}$"), "gYear"),
]


def infer_datetime_type(value: str) -> Optional[str]:
    """The XML Schema datatype a ``datetime`` value conforms to, if any."""
    value = value.strip()
    for pattern, name in _DATETIME_TYPES:
        if pattern.match(value):
            return XSD + name
    return None

