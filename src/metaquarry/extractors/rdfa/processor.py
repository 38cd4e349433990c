"""
RDFa Core 1.1 triple extraction over an HTML document.

The processor walks the tree depth-first. At each element it derives a new
evaluation context, establishes the new subject and current object resource,
emits type, relationship and property triples, completes the parent's
hanging rels and recurses. Unresolvable terms and CURIEs are dropped without
aborting the walk.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Union

import structlog
from bs4 import BeautifulSoup, Tag

from ...document import attr, children, has_attr, inner_html, text_content, tokens
from ...models import RdfaLiteral, RdfaResource, RdfaTriple
from ...utils.urls import resolve_url
from ..protocols import ExtractionContext
from .context import (
    RDF_FIRST,
    RDF_HTML,
    RDF_NIL,
    RDF_REST,
    RDF_TYPE,
    RDF_XML_LITERAL,
    BlankNodes,
    EvaluationContext,
    IncompleteTriple,
    ListMapping,
    infer_datetime_type,
    parse_prefix_attribute,
)

logger = structlog.get_logger(__name__)

RdfaObject = Union[RdfaResource, RdfaLiteral]


class RdfaProcessor:
    """Extracts the triples of one document."""

    def __init__(
        self,
        document: BeautifulSoup,
        base_url: Optional[str] = None,
        prefixes: Optional[Dict[str, str]] = None,
    ) -> None:
        self.document = document
        self.base = self._document_base(document, base_url)
        self.prefixes = {key.lower(): value for key, value in (prefixes or {}).items()}
        self.bnodes = BlankNodes()
        self.triples: List[RdfaTriple] = []

    @staticmethod
    def _document_base(document: BeautifulSoup, base_url: Optional[str]) -> str:
        base_element = document.find("base", href=True)
        if isinstance(base_element, Tag):
            href = (attr(base_element, "href") or "").strip()
            if href:
                return resolve_url(base_url, href)
        return base_url or ""

    def run(self) -> List[RdfaTriple]:
        # Lists whose subject is the document itself collect here.
        root_lists: ListMapping = {}
        context = EvaluationContext(
            base=self.base,
            parent_subject=self.base,
            parent_object=self.base,
            prefixes=self.prefixes,
            list_mapping=root_lists,
        )
        for element in children(self.document):
            self._process(element, context)
        self._complete_lists(self.base, root_lists)
        return self.triples

    def _emit(self, subject: str, predicate: str, obj: RdfaObject) -> None:
        self.triples.append(RdfaTriple(subject=subject, predicate=predicate, object=obj))

    # --- per-element processing ---

    def _local_context(self, element: Tag, parent: EvaluationContext) -> EvaluationContext:
        """Apply the element's own base, vocab, prefix and language declarations."""
        changes: Dict[str, object] = {}

        xml_base = attr(element, "xml:base")
        if xml_base is not None:
            changes["base"] = resolve_url(parent.base or None, xml_base)

        vocab = attr(element, "vocab")
        if vocab is not None:
            vocab = vocab.strip()
            changes["vocab"] = resolve_url(parent.base or None, vocab) if vocab else None

        declared: Dict[str, str] = {}
        for name, value in element.attrs.items():
            if name.startswith("xmlns:") and isinstance(value, str) and len(name) > len("xmlns:"):
                declared[name[len("xmlns:") :].lower()] = value.strip()
        prefix_attr = attr(element, "prefix")
        if prefix_attr:
            declared.update(parse_prefix_attribute(prefix_attr))
        if declared:
            changes["prefixes"] = {**parent.prefixes, **declared}

        lang = attr(element, "xml:lang")
        if lang is None:
            lang = attr(element, "lang")
        if lang is not None:
            changes["language"] = lang.strip() or None

        return replace(parent, **changes) if changes else parent

    def _process(self, element: Tag, parent: EvaluationContext) -> None:
        ctx = self._local_context(element, parent)
        is_root = element.name == "html"

        rel_tokens = tokens(element, "rel")
        rev_tokens = tokens(element, "rev")
        has_property = has_attr(element, "property")
        if has_property:
            # With property present, only CURIEs and IRIs count in rel/rev.
            rel_tokens = [t for t in rel_tokens if ":" in t]
            rev_tokens = [t for t in rev_tokens if ":" in t]
        has_rel = has_attr(element, "rel") and bool(rel_tokens or not has_property)
        has_rev = has_attr(element, "rev") and bool(rev_tokens or not has_property)

        rels = ctx.resolve_terms(rel_tokens)
        revs = ctx.resolve_terms(rev_tokens)
        properties = ctx.resolve_terms(tokens(element, "property"))
        types = ctx.resolve_terms(tokens(element, "typeof"))
        has_typeof = has_attr(element, "typeof")
        inlist = has_attr(element, "inlist")

        about = self._resource_attr(element, "about", ctx)
        resource = self._resource_attr(element, "resource", ctx)
        href = self._iri_attr(element, "href", ctx)
        src = self._iri_attr(element, "src", ctx)

        skip = False
        new_subject: Optional[str] = None
        current_object: Optional[str] = None
        typed_resource: Optional[str] = None

        if not has_rel and not has_rev:
            if has_property and not has_attr(element, "content") and not has_attr(element, "datatype"):
                if about is not None:
                    new_subject = about
                elif is_root:
                    new_subject = ctx.resolve_iri("")
                elif ctx.parent_object is not None:
                    new_subject = ctx.parent_object
                if has_typeof:
                    if about is not None:
                        typed_resource = about
                    else:
                        typed_resource = self._first(resource, href, src) or self.bnodes.new()
                        current_object = typed_resource
            else:
                new_subject = self._first(about, resource, href, src)
                if new_subject is None:
                    if is_root:
                        new_subject = ctx.resolve_iri("")
                    elif has_typeof:
                        new_subject = self.bnodes.new()
                    elif ctx.parent_object is not None:
                        new_subject = ctx.parent_object
                        skip = not has_property
                if has_typeof:
                    typed_resource = new_subject
        else:
            new_subject = about
            if has_typeof and about is not None:
                typed_resource = about
            if new_subject is None:
                if is_root:
                    new_subject = ctx.resolve_iri("")
                elif ctx.parent_object is not None:
                    new_subject = ctx.parent_object
            current_object = self._first(resource, href, src)
            if current_object is None and has_typeof and about is None:
                current_object = self.bnodes.new()
            if has_typeof and about is None:
                typed_resource = current_object

        if typed_resource is not None:
            for type_iri in types:
                self._emit(typed_resource, RDF_TYPE, RdfaResource(type_iri))

        list_mapping: ListMapping = ctx.list_mapping
        if new_subject is not None and new_subject != ctx.parent_object:
            list_mapping = {}

        incomplete: List[IncompleteTriple] = []
        if current_object is not None and new_subject is not None:
            for predicate in rels:
                if inlist:
                    list_mapping.setdefault(predicate, []).append(RdfaResource(current_object))
                else:
                    self._emit(new_subject, predicate, RdfaResource(current_object))
            for predicate in revs:
                self._emit(current_object, predicate, RdfaResource(new_subject))
        elif has_rel or has_rev:
            for predicate in rels:
                if inlist:
                    target = list_mapping.setdefault(predicate, [])
                    incomplete.append(IncompleteTriple(predicate, forward=True, target=target))
                else:
                    incomplete.append(IncompleteTriple(predicate, forward=True))
            for predicate in revs:
                incomplete.append(IncompleteTriple(predicate, forward=False))
            current_object = self.bnodes.new()

        if properties and new_subject is not None:
            value = self._property_value(element, ctx, has_rel or has_rev, typed_resource, about, resource, href, src)
            for predicate in properties:
                if inlist:
                    list_mapping.setdefault(predicate, []).append(value)
                else:
                    self._emit(new_subject, predicate, value)

        if not skip and new_subject is not None:
            for hanging in ctx.incomplete:
                if hanging.target is not None:
                    hanging.target.append(RdfaResource(new_subject))
                elif hanging.forward:
                    self._emit(ctx.parent_subject, hanging.predicate, RdfaResource(new_subject))
                else:
                    self._emit(new_subject, hanging.predicate, RdfaResource(ctx.parent_subject))

        if skip:
            child_ctx = replace(ctx, list_mapping=list_mapping)
        else:
            subject = new_subject if new_subject is not None else ctx.parent_subject
            child_ctx = replace(
                ctx,
                parent_subject=subject,
                parent_object=self._first(current_object, new_subject, ctx.parent_subject),
                incomplete=tuple(incomplete),
                list_mapping=list_mapping,
            )
        for child in children(element):
            self._process(child, child_ctx)

        if list_mapping is not ctx.list_mapping and new_subject is not None:
            self._complete_lists(new_subject, list_mapping)

    # --- helpers ---

    @staticmethod
    def _first(*values: Optional[str]) -> Optional[str]:
        for value in values:
            if value is not None:
                return value
        return None

    def _resource_attr(self, element: Tag, name: str, ctx: EvaluationContext) -> Optional[str]:
        value = attr(element, name)
        if value is None:
            return None
        return ctx.resolve_resource(value, self.bnodes)

    @staticmethod
    def _iri_attr(element: Tag, name: str, ctx: EvaluationContext) -> Optional[str]:
        value = attr(element, name)
        if value is None:
            return None
        return ctx.resolve_iri(value)

    def _property_value(
        self,
        element: Tag,
        ctx: EvaluationContext,
        has_rel_or_rev: bool,
        typed_resource: Optional[str],
        about: Optional[str],
        resource: Optional[str],
        href: Optional[str],
        src: Optional[str],
    ) -> RdfaObject:
        content = attr(element, "content")
        datatype_attr = attr(element, "datatype")
        if datatype_attr is not None:
            datatype_attr = datatype_attr.strip()
            datatype = ctx.resolve_term(datatype_attr) if datatype_attr else None
            if datatype in (RDF_XML_LITERAL, RDF_HTML):
                return RdfaLiteral(inner_html(element), datatype=datatype)
            value = content if content is not None else text_content(element)
            if datatype:
                return RdfaLiteral(value, datatype=datatype)
            return RdfaLiteral(value, lang=ctx.language)
        if content is not None:
            return RdfaLiteral(content, lang=ctx.language)
        datetime_value = attr(element, "datetime")
        if datetime_value is not None:
            inferred = infer_datetime_type(datetime_value)
            if inferred:
                return RdfaLiteral(datetime_value.strip(), datatype=inferred)
            return RdfaLiteral(datetime_value.strip(), lang=ctx.language)
        if not has_rel_or_rev:
            target = self._first(resource, href, src)
            if target is not None:
                return RdfaResource(target)
        if typed_resource is not None and about is None:
            return RdfaResource(typed_resource)
        return RdfaLiteral(text_content(element), lang=ctx.language)

    def _complete_lists(self, subject: str, list_mapping: ListMapping) -> None:
        for predicate, members in list_mapping.items():
            if not members:
                self._emit(subject, predicate, RdfaResource(RDF_NIL))
                continue
            nodes = [self.bnodes.new() for _ in members]
            for index, (node, member) in enumerate(zip(nodes, members)):
                self._emit(node, RDF_FIRST, member)  # type: ignore[arg-type]
                rest = nodes[index + 1] if index + 1 < len(nodes) else RDF_NIL
                self._emit(node, RDF_REST, RdfaResource(rest))
            self._emit(subject, predicate, RdfaResource(nodes[0]))


class RdfaExtractor:
    name = "rdfa"

    def extract(self, context: ExtractionContext) -> List[dict]:
        processor = RdfaProcessor(context.document, context.base_url, context.rdfa_prefixes)
        triples = processor.run()
        logger.debug("rdfa_extracted", triples=len(triples))
        return [triple.to_value() for triple in triples]
