"""
Tests for RDFa triple extraction.
"""

import pytest

from metaquarry.extractors.rdfa import RdfaExtractor
from metaquarry.extractors.rdfa.context import (
    RDF_FIRST,
    RDF_NIL,
    RDF_REST,
    RDF_TYPE,
    XSD,
    infer_datetime_type,
    parse_prefix_attribute,
)

FOAF = "http://xmlns.com/foaf/0.1/"


def _triples(make_context, html, base_url=None):
    return RdfaExtractor().extract(make_context(html, base_url))


def _uri(value):
    return {"type": "uri", "value": value}


def _bnode(value):
    return {"type": "bnode", "value": value}


def _literal(value, **extra):
    return {"type": "literal", "value": value, **extra}


@pytest.mark.unit
class TestSubjectsAndProperties:
    """Subject establishment and property literals."""

    def test_vocab_and_typeof(self, make_context):
        """Test a typed blank node with a vocabulary term property."""
        html = '<div vocab="http://schema.org/" typeof="Person"><span property="name">Ana</span></div>'

        assert _triples(make_context, html) == [
            {"subject": "_:b0", "predicate": RDF_TYPE, "object": _uri("http://schema.org/Person")},
            {"subject": "_:b0", "predicate": "http://schema.org/name", "object": _literal("Ana")},
        ]

    def test_about_prefix_content_and_language(self, make_context, base_url):
        """Test about subjects, declared prefixes, content literals and rel links."""
        html = (
            '<html lang="en"><body prefix="foaf: http://xmlns.com/foaf/0.1/">'
            '<div about="/me"><span property="foaf:name" content="Me">x</span>'
            '<a rel="foaf:knows" href="/you">You</a></div></body></html>'
        )

        assert _triples(make_context, html, base_url) == [
            {"subject": "https://x.test/me", "predicate": FOAF + "name", "object": _literal("Me", lang="en")},
            {"subject": "https://x.test/me", "predicate": FOAF + "knows", "object": _uri("https://x.test/you")},
        ]

    def test_datetime_literal_typed(self, make_context):
        """Test a datetime attribute yields a typed literal."""
        html = '<div about="/e"><time property="http://ex.org/d" datetime="2024-05-01">May</time></div>'

        assert _triples(make_context, html) == [
            {"subject": "/e", "predicate": "http://ex.org/d", "object": _literal("2024-05-01", datatype=XSD + "date")}
        ]

    def test_property_with_typeof_links_new_node(self, make_context):
        """Test property plus typeof creates and links a typed blank node."""
        html = (
            '<div vocab="http://schema.org/"><div property="author" typeof="Person">'
            '<span property="name">Ann</span></div></div>'
        )

        assert _triples(make_context, html) == [
            {"subject": "_:b0", "predicate": RDF_TYPE, "object": _uri("http://schema.org/Person")},
            {"subject": "", "predicate": "http://schema.org/author", "object": _bnode("_:b0")},
            {"subject": "_:b0", "predicate": "http://schema.org/name", "object": _literal("Ann")},
        ]

    def test_vocab_scoped_to_element(self, make_context):
        """Test a vocabulary does not leak to siblings and unknown terms are dropped."""
        html = (
            '<div><p vocab="http://a.org/" about="/x"><span property="n">1</span></p>'
            '<p about="/y"><span property="n">2</span></p></div>'
        )

        triples = _triples(make_context, html)

        assert len(triples) == 1
        assert triples[0]["predicate"] == "http://a.org/n"

    def test_plain_html_has_no_triples(self, make_context):
        """Test markup without RDFa attributes yields nothing."""
        assert _triples(make_context, "<html><body><p>hello</p></body></html>", "https://x.test/") == []


@pytest.mark.unit
class TestRelationships:
    """Hanging rels and lists."""

    def test_hanging_rel_completed_by_children(self, make_context):
        """Test a rel without an object is completed by each child subject."""
        html = (
            '<div about="/a" rel="http://xmlns.com/foaf/0.1/knows">'
            '<div about="/b"></div><div about="/c"></div></div>'
        )

        assert _triples(make_context, html) == [
            {"subject": "/a", "predicate": FOAF + "knows", "object": _uri("/b")},
            {"subject": "/a", "predicate": FOAF + "knows", "object": _uri("/c")},
        ]

    def test_inlist_builds_rdf_list(self, make_context):
        """Test inlist values become an rdf:first/rdf:rest chain."""
        html = (
            '<div about="/a"><span property="http://ex.org/p" inlist>1</span>'
            '<span property="http://ex.org/p" inlist>2</span></div>'
        )

        assert _triples(make_context, html) == [
            {"subject": "_:b0", "predicate": RDF_FIRST, "object": _literal("1")},
            {"subject": "_:b0", "predicate": RDF_REST, "object": _bnode("_:b1")},
            {"subject": "_:b1", "predicate": RDF_FIRST, "object": _literal("2")},
            {"subject": "_:b1", "predicate": RDF_REST, "object": _uri(RDF_NIL)},
            {"subject": "/a", "predicate": "http://ex.org/p", "object": _bnode("_:b0")},
        ]

    def test_inlist_on_document_subject(self, make_context, base_url):
        """Test a list whose subject is the document is completed after the walk."""
        html = (
            '<html><body><p property="http://ex.org/p" inlist>a</p>'
            '<p property="http://ex.org/p" inlist>b</p></body></html>'
        )

        assert _triples(make_context, html, base_url) == [
            {"subject": "_:b0", "predicate": RDF_FIRST, "object": _literal("a")},
            {"subject": "_:b0", "predicate": RDF_REST, "object": _bnode("_:b1")},
            {"subject": "_:b1", "predicate": RDF_FIRST, "object": _literal("b")},
            {"subject": "_:b1", "predicate": RDF_REST, "object": _uri(RDF_NIL)},
            {"subject": base_url, "predicate": "http://ex.org/p", "object": _bnode("_:b0")},
        ]

    def test_document_subject_without_base(self, make_context):
        """Test document-level triples use the empty relative IRI when no base is known."""
        html = '<p property="http://schema.org/name">Ana</p><p property="http://ex.org/l" inlist>x</p>'

        triples = _triples(make_context, html)

        assert triples[0] == {"subject": "", "predicate": "http://schema.org/name", "object": _literal("Ana")}
        assert triples[-1] == {"subject": "", "predicate": "http://ex.org/l", "object": _bnode("_:b0")}


@pytest.mark.unit
class TestContextHelpers:
    """Prefix parsing and datatype inference."""

    def test_parse_prefix_attribute(self):
        """Test prefix declarations are lower-cased and paired."""
        assert parse_prefix_attribute("foaf: http://f/ DC: http://d/") == {"foaf": "http://f/", "dc": "http://d/"}

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024", "gYear"),
            ("2024-05", "gYearMonth"),
            ("2024-05-01", "date"),
            ("10:00", "time"),
            ("2024-05-01T10:00:00Z", "dateTime"),
            ("P1D", "duration"),
        ],
    )
    def test_infer_datetime_type(self, value, expected):
        """Test datetime values map to XML Schema types."""
        assert infer_datetime_type(value) == XSD + expected

    def test_unrecognized_datetime(self):
        """Test free text has no inferred type."""
        assert infer_datetime_type("May") is None
