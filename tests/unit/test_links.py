"""
Tests for link discovery: manifest link, oEmbed endpoints and rel-links.
"""

import json

import pytest

from metaquarry.errors import MalformedManifestError
from metaquarry.extractors.links import ManifestLinkExtractor, OEmbedExtractor, RelLinksExtractor


@pytest.mark.unit
class TestRelLinksExtractor:
    """rel/href grouping."""

    def test_every_token_gets_the_url(self, make_context, base_url):
        """Test a multi-token rel is reported under each token."""
        html = '<link rel="canonical alternate" href="/p">'

        result = RelLinksExtractor().extract(make_context(html, base_url))

        assert result == {"canonical": ["https://x.test/p"], "alternate": ["https://x.test/p"]}

    def test_any_element_lowercased_and_duplicates_kept(self, make_context):
        """Test anchors count, tokens are lower-cased and repeats are kept."""
        html = '<a rel="Me" href="https://a.test/">a</a><link rel="me" href="https://a.test/"><a rel="" href="/x">x</a>'

        result = RelLinksExtractor().extract(make_context(html))

        assert result == {"me": ["https://a.test/", "https://a.test/"]}


@pytest.mark.unit
class TestOEmbedExtractor:
    """oEmbed endpoint discovery."""

    def test_json_and_xml_endpoints(self, make_context, base_url):
        """Test endpoints are split by format with titles kept."""
        html = (
            '<link rel="alternate" type="application/json+oembed" href="/oe?f=json" title="T">'
            '<link rel="alternate" type="text/xml+oembed" href="/oe?f=xml">'
            '<link rel="alternate" type="application/rss+xml" href="/feed">'
        )

        result = OEmbedExtractor().extract(make_context(html, base_url))

        assert result == {
            "json_endpoints": [{"href": "https://x.test/oe?f=json", "format": "json", "title": "T"}],
            "xml_endpoints": [{"href": "https://x.test/oe?f=xml", "format": "xml"}],
        }

    def test_absent(self, make_context):
        """Test no oEmbed links yields an empty object."""
        assert OEmbedExtractor().extract(make_context('<link rel="alternate" href="/x">')) == {}


@pytest.mark.unit
class TestManifestLinkExtractor:
    """Manifest link discovery."""

    def test_href_only(self, make_context, base_url):
        """Test the first manifest link is resolved."""
        html = '<link rel="manifest" href="/app.webmanifest"><link rel="manifest" href="/other.json">'

        discovery = ManifestLinkExtractor().discover(make_context(html, base_url))

        assert discovery.href == "https://x.test/app.webmanifest"
        assert discovery.manifest is None

    def test_manifest_resolved_against_its_href(self, make_context):
        """Test manifest URLs resolve relative to the manifest location."""
        html = '<link rel="manifest" href="/static/app.webmanifest">'
        manifest = '{"start_url": "./", "icons": [{"src": "icon.png"}]}'

        value = ManifestLinkExtractor().extract(make_context(html, "https://x.test/page", manifest))

        assert value == {
            "href": "https://x.test/static/app.webmanifest",
            "manifest": {"start_url": "https://x.test/static/", "icons": [{"src": "https://x.test/static/icon.png"}]},
        }

    def test_malformed_manifest_dropped_unless_strict(self, make_context, base_url):
        """Test a malformed manifest keeps the href, or raises when strict."""
        context = make_context('<link rel="manifest" href="/m.json">', base_url, "[1, 2]")

        discovery = ManifestLinkExtractor().discover(context)
        assert discovery.href == "https://x.test/m.json"
        assert discovery.manifest is None

        with pytest.raises(MalformedManifestError):
            ManifestLinkExtractor().discover(context, strict=True)

    def test_no_link(self, make_context):
        """Test a page without a manifest link reports nothing."""
        assert ManifestLinkExtractor().extract(make_context("<p>x</p>", None, "{}")) is None

    def test_discovery_value_is_json_ready(self, make_context):
        """Test the discovery value serializes cleanly."""
        value = ManifestLinkExtractor().extract(make_context('<link rel="manifest" href="m.json">'))

        assert json.loads(json.dumps(value)) == {"href": "m.json"}
