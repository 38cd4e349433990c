"""
Property-based tests: extraction is deterministic and never fails in an
unexpected way, whatever the markup looks like.
"""

import json

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from metaquarry import ExtractionResult, MetaQuarryError, extract_all

FRAGMENTS = [
    '<meta property="og:title" content="T">',
    '<meta property="og:image" content="/a.png">',
    '<meta name="twitter:card" content="summary">',
    '<meta name="DC.subject" content="a; b">',
    '<link rel="canonical alternate" href="/p">',
    '<link rel="manifest" href="/m.json">',
    '<script type="application/ld+json">{"@type": "Thing"}</script>',
    '<script type="application/ld+json">{broken</script>',
    "<div itemscope>",
    '<span itemprop="name">N</span>',
    '<div itemscope itemref="r" id="r">',
    '<div class="h-card">',
    '<img src="a.jpg" alt="Jo">',
    '<span class="p-name dt-start">2024-05-01</span>',
    '<div vocab="http://schema.org/" typeof="Person">',
    '<span property="name">Ana</span>',
    '<a rel="http://ex.org/knows">',
    '<span inlist property="http://ex.org/p">x</span>',
    "</div>",
    "</span>",
    "</a>",
    "text &amp; more",
    "<!-- comment -->",
]

markup = st.lists(st.sampled_from(FRAGMENTS), max_size=25).map("".join)


@pytest.mark.integration
class TestExtractionProperties:
    """Invariants over generated documents."""

    @given(html=markup, base=st.sampled_from([None, "https://x.test/", "https://x.test/dir/page"]))
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture])
    def test_deterministic(self, html, base):
        """Test two runs over the same input produce identical text."""
        assert extract_all(html, base) == extract_all(html, base)

    @given(html=markup)
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture])
    def test_present_fields_are_json(self, html):
        """Test every present field decodes as JSON and absent fields are None."""
        result = extract_all(html, "https://x.test/")

        for name, text in result.to_dict().items():
            assert name in ExtractionResult.field_names()
            if text is not None:
                assert json.loads(text) not in ({}, [], "")

    @given(html=st.text(max_size=300))
    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture])
    def test_arbitrary_text_fails_only_with_library_errors(self, html):
        """Test arbitrary text either extracts or raises a MetaQuarryError."""
        try:
            result = extract_all(html)
        except MetaQuarryError:
            return
        assert isinstance(result, ExtractionResult)
