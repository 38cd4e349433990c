"""
Tests for ExtractionManager: format selection, containment and metrics.
"""

import json

import pytest

from metaquarry.aggregator import ExtractionManager
from metaquarry.config import Config
from metaquarry.config.config import ExtractionSettings, MonitoringConfig
from metaquarry.errors import InternalExtractionError
from metaquarry.extractors.microdata import MicrodataExtractor
from metaquarry.extractors import EXTRACTORS_BY_NAME
from metaquarry.models import ExtractionResult, from_json_text, is_meaningful, to_json_text
from tests.helpers.metric_delta import metric_delta

PAGE = (
    '<html lang="en"><head><title>T</title>'
    '<meta property="og:title" content="OG"></head>'
    '<body><div itemscope><span itemprop="n">1</span></div></body></html>'
)


def _boom(self, context):
    raise RuntimeError("broken microdata")


@pytest.mark.unit
class TestExtractionManager:
    """Running extractors over one document."""

    def test_fields_in_order(self):
        """Test the result has one field per format in output order."""
        assert ExtractionResult.field_names() == (
            "meta",
            "open_graph",
            "twitter",
            "json_ld",
            "microdata",
            "microformats",
            "rdfa",
            "dublin_core",
            "manifest",
            "oembed",
            "rel_links",
        )

    def test_extract_all(self):
        """Test present formats are JSON text and absent ones are None."""
        result = ExtractionManager(Config()).extract_all(PAGE)

        assert json.loads(result.meta) == {"language": "en", "title": "T"}
        assert json.loads(result.open_graph) == {"title": "OG"}
        assert json.loads(result.microdata) == [{"properties": {"n": ["1"]}}]
        assert result.twitter is None
        assert result.present_fields() == ["meta", "open_graph", "microdata", "rdfa"]

    def test_compact_and_indented_output(self):
        """Test json_indent controls serialization."""
        compact = ExtractionManager(Config()).extract_all(PAGE)
        indented = ExtractionManager(Config(extraction=ExtractionSettings(json_indent=2))).extract_all(PAGE)

        assert compact.open_graph == '{"title":"OG"}'
        assert indented.open_graph == '{\n  "title": "OG"\n}'

    def test_enabled_formats_and_selection(self):
        """Test disabled formats are skipped and a selection narrows further."""
        manager = ExtractionManager(Config(extraction=ExtractionSettings(enabled_formats=["meta", "open_graph"])))

        assert manager.extract_all(PAGE).present_fields() == ["meta", "open_graph"]
        assert manager.extract_all(PAGE, formats=["open_graph", "microdata"]).present_fields() == ["open_graph"]

    def test_failure_contained(self, monkeypatch):
        """Test a failing extractor leaves the other formats intact."""
        monkeypatch.setattr(MicrodataExtractor, "extract", _boom)

        with metric_delta("metaquarry_extractions_total", {"format": "microdata", "outcome": "failed"}):
            result = ExtractionManager(Config()).extract_all(PAGE)

        assert result.microdata is None
        assert json.loads(result.open_graph) == {"title": "OG"}

    def test_failure_raised_for_single_format(self, monkeypatch):
        """Test extract_one does not contain failures."""
        monkeypatch.setattr(MicrodataExtractor, "extract", _boom)

        with pytest.raises(InternalExtractionError, match="microdata"):
            ExtractionManager(Config()).extract_one("microdata", PAGE)

    def test_outcomes_counted(self):
        """Test found and empty outcomes are recorded."""
        with metric_delta("metaquarry_extractions_total", {"format": "open_graph", "outcome": "found"}):
            with metric_delta("metaquarry_extractions_total", {"format": "twitter", "outcome": "empty"}):
                ExtractionManager(Config()).extract_all(PAGE)

    def test_metrics_disabled(self):
        """Test nothing is recorded when metrics are off."""
        config = Config(monitoring=MonitoringConfig(metrics_enabled=False))

        with metric_delta("metaquarry_extractions_total", {"format": "open_graph", "outcome": "found"}, 0):
            ExtractionManager(config).extract_all(PAGE)

    def test_non_finite_value_never_serialized(self, monkeypatch):
        """Test a value holding NaN fails its own format only."""
        monkeypatch.setattr(MicrodataExtractor, "extract", lambda self, context: [{"n": float("nan")}])

        result = ExtractionManager(Config()).extract_all(PAGE)

        assert result.microdata is None
        assert json.loads(result.open_graph) == {"title": "OG"}

    def test_absent_formats_are_empty_values(self, make_context):
        """Test no extractor wraps empty members in a non-empty container."""
        context = make_context('<p>plain</p><script type="application/ld+json">42</script>')

        for name, extractor in EXTRACTORS_BY_NAME.items():
            assert not is_meaningful(extractor.extract(context)), name


@pytest.mark.unit
class TestJsonText:
    """Standard JSON in and out."""

    def test_non_finite_numbers_rejected(self):
        """Test NaN and Infinity are refused in both directions."""
        with pytest.raises(ValueError):
            to_json_text({"n": float("inf")})
        with pytest.raises(ValueError, match="NaN"):
            from_json_text('{"n": NaN}')

    def test_plain_json_round_trip(self):
        """Test ordinary documents decode unchanged."""
        assert from_json_text('{"b": [1, 2.5, null], "a": "x"}') == {"b": [1, 2.5, None], "a": "x"}
