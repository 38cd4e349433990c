"""
ExtractionManager: runs the per-format extractors over one parsed document.

Each extractor runs inside its own guard. A failure is logged, counted and
turned into absence for that field only, so one badly authored block never
hides well-formed metadata elsewhere on the page.
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING, Dict, Iterable, Optional

import structlog
from structlog.contextvars import bound_contextvars

from .config import settings
from .document import parse_document
from .errors import InternalExtractionError
from .extractors import EXTRACTORS_BY_NAME, ExtractionContext, FormatExtractor
from .extractors.links import ManifestLinkExtractor
from .extractors.manifest import parse_manifest_document
from .models import ExtractionResult, ManifestDiscovery, is_meaningful, to_json_text
from .observability.metrics import record_extraction

if TYPE_CHECKING:
    from .config.config import Config

logger = structlog.get_logger(__name__)


class ExtractionManager:
    """
    Runs extractors against a document and assembles their JSON output.

    Args:
        config: Configuration to use; defaults to the lazily loaded settings
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config if config is not None else settings
        self.logger = logger.bind(component="ExtractionManager")
        self._extractors: Dict[str, FormatExtractor] = dict(EXTRACTORS_BY_NAME)

    def build_context(
        self, html: str, base_url: Optional[str] = None, manifest_json: Optional[str] = None
    ) -> ExtractionContext:
        document = parse_document(html, self.config.extraction.html_parser)
        return ExtractionContext(
            document=document,
            base_url=base_url,
            manifest_json=manifest_json,
            rdfa_prefixes=dict(self.config.rdfa.default_prefixes),
        )

    def extract_all(
        self,
        html: str,
        base_url: Optional[str] = None,
        manifest_json: Optional[str] = None,
        formats: Optional[Iterable[str]] = None,
    ) -> ExtractionResult:
        """Run every enabled extractor; failures are contained per format."""
        enabled = set(self.config.extraction.enabled_formats)
        if formats is not None:
            enabled &= set(formats)

        with bound_contextvars(extraction_id=uuid.uuid4().hex[:12]):
            context = self.build_context(html, base_url, manifest_json)
            fields: Dict[str, Optional[str]] = {}
            for name in ExtractionResult.field_names():
                if name in enabled:
                    fields[name] = self.run(name, context, contain=True)
            result = ExtractionResult(**fields)
            self.logger.debug("extraction_completed", base_url=base_url, present=result.present_fields())
        return result

    def extract_one(self, name: str, html: str, base_url: Optional[str] = None) -> Optional[str]:
        """Run a single extractor; an unexpected failure raises InternalExtractionError."""
        with bound_contextvars(extraction_id=uuid.uuid4().hex[:12]):
            context = self.build_context(html, base_url)
            return self.run(name, context, contain=False)

    def discover_manifest(
        self, html: str, base_url: Optional[str] = None, manifest_json: Optional[str] = None
    ) -> Optional[ManifestDiscovery]:
        """Locate the manifest link; a malformed supplied manifest raises MalformedManifestError."""
        context = self.build_context(html, base_url, manifest_json)
        start = time.perf_counter()
        discovery = ManifestLinkExtractor().discover(context, strict=True)
        self._record("manifest", "found" if discovery else "empty", time.perf_counter() - start)
        return discovery

    def parse_manifest(self, manifest_json: str, base_url: Optional[str] = None) -> str:
        manifest = parse_manifest_document(manifest_json, base_url)
        return to_json_text(manifest, self.config.extraction.json_indent)

    def run(self, name: str, context: ExtractionContext, contain: bool = True) -> Optional[str]:
        """Run one extractor and serialize its value, or None when nothing was found."""
        extractor = self._extractors[name]
        start = time.perf_counter()
        try:
            value = extractor.extract(context)
            text = to_json_text(value, self.config.extraction.json_indent) if is_meaningful(value) else None
        except Exception as e:
            self._record(name, "failed", time.perf_counter() - start)
            self.logger.warning("extractor_failed", format=name, error=str(e), error_type=type(e).__name__)
            if contain:
                return None
            raise InternalExtractionError(f"{name} extraction failed: {e}") from e

        self._record(name, "found" if text is not None else "empty", time.perf_counter() - start)
        self.logger.debug("extractor_finished", format=name, found=text is not None)
        return text

    def _record(self, name: str, outcome: str, seconds: float) -> None:
        if self.config.monitoring.metrics_enabled:
            record_extraction(name, outcome, seconds)
