"""
Protocols for pluggable per-format extraction strategies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, runtime_checkable

from bs4 import BeautifulSoup

from ..models import JsonValue


@dataclass(frozen=True)
class ExtractionContext:
    """Everything an extractor may read during one call.

    The document is shared by all extractors of a call and must not be
    modified.
    """

    document: BeautifulSoup
    base_url: Optional[str] = None
    manifest_json: Optional[str] = None
    rdfa_prefixes: Dict[str, str] = field(default_factory=dict)


@runtime_checkable
class FormatExtractor(Protocol):
    """Pluggable HTML-to-value strategy for one metadata format."""

    name: str

    def extract(self, context: ExtractionContext) -> JsonValue:
        """Extract one format from the document.

        Args:
            context: The parsed document and call options

        Returns:
            A JSON-compatible value, or None/an empty container when the
            format is not present. Only the top level is checked for
            emptiness, so a container must not be returned when all of its
            members are empty (``{"json_endpoints": []}``); leave such
            members out instead.
        """
        ...
