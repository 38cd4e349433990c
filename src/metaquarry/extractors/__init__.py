"""
Per-format extractors.

``EXTRACTORS`` lists one instance per output field, in output order.
"""

from __future__ import annotations

from typing import Dict, List

from .jsonld import JsonLdExtractor
from .links import ManifestLinkExtractor, OEmbedExtractor, RelLinksExtractor
from .microdata import MicrodataExtractor
from .microformats import MicroformatsExtractor
from .protocols import ExtractionContext, FormatExtractor
from .rdfa import RdfaExtractor
from .tags import DublinCoreExtractor, MetaExtractor, OpenGraphExtractor, TwitterExtractor

EXTRACTORS: List[FormatExtractor] = [
    MetaExtractor(),
    OpenGraphExtractor(),
    TwitterExtractor(),
    JsonLdExtractor(),
    MicrodataExtractor(),
    MicroformatsExtractor(),
    RdfaExtractor(),
    DublinCoreExtractor(),
    ManifestLinkExtractor(),
    OEmbedExtractor(),
    RelLinksExtractor(),
]

EXTRACTORS_BY_NAME: Dict[str, FormatExtractor] = {extractor.name: extractor for extractor in EXTRACTORS}

__all__ = [
    "EXTRACTORS",
    "EXTRACTORS_BY_NAME",
    "ExtractionContext",
    "FormatExtractor",
    "MetaExtractor",
    "OpenGraphExtractor",
    "TwitterExtractor",
    "DublinCoreExtractor",
    "JsonLdExtractor",
    "MicrodataExtractor",
    "MicroformatsExtractor",
    "RdfaExtractor",
    "ManifestLinkExtractor",
    "OEmbedExtractor",
    "RelLinksExtractor",
]
