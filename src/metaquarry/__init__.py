"""
MetaQuarry - structured metadata extraction from HTML.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .api import (
    extract_all,
    extract_dublin_core,
    extract_json_ld,
    extract_manifest,
    extract_meta,
    extract_microdata,
    extract_microformat_type,
    extract_microformats,
    extract_oembed,
    extract_open_graph,
    extract_rdfa,
    extract_rel_links,
    extract_twitter,
    parse_manifest,
    version,
)
from .config import Config
from .errors import (
    ErrorCode,
    InternalExtractionError,
    InvalidTextError,
    MalformedManifestError,
    MetaQuarryError,
    MissingInputError,
    last_error,
    last_error_message,
)
from .models import ExtractionResult, ManifestDiscovery

__all__ = [
    "__version__",
    "Config",
    "ErrorCode",
    "ExtractionResult",
    "ManifestDiscovery",
    "MetaQuarryError",
    "MissingInputError",
    "InvalidTextError",
    "MalformedManifestError",
    "InternalExtractionError",
    "extract_all",
    "extract_meta",
    "extract_open_graph",
    "extract_twitter",
    "extract_json_ld",
    "extract_microdata",
    "extract_microformats",
    "extract_microformat_type",
    "extract_rdfa",
    "extract_dublin_core",
    "extract_manifest",
    "extract_oembed",
    "extract_rel_links",
    "parse_manifest",
    "version",
    "last_error",
    "last_error_message",
]
