"""RDFa Core 1.1 triple extraction."""

from .processor import RdfaExtractor, RdfaProcessor

__all__ = ["RdfaExtractor", "RdfaProcessor"]
