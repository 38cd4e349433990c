"""Utility helpers for MetaQuarry."""

from .urls import is_absolute_iri, resolve_url

__all__ = ["resolve_url", "is_absolute_iri"]
