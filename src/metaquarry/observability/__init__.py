"""Logging and metrics for MetaQuarry."""

from __future__ import annotations

from .logging import configure_logging
from .metrics import METRICS, record_extraction

__all__ = ["configure_logging", "METRICS", "record_extraction", "export_prometheus"]


def export_prometheus() -> str:
    """Export metrics in Prometheus text format."""
    from prometheus_client import generate_latest

    return generate_latest().decode("utf-8")
