"""
Defines the Prometheus metrics recorded while extracting.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, multiple interpreters sharing the
# default registry) must not raise "Duplicated timeseries" errors.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race; use the collector that won.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "extractions_total": Counter(
            "metaquarry_extractions_total",
            "Extractor runs by format and outcome (found, empty, failed)",
            ["format", "outcome"],
        ),
        "extraction_seconds": Histogram(
            "metaquarry_extraction_seconds",
            "Time spent in a single format extractor",
            ["format"],
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()


def record_extraction(format_name: str, outcome: str, seconds: float) -> None:
    """Count one extractor run and observe its duration."""
    METRICS["extractions_total"].labels(format=format_name, outcome=outcome).inc()
    METRICS["extraction_seconds"].labels(format=format_name).observe(seconds)
