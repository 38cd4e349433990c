"""
Test configuration for MetaQuarry.

Provides fixtures for parsing documents, isolating configuration and
resetting the per-thread error slot between tests.
"""

# Standard library imports
import logging
from typing import Callable, Optional

# Third-party imports
import pytest
import structlog

# Local imports
from metaquarry.config import LazyConfig
from metaquarry.document import parse_document
from metaquarry.errors import clear_last_error
from metaquarry.extractors import ExtractionContext
from metaquarry.config.config import DEFAULT_RDFA_PREFIXES

BASE_URL = "https://x.test/"

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch, tmp_path):
    """Run every test with default settings and a clean error slot."""
    monkeypatch.chdir(tmp_path)
    LazyConfig.reset()
    clear_last_error()
    yield
    LazyConfig.reset()
    clear_last_error()


@pytest.fixture
def reset_logging():
    """Undo any logging configuration a test installs."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def make_context() -> Callable[..., ExtractionContext]:
    """Build an ExtractionContext from HTML text."""

    def _make(html: str, base_url: Optional[str] = None, manifest_json: Optional[str] = None) -> ExtractionContext:
        return ExtractionContext(
            document=parse_document(html),
            base_url=base_url,
            manifest_json=manifest_json,
            rdfa_prefixes=dict(DEFAULT_RDFA_PREFIXES),
        )

    return _make
