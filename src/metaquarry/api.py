"""
Public extraction entry points.

Every function clears this thread's last-error slot on entry. A call-level
failure records its code and message in the slot and is raised as a
``MetaQuarryError`` subclass; nothing partial is ever returned.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

from . import __version__
from .aggregator import ExtractionManager
from .errors import (
    ErrorCode,
    InternalExtractionError,
    InvalidTextError,
    MetaQuarryError,
    MissingInputError,
    clear_last_error,
    last_error,
    last_error_message,
    set_last_error,
)
from .extractors.microformats import MicroformatsParser, items_of_type
from .models import ExtractionResult, ManifestDiscovery

TextInput = Union[str, bytes, bytearray]
F = TypeVar("F", bound=Callable[..., Any])

__all__ = [
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
    "ErrorCode",
]


def _entry_point(func: F) -> F:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        clear_last_error()
        try:
            return func(*args, **kwargs)
        except MetaQuarryError as e:
            set_last_error(e.code, e.message)
            raise
        except Exception as e:
            error = InternalExtractionError(f"{func.__name__} failed: {e}")
            set_last_error(error.code, error.message)
            raise error from e

    return cast(F, wrapper)


def _text(value: Optional[TextInput], name: str, required: bool = True) -> Optional[str]:
    """Validate a text argument and return it as ``str``."""
    if value is None:
        if required:
            raise MissingInputError(f"{name} is required")
        return None
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidTextError(f"{name} is not valid UTF-8: {e}") from e
    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidTextError(f"{name} is not valid Unicode text: {e}") from e
        return value
    raise InvalidTextError(f"{name} must be str or bytes, not {type(value).__name__}")


def _base(base_url: Optional[TextInput]) -> Optional[str]:
    return _text(base_url, "base_url", required=False) or None


def _extract_one(name: str, html: Optional[TextInput], base_url: Optional[TextInput]) -> Optional[str]:
    html_text = cast(str, _text(html, "html"))
    return ExtractionManager().extract_one(name, html_text, _base(base_url))


@_entry_point
def extract_all(
    html: Optional[TextInput],
    base_url: Optional[TextInput] = None,
    *,
    manifest_json: Optional[TextInput] = None,
) -> ExtractionResult:
    """Extract every supported format from ``html``.

    Args:
        html: The HTML document
        base_url: Absolute URL used to resolve relative links
        manifest_json: Optional Web App Manifest text to attach to the
            discovered manifest link

    Returns:
        An ExtractionResult whose fields are JSON text or None
    """
    html_text = cast(str, _text(html, "html"))
    manifest_text = _text(manifest_json, "manifest_json", required=False)
    return ExtractionManager().extract_all(html_text, _base(base_url), manifest_text)


@_entry_point
def extract_meta(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("meta", html, base_url)


@_entry_point
def extract_open_graph(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("open_graph", html, base_url)


@_entry_point
def extract_twitter(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("twitter", html, base_url)


@_entry_point
def extract_json_ld(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("json_ld", html, base_url)


@_entry_point
def extract_microdata(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("microdata", html, base_url)


@_entry_point
def extract_microformats(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("microformats", html, base_url)


@_entry_point
def extract_rdfa(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("rdfa", html, base_url)


@_entry_point
def extract_dublin_core(html: Optional[TextInput]) -> Optional[str]:
    return _extract_one("dublin_core", html, None)


@_entry_point
def extract_oembed(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("oembed", html, base_url)


@_entry_point
def extract_rel_links(html: Optional[TextInput], base_url: Optional[TextInput] = None) -> Optional[str]:
    return _extract_one("rel_links", html, base_url)


@_entry_point
def extract_manifest(
    html: Optional[TextInput],
    base_url: Optional[TextInput] = None,
    *,
    manifest_json: Optional[TextInput] = None,
) -> Optional[ManifestDiscovery]:
    """Find ``<link rel="manifest">``; normalize ``manifest_json`` against it when given.

    Raises:
        MalformedManifestError: ``manifest_json`` is not a JSON object.
    """
    html_text = cast(str, _text(html, "html"))
    manifest_text = _text(manifest_json, "manifest_json", required=False)
    return ExtractionManager().discover_manifest(html_text, _base(base_url), manifest_text)


@_entry_point
def parse_manifest(manifest_json: Optional[TextInput], base_url: Optional[TextInput] = None) -> str:
    """Normalize a standalone Web App Manifest, resolving its URLs against ``base_url``."""
    manifest_text = cast(str, _text(manifest_json, "manifest_json"))
    return ExtractionManager().parse_manifest(manifest_text, _base(base_url))


@_entry_point
def extract_microformat_type(
    html: Optional[TextInput], mf_type: str, base_url: Optional[TextInput] = None
) -> List[Dict[str, Any]]:
    """Every item of one microformat type (``"h-card"``), nested ones included, in document order."""
    html_text = cast(str, _text(html, "html"))
    manager = ExtractionManager()
    context = manager.build_context(html_text, _base(base_url))
    items = MicroformatsParser(context.document, context.base_url).items()
    return [item.to_value() for item in items_of_type(items, mf_type)]


def version() -> str:
    """The library version."""
    return __version__

