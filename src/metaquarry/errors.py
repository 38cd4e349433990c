"""
Error types and the per-thread last-error slot.

Every public entry point clears the slot on entry and records the code and
message of any call-level failure before re-raising it, so callers that prefer
polling over exception handling can ask `last_error()` afterwards.
"""

from __future__ import annotations

import threading
from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Stable numeric error codes."""

    OK = 0
    NULL_OR_MISSING_INPUT = 1
    INVALID_TEXT = 2
    MALFORMED_MANIFEST_JSON = 3
    INTERNAL = 4


class MetaQuarryError(Exception):
    """Base class for all call-level extraction failures."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingInputError(MetaQuarryError):
    """A required text argument was not supplied."""

    code = ErrorCode.NULL_OR_MISSING_INPUT


class InvalidTextError(MetaQuarryError, ValueError):
    """Input could not be interpreted as Unicode text."""

    code = ErrorCode.INVALID_TEXT


class MalformedManifestError(MetaQuarryError, ValueError):
    """The manifest document is not a JSON object."""

    code = ErrorCode.MALFORMED_MANIFEST_JSON


class InternalExtractionError(MetaQuarryError):
    """An extractor failed unexpectedly."""

    code = ErrorCode.INTERNAL


# --- Thread-local last-error slot ---

_state = threading.local()


def set_last_error(code: ErrorCode, message: Optional[str] = None) -> None:
    _state.code = code
    _state.message = message


def clear_last_error() -> None:
    set_last_error(ErrorCode.OK, None)


def last_error() -> ErrorCode:
    """Return the code of the most recent failure on this thread."""
    return getattr(_state, "code", ErrorCode.OK)


def last_error_message() -> Optional[str]:
    """Return the message of the most recent failure on this thread, if any."""
    return getattr(_state, "message", None)
