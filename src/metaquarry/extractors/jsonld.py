"""
JSON-LD collector.

Every ``<script type="application/ld+json">`` body that decodes to an object
or an array is passed through verbatim; anything else is skipped.
"""

from __future__ import annotations

import re
from typing import Any, List

import structlog

from ..document import attr, descendants, raw_text
from ..models import from_json_text
from .protocols import ExtractionContext

logger = structlog.get_logger(__name__)

JSON_LD_TYPE = "application/ld+json"

_WRAPPERS = (
    (re.compile(r"^\s*<!--"), re.compile(r"-->\s*$")),
    (re.compile(r"^\s*(?://\s*)?<!\[CDATA\["), re.compile(r"(?://\s*)?\]\]>\s*$")),
)


def strip_wrappers(text: str) -> str:
    """Remove HTML comment and CDATA wrappers some CMSs put around script bodies."""
    changed = True
    while changed:
        changed = False
        for opening, closing in _WRAPPERS:
            if opening.search(text) and closing.search(text):
                text = closing.sub("", opening.sub("", text, count=1), count=1)
                changed = True
    return text.strip()


class JsonLdExtractor:
    name = "json_ld"

    def extract(self, context: ExtractionContext) -> List[Any]:
        documents: List[Any] = []
        for index, element in enumerate(
            e for e in descendants(context.document) if e.name == "script"
        ):
            script_type = (attr(element, "type") or "").split(";", 1)[0].strip().lower()
            if script_type != JSON_LD_TYPE:
                continue
            body = strip_wrappers(raw_text(element))
            if not body:
                continue
            try:
                data = from_json_text(body)
            except (ValueError, RecursionError) as e:
                logger.warning("json_ld_block_skipped", script_index=index, error=str(e))
                continue
            if isinstance(data, (dict, list)):
                documents.append(data)
            else:
                logger.debug("json_ld_scalar_skipped", script_index=index)
        return documents
