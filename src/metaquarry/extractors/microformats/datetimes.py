"""
Date and time fragment handling for ``dt-*`` properties.

Fragments come from the value-class pattern (``<span class="value">``) and
are classified as a date, a time or a time zone, then combined into one
ISO-8601-style string. Fragments that fit none of those are kept as text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

_DATE = re.compile(r"^\d{4}-(?:\d{2}-\d{2}|\d{3})$")
_TIME_24 = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(\.\d+)?)?$")
_TIME_12 = re.compile(r"^(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*([ap])\.?\s*m\.?$", re.IGNORECASE)
_TIMEZONE = re.compile(r"^(?:Z|[+-]\d{1,2}(?::?\d{2})?)$", re.IGNORECASE)
_TIME_WITH_ZONE = re.compile(r"^(.*?\d)\s*(Z|[+-]\d{1,2}(?::?\d{2})?)$", re.IGNORECASE)
_DATE_AND_TIME = re.compile(r"^(\d{4}-(?:\d{2}-\d{2}|\d{3}))[T ]\s*(.+)$", re.IGNORECASE)


def is_date(fragment: str) -> bool:
    return bool(_DATE.match(fragment.strip()))


def normalize_time(fragment: str) -> Optional[str]:
    """Return ``HH:MM[:SS]`` for a recognized time, converting am/pm."""
    fragment = fragment.strip()
    match = _TIME_24.match(fragment)
    if match:
        hour, minute, second, fraction = match.groups()
        if int(hour) > 23 or int(minute) > 59:
            return None
        result = f"{int(hour):02d}:{minute}"
        if second is not None:
            result += f":{second}{fraction or ''}"
        return result
    match = _TIME_12.match(fragment)
    if match:
        hour_text, minute, second, meridiem = match.groups()
        hour = int(hour_text)
        if not 1 <= hour <= 12:
            return None
        if meridiem.lower() == "p" and hour != 12:
            hour += 12
        elif meridiem.lower() == "a" and hour == 12:
            hour = 0
        result = f"{hour:02d}:{minute or '00'}"
        if second is not None:
            result += f":{second}"
        return result
    return None


def normalize_timezone(fragment: str) -> Optional[str]:
    fragment = fragment.strip()
    if not _TIMEZONE.match(fragment):
        return None
    return "Z" if fragment.upper() == "Z" else fragment


@dataclass
class DateTimeParts:
    date: Optional[str] = None
    time: Optional[str] = None
    timezone: Optional[str] = None

    def render(self) -> str:
        if self.date and self.time:
            text = f"{self.date}T{self.time}"
        else:
            text = self.date or self.time or ""
        if self.timezone and self.time:
            text += self.timezone
        return text


def _split_time_zone(fragment: str) -> tuple[Optional[str], Optional[str]]:
    time = normalize_time(fragment)
    if time is not None:
        return time, None
    match = _TIME_WITH_ZONE.match(fragment.strip())
    if match:
        time = normalize_time(match.group(1))
        zone = normalize_timezone(match.group(2))
        if time is not None and zone is not None:
            return time, zone
    return None, None


def parse_datetime(text: str) -> Optional[DateTimeParts]:
    """Split a single datetime string into its parts, or None if unrecognized."""
    text = text.strip()
    if is_date(text):
        return DateTimeParts(date=text)
    match = _DATE_AND_TIME.match(text)
    if match:
        time, zone = _split_time_zone(match.group(2))
        if time is not None:
            return DateTimeParts(date=match.group(1), time=time, timezone=zone)
        return None
    time, zone = _split_time_zone(text)
    if time is not None:
        return DateTimeParts(time=time, timezone=zone)
    return None


def combine_fragments(fragments: Iterable[str]) -> str:
    """Combine value-class fragments into one datetime string.

    The first date, first time and first time zone win. When no fragment is
    recognized the fragments are concatenated as written.
    """
    raw = list(fragments)
    parts = DateTimeParts()
    recognized = False
    for fragment in raw:
        parsed = parse_datetime(fragment)
        if parsed is not None:
            recognized = True
            parts.date = parts.date or parsed.date
            parts.time = parts.time or parsed.time
            parts.timezone = parts.timezone or parsed.timezone
            continue
        zone = normalize_timezone(fragment)
        if zone is not None and parts.timezone is None:
            parts.timezone = zone
            recognized = True
    if not recognized or (parts.date is None and parts.time is None):
        return "".join(raw)
    return parts.render()


def normalize_datetime(text: str) -> str:
    """Use ``T`` between a date and a time (``2024-01-02 10:00`` becomes ``2024-01-02T10:00``)."""
    text = text.strip()
    parsed = parse_datetime(text)
    if parsed is not None and parsed.date and parsed.time:
        return parsed.render()
    return text


def date_part(text: str) -> Optional[str]:
    """The leading date of a datetime string, if it has one."""
    parsed = parse_datetime(text)
    if parsed is not None and parsed.date:
        return parsed.date
    match = _DATE_AND_TIME.match(text.strip())
    return match.group(1) if match else None


def is_time_only(text: str) -> bool:
    parsed = parse_datetime(text)
    return parsed is not None and parsed.date is None and parsed.time is not None
