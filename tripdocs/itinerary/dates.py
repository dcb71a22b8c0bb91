"""
Date parsing helpers shared by the normalizer and the itinerary builder.
"""

import re
from datetime import date, datetime
from typing import Optional


# Fallback day formats, tried after ISO 8601. Groups are (year, month, day) order-mapped below.
_YMD_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_MDY_PATTERNS = (
    re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),  # MM/DD/YYYY
    re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"),  # MM-DD-YYYY
)
_TIME_SUFFIX = re.compile(r"^(?P<day>\S+)[ T](?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?$")


def parse_iso_datetime(value: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime string.

    A bare date parses to midnight. A trailing ``Z`` is accepted as UTC.

    Args:
        value: Candidate string

    Returns:
        Parsed datetime, or None if the string is not ISO 8601
    """
    text = value.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_fallback_date(value: str) -> Optional[date]:
    """Parse ``YYYY-M-D``, ``MM/DD/YYYY`` or ``MM-DD-YYYY``."""
    text = value.strip()

    match = _YMD_PATTERN.match(text)
    if match:
        year, month, day = match.groups()
        return _safe_date(year, month, day)

    for pattern in _MDY_PATTERNS:
        match = pattern.match(text)
        if match:
            month, day, year = match.groups()
            return _safe_date(year, month, day)

    return None


def parse_fallback_datetime(value: str) -> Optional[datetime]:
    """Parse a fallback-format day, optionally followed by ``HH:MM[:SS]``."""
    text = value.strip()

    day = parse_fallback_date(text)
    if day is not None:
        return datetime(day.year, day.month, day.day)

    match = _TIME_SUFFIX.match(text)
    if not match:
        return None
    day = parse_fallback_date(match.group("day"))
    if day is None:
        return None
    try:
        return datetime(
            day.year,
            day.month,
            day.day,
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second") or 0),
        )
    except ValueError:
        return None


def resolve_date(value: Optional[str]) -> Optional[date]:
    """
    Resolve the calendar day of a stored date/datetime value.

    The day is taken as written (no timezone conversion). Values that are
    not ISO 8601 are unresolvable.
    """
    if not value:
        return None
    parsed = parse_iso_datetime(value)
    return parsed.date() if parsed else None


def resolve_datetime(value: Optional[str]) -> Optional[datetime]:
    """Resolve a stored datetime value, or None if it is not ISO 8601."""
    if not value:
        return None
    return parse_iso_datetime(value)


def _safe_date(year: str, month: str, day: str) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None
