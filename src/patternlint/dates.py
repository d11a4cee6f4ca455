"""Calendar-date helpers shared by the full engine and the standalone auditor.

Only the standard library is used here so the degraded auditor can import
this module without third-party packages installed.
"""

from __future__ import annotations

import re
from datetime import date, datetime

_LOOSE_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def parse_iso_date(value: object) -> date | None:
    """Parse an ISO 8601 value into a calendar date.

    Accepts ``date``/``datetime`` objects and strings. A datetime string is
    reduced to its calendar date. Anything malformed yields None rather
    than raising, so callers can treat the field as absent.

    Args:
        value: Raw header value.

    Returns:
        The parsed date, or None if the value is missing or malformed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    # YAML timestamps allow single-digit month and day
    match = _LOOSE_DATE_PATTERN.match(text)
    if match is None:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def days_since(value: object, today: date) -> int | None:
    """Return whole calendar days elapsed between ``value`` and ``today``.

    Args:
        value: Raw header value holding an ISO date.
        today: Reference date.

    Returns:
        Number of days (negative for future dates), or None if malformed.
    """
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    return (today - parsed).days


def is_before(value: object, today: date) -> bool:
    """Check whether a date value falls strictly before ``today``."""
    parsed = parse_iso_date(value)
    return parsed is not None and parsed < today
