"""
date_time_helper.py

Helper functions for parsing date values.
Timestamps are stored as UTC ISO strings, calendar dates as ``YYYY-MM-DD``.

All features should use ONLY these helpers for date/time parsing.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS+00:00).
    Used for log entries and DB storage.
    """
    return utc_now().isoformat()


def utc_today() -> date:
    return utc_now().date()


def parse_date(value: DateLike) -> date:
    """
    Parse a calendar date from a ``date``, ``datetime`` or ISO string.

    Strings may carry a time part ("2024-01-31T10:00:00Z"); only the date is kept.
    Raises ValueError for anything unparsable.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value or "").strip()
    if not raw:
        raise ValueError("empty date")
    return date.fromisoformat(raw[:10])


def parse_optional_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value)

