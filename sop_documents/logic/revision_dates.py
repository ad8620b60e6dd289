"""
Revision date rules.

The next revision of an SOP must lie at least three calendar months after
the last one. Month arithmetic is calendar based: the day is clamped to the
last valid day of the target month, so 2024-01-31 + 3 months = 2024-04-30.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Optional

from core.helpers.date_time_helper import DateLike, parse_date, parse_optional_date
from sop_documents.exceptions.errors import PreconditionFailed, ValidationError

REVISION_GAP_MONTHS = 3
DEFAULT_REVISION_INTERVAL_MONTHS = 12


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _parse(value: DateLike, field: str) -> date:
    try:
        return parse_date(value)
    except (TypeError, ValueError) as ex:
        raise ValidationError(f"Invalid date for {field}: {value!r}", field=field) from ex


def min_next_revision_date(last_revision_date: DateLike, *, months: int = REVISION_GAP_MONTHS) -> date:
    return add_months(_parse(last_revision_date, "lastRevisionDate"), months)


def default_next_revision_date(last_revision_date: DateLike) -> date:
    """Suggested next revision for new documents (one year out)."""
    return add_months(_parse(last_revision_date, "lastRevisionDate"), DEFAULT_REVISION_INTERVAL_MONTHS)


def is_valid_revision_gap(
    last_revision_date: Optional[DateLike],
    next_revision_date: Optional[DateLike],
    *,
    months: int = REVISION_GAP_MONTHS,
) -> bool:
    """True when next >= last + *months*; also True when either date is absent."""
    try:
        last = parse_optional_date(last_revision_date)
        nxt = parse_optional_date(next_revision_date)
    except (TypeError, ValueError) as ex:
        raise ValidationError(f"Invalid revision date: {ex}") from ex
    if last is None or nxt is None:
        return True
    return nxt >= add_months(last, months)


def ensure_revision_gap(
    last_revision_date: Optional[DateLike],
    next_revision_date: Optional[DateLike],
    *,
    months: int = REVISION_GAP_MONTHS,
) -> None:
    if not is_valid_revision_gap(last_revision_date, next_revision_date, months=months):
        floor = min_next_revision_date(last_revision_date, months=months)  # type: ignore[arg-type]
        raise PreconditionFailed(
            f"Next revision date must be on or after {floor.isoformat()} "
            f"(at least {months} months after the last revision).",
            field="nextRevisionDate",
        )
