"""Revision date rules (calendar-month arithmetic)."""
from __future__ import annotations

from datetime import date

import pytest

from sop_documents.exceptions.errors import PreconditionFailed, ValidationError
from sop_documents.logic.revision_dates import (
    add_months,
    default_next_revision_date,
    ensure_revision_gap,
    is_valid_revision_gap,
    min_next_revision_date,
)


def test_month_end_is_clamped() -> None:
    assert min_next_revision_date("2024-01-31") == date(2024, 4, 30)
    assert min_next_revision_date(date(2023, 11, 30)) == date(2024, 2, 29)
    assert min_next_revision_date("2023-11-30") == date(2024, 2, 29)
    assert add_months(date(2023, 11, 30), 3) == date(2024, 2, 29)
    assert add_months(date(2022, 11, 30), 3) == date(2023, 2, 28)


def test_gap_boundary() -> None:
    assert is_valid_revision_gap("2024-01-31", "2024-04-30") is True
    assert is_valid_revision_gap("2024-01-31", "2024-04-29") is False
    assert is_valid_revision_gap("2024-03-15", "2024-06-15") is True


def test_missing_dates_are_not_checked() -> None:
    assert is_valid_revision_gap(None, "2024-01-01") is True
    assert is_valid_revision_gap("2024-01-01", "") is True


def test_unparsable_date_is_a_validation_error() -> None:
    with pytest.raises(ValidationError):
        is_valid_revision_gap("not-a-date", "2024-01-01")


def test_ensure_gap_raises_precondition() -> None:
    with pytest.raises(PreconditionFailed) as info:
        ensure_revision_gap("2024-01-31", "2024-02-01")
    assert "2024-04-30" in str(info.value)
    ensure_revision_gap("2024-01-31", "2025-01-31")


def test_default_next_revision_is_one_year() -> None:
    assert default_next_revision_date("2024-02-29") == date(2025, 2, 28)


def test_year_rollover() -> None:
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
