"""Tenure and accrual-rate calculator. Pure functions, no database access."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from leave_ledger.config import get_settings
from leave_ledger.exceptions import ValidationError


@dataclass(frozen=True)
class TenureInfo:
    """Tenure-derived accrual facts for one employee on one evaluation date."""

    join_date: date
    evaluation_date: date
    tenure_months: int
    monthly_rate: Decimal
    can_carry_forward: bool
    next_anniversary_date: date
    is_anniversary_today: bool


def _anniversary_in_year(join_date: date, year: int) -> date:
    """Return the join date moved to ``year``; 29 Feb falls back to 28 Feb in common years."""
    day = min(join_date.day, calendar.monthrange(year, join_date.month)[1])
    return date(year, join_date.month, day)


def months_between(start: date, end: date) -> int:
    """Whole months elapsed from ``start`` to ``end``.

    A month only counts once the day-of-month has been reached, so
    2024-01-31 -> 2024-02-29 is 0 months. Returns 0 when ``end`` precedes ``start``.
    """
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def monthly_rate_for(tenure_months: int) -> Decimal:
    """Monthly accrual rate for a tenure expressed in whole months."""
    settings = get_settings()
    if tenure_months >= settings.carry_forward_min_tenure_months:
        return settings.senior_monthly_rate
    return settings.junior_monthly_rate


def next_anniversary(join_date: date, evaluation_date: date) -> date:
    """The join-date anniversary on or after ``evaluation_date``."""
    candidate = _anniversary_in_year(join_date, evaluation_date.year)
    if candidate < evaluation_date:
        candidate = _anniversary_in_year(join_date, evaluation_date.year + 1)
    return candidate


def compute_tenure(join_date: date | None, evaluation_date: date | None = None) -> TenureInfo:
    """Compute tenure, monthly rate and carry-forward eligibility.

    Raises ValidationError when the employee record carries no join date;
    the value is never defaulted.
    """
    if join_date is None:
        raise ValidationError("Employee has no join date; tenure cannot be computed")
    if evaluation_date is None:
        evaluation_date = date.today()

    tenure_months = months_between(join_date, evaluation_date)
    settings = get_settings()
    anniversary = next_anniversary(join_date, evaluation_date)

    return TenureInfo(
        join_date=join_date,
        evaluation_date=evaluation_date,
        tenure_months=tenure_months,
        monthly_rate=monthly_rate_for(tenure_months),
        can_carry_forward=tenure_months >= settings.carry_forward_min_tenure_months,
        next_anniversary_date=anniversary,
        is_anniversary_today=evaluation_date > join_date and anniversary == evaluation_date,
    )
