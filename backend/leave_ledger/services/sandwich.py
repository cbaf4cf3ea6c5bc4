# ruff: noqa: TC003
"""Chargeable-day calculation for leave that touches weekends and holidays.

A run of non-working days with leave on both sides is charged as leave.
Inside one request that is simple: every non-working day between the first
and last working day is charged. Across two requests (a Friday and the
following Monday filed separately) the run is charged once, to the request
being approved, and recorded as a bridge to the already-approved partner so
either side can later be reversed symmetrically.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import ValidationError
from leave_ledger.models.application import LeaveApplication
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import LeaveStatus
from leave_ledger.services.calendar import CALENDAR_PADDING_DAYS, WorkingCalendar, iter_days, load_calendar

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

HALF_DAY = Decimal("0.5")
_ONE_DAY = timedelta(days=1)

# A non-working run longer than this has no far side worth bridging to.
_MAX_RUN_DAYS = CALENDAR_PADDING_DAYS - 1


@dataclass(frozen=True)
class CoveredRange:
    """Dates covered by another approved application of the same employee."""

    application_id: uuid.UUID
    start_date: date
    end_date: date
    is_half_day: bool = False

    def covers(self, day: date) -> bool:
        # A half day leaves the employee at work for part of the day, so it
        # never closes a sandwich.
        return not self.is_half_day and self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Bridge:
    """A non-working run charged to the requesting application because of a partner."""

    partner_application_id: uuid.UUID
    days: Decimal
    first_date: date
    last_date: date


@dataclass
class SandwichResult:
    """Outcome of a chargeable-day calculation."""

    deducted_days: Decimal
    reason: str
    is_sandwich_leave: bool
    working_days: Decimal = Decimal("0")
    interior_days: Decimal = Decimal("0")
    bridged_days: Decimal = Decimal("0")
    penalty_days: Decimal = Decimal("0")
    bridges: list[Bridge] = field(default_factory=list)

    @property
    def extra_days(self) -> Decimal:
        """Non-working days included in ``deducted_days``."""
        return self.interior_days + self.bridged_days + self.penalty_days


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _adjacent_run(anchor: date, calendar: WorkingCalendar, step: timedelta) -> list[date]:
    """Collect the contiguous non-working days next to ``anchor`` in direction ``step``.

    Returns an empty list when there is no such run, or when it runs past
    ``_MAX_RUN_DAYS`` without reaching a working day.
    """
    run: list[date] = []
    day = anchor + step
    while not calendar.is_working_day(day):
        run.append(day)
        if len(run) > _MAX_RUN_DAYS:
            return []
        day += step
    return sorted(run)


def _find_partner(day: date, covered: Sequence[CoveredRange]) -> CoveredRange | None:
    matches = [item for item in covered if item.covers(day)]
    if not matches:
        return None
    return min(matches, key=lambda item: (item.start_date, str(item.application_id)))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


# ---------------------------------------------------------------------------
# Calculation
# ---------------------------------------------------------------------------


def calculate_chargeable_days(
    start_date: date,
    end_date: date,
    *,
    is_half_day: bool,
    calendar: WorkingCalendar,
    covered: Sequence[CoveredRange] = (),
    target_status: str = LeaveStatus.APPROVED,
    reference_date: date | None = None,
    sudden_leave_penalty: bool = False,
) -> SandwichResult:
    """Compute the days a request costs, before any LOP is subtracted.

    ``covered`` holds the employee's other approved applications; they are
    only consulted for bridging when ``target_status`` is approved.
    ``reference_date`` is the filing date used by the sudden-leave penalty.
    """
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")

    if is_half_day:
        return SandwichResult(
            deducted_days=HALF_DAY,
            reason="Half day leave (0.5 day)",
            is_sandwich_leave=False,
            working_days=HALF_DAY,
        )

    working = [day for day in iter_days(start_date, end_date) if calendar.is_working_day(day)]
    if not working:
        raise ValidationError("Requested dates contain no working days after excluding weekends and holidays")

    first_working, last_working = working[0], working[-1]
    interior = sum(
        1 for day in iter_days(first_working, last_working) if not calendar.is_working_day(day)
    )
    reasons = [f"Regular leave: {_plural(len(working), 'working day')}"]
    if interior:
        reasons.append(f"{_plural(interior, 'non-working day')} between leave days charged")

    leading = _adjacent_run(first_working, calendar, -_ONE_DAY)
    trailing = _adjacent_run(last_working, calendar, _ONE_DAY)

    bridges: list[Bridge] = []
    unbridged: list[list[date]] = []
    for run, far_side in (
        (leading, leading[0] - _ONE_DAY if leading else None),
        (trailing, trailing[-1] + _ONE_DAY if trailing else None),
    ):
        if not run or far_side is None:
            continue
        partner = _find_partner(far_side, covered) if target_status == LeaveStatus.APPROVED else None
        if partner is None:
            unbridged.append(run)
            continue
        bridges.append(
            Bridge(
                partner_application_id=partner.application_id,
                days=Decimal(len(run)),
                first_date=run[0],
                last_date=run[-1],
            )
        )
        reasons.append(
            f"{_plural(len(run), 'non-working day')} from {run[0].isoformat()} to "
            f"{run[-1].isoformat()} bridged to approved leave {partner.application_id}"
        )

    bridged = sum((bridge.days for bridge in bridges), Decimal("0"))

    penalty = 0
    if (
        sudden_leave_penalty
        and start_date == end_date
        and len(working) == 1
        and reference_date is not None
        and reference_date >= start_date
    ):
        penalty = sum(len(run) for run in unbridged)
        if penalty:
            reasons.append(f"{_plural(penalty, 'non-working day')} charged as sudden leave")

    working_days = Decimal(len(working))
    interior_days = Decimal(interior)
    penalty_days = Decimal(penalty)
    deducted = working_days + interior_days + bridged + penalty_days

    return SandwichResult(
        deducted_days=deducted,
        reason="; ".join(reasons),
        is_sandwich_leave=deducted > working_days,
        working_days=working_days,
        interior_days=interior_days,
        bridged_days=bridged,
        penalty_days=penalty_days,
        bridges=bridges,
    )


async def _load_covered_ranges(
    session: AsyncSession,
    employee_id: uuid.UUID,
    window_start: date,
    window_end: date,
    exclude_application_id: uuid.UUID | None,
) -> list[CoveredRange]:
    """Load the employee's approved applications overlapping the window."""
    query = select(LeaveApplication).where(
        col(LeaveApplication.employee_id) == employee_id,
        col(LeaveApplication.status) == LeaveStatus.APPROVED,
        col(LeaveApplication.start_date) <= window_end,
        col(LeaveApplication.end_date) >= window_start,
    )
    if exclude_application_id is not None:
        query = query.where(col(LeaveApplication.id) != exclude_application_id)

    result = await session.execute(query)
    return [
        CoveredRange(
            application_id=application.id,
            start_date=application.start_date,
            end_date=application.end_date,
            is_half_day=application.is_half_day,
        )
        for application in result.scalars().all()
    ]


async def compute(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
    is_half_day: bool,
    target_status: str,
    reference_time: datetime | None = None,
    exclude_application_id: uuid.UUID | None = None,
) -> SandwichResult:
    """Compute chargeable days against the stored calendar and approved leave.

    ``exclude_application_id`` keeps the application being decided out of
    its own partner search.
    """
    if end_date < start_date:
        raise ValidationError("end_date must be on or after start_date")

    padding = timedelta(days=CALENDAR_PADDING_DAYS)
    calendar = await load_calendar(session, start_date, end_date)
    covered = await _load_covered_ranges(
        session,
        employee_id,
        start_date - padding,
        end_date + padding,
        exclude_application_id,
    )
    reference = reference_time if reference_time is not None else now_utc()

    return calculate_chargeable_days(
        start_date,
        end_date,
        is_half_day=is_half_day,
        calendar=calendar,
        covered=covered,
        target_status=target_status,
        reference_date=reference.date(),
        sudden_leave_penalty=get_settings().sandwich_sudden_leave_penalty,
    )
