from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.holiday import Holiday

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from sqlalchemy.ext.asyncio import AsyncSession

# Saturday and Sunday.
WEEKEND_DAYS = frozenset({5, 6})

# Holidays are loaded this many days either side of a request so that
# bridge detection can look past the request edges.
CALENDAR_PADDING_DAYS = 31


@runtime_checkable
class WorkingCalendar(Protocol):
    """Answers whether a date is a working day."""

    def is_working_day(self, day: date) -> bool: ...


class HolidayCalendar:
    """Weekends plus a fixed set of non-optional holidays are non-working."""

    def __init__(self, holidays: Iterable[date] = ()) -> None:
        self._holidays = frozenset(holidays)

    def is_working_day(self, day: date) -> bool:
        return day.weekday() not in WEEKEND_DAYS and day not in self._holidays

    def is_holiday(self, day: date) -> bool:
        return day in self._holidays


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    current = start
    one_day = timedelta(days=1)
    while current <= end:
        yield current
        current += one_day


async def fetch_holiday_dates(session: AsyncSession, start: date, end: date) -> set[date]:
    """Fetch non-optional holidays in the given date range."""
    result = await session.execute(
        select(col(Holiday.date)).where(
            col(Holiday.date) >= start,
            col(Holiday.date) <= end,
            col(Holiday.is_optional).is_(False),
        )
    )
    return {row[0] for row in result.all()}


async def load_calendar(session: AsyncSession, start: date, end: date) -> HolidayCalendar:
    """Build a calendar covering [start, end] plus padding on both sides."""
    padding = timedelta(days=CALENDAR_PADDING_DAYS)
    holidays = await fetch_holiday_dates(session, start - padding, end + padding)
    return HolidayCalendar(holidays)
