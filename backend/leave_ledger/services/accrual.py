"""Accrual scheduler: monthly credit and join-date anniversary carry-forward.

The monthly rate is the employment-term rate when one is configured for the
employee's term, otherwise the tenure rate.
"""

from __future__ import annotations

import logging
from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.config import get_settings
from leave_ledger.exceptions import ConcurrencyConflict
from leave_ledger.models.accrual import AccrualCredit
from leave_ledger.models.enums import NotificationEvent, RateSource
from leave_ledger.services import ledger
from leave_ledger.services.employee import get_employee_service
from leave_ledger.services.employment_term import load_term_rates, resolve_monthly_rate
from leave_ledger.services.leave_type import list_accruing_leave_types
from leave_ledger.services.notification import notify_safely
from leave_ledger.services.tenure import compute_tenure
from leave_ledger.services.transaction import run_with_retry

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.services.employee import EmployeeInfo
    from leave_ledger.services.tenure import TenureInfo

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")

# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass
class EmployeeAccrualOutcome:
    """One employee's monthly credit for one leave type, or why it did not happen."""

    employee_id: uuid.UUID
    success: bool
    leave_type_id: uuid.UUID | None = None
    skipped: bool = False
    new_allocated: Decimal | None = None
    error: str | None = None


@dataclass
class MonthlyAccrualRunResult:
    """Summary of a monthly accrual run."""

    period: str
    processed: int = 0
    credited: int = 0
    skipped: int = 0
    errors: int = 0
    results: list[EmployeeAccrualOutcome] = field(default_factory=list)


@dataclass
class EmployeeAnniversaryOutcome:
    """One employee's anniversary carry-forward for one leave type."""

    employee_id: uuid.UUID
    success: bool
    leave_type_id: uuid.UUID | None = None
    skipped: bool = False
    carried_forward: Decimal | None = None
    error: str | None = None


@dataclass
class AnniversaryRunResult:
    """Summary of an anniversary processing run."""

    target_date: date
    processed: int = 0
    carried: int = 0
    skipped: int = 0
    errors: int = 0
    results: list[EmployeeAnniversaryOutcome] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pure helpers (no DB)
# ---------------------------------------------------------------------------


def period_key(period: date) -> str:
    """The ``YYYY-MM`` idempotency marker for the month containing ``period``."""
    return f"{period.year:04d}-{period.month:02d}"


def parse_period(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""
    year, month = value.split("-")
    return date(int(year), int(month), 1)


def compute_carry_forward(remaining: Decimal, eligible: bool, cap: Decimal | None) -> Decimal:
    """Days moved into next year: unused days up to the cap, nothing when ineligible."""
    if not eligible or remaining <= 0:
        return _ZERO
    if cap is not None:
        return min(remaining, cap)
    return remaining


async def _active_employees() -> list[EmployeeInfo]:
    employees = await get_employee_service().list_employees()
    return sorted((e for e in employees if e.is_active), key=lambda e: str(e.id))


# ---------------------------------------------------------------------------
# Monthly accrual
# ---------------------------------------------------------------------------


async def _already_credited(session: AsyncSession, balance_id: uuid.UUID, key: str) -> bool:
    result = await session.execute(
        select(col(AccrualCredit.id)).where(
            col(AccrualCredit.balance_id) == balance_id,
            col(AccrualCredit.period) == key,
        )
    )
    return result.first() is not None


async def _credit_employee_month(
    session: AsyncSession,
    employee: EmployeeInfo,
    leave_type_ids: list[uuid.UUID],
    rate: Decimal,
    rate_source: RateSource,
    period_start: date,
) -> list[EmployeeAccrualOutcome]:
    """Credit one month to every accruing leave type of one employee.

    Each (balance, period) pair is credited at most once, whatever order
    periods are run in. An ``accrual_credit`` row records every credit.
    """
    key = period_key(period_start)
    outcomes: list[EmployeeAccrualOutcome] = []

    for leave_type_id in leave_type_ids:
        balance = await ledger.get_or_create_balance_for_update(
            session, employee.id, leave_type_id, period_start.year
        )
        if await _already_credited(session, balance.id, key):
            outcomes.append(
                EmployeeAccrualOutcome(
                    employee_id=employee.id,
                    leave_type_id=leave_type_id,
                    success=True,
                    skipped=True,
                    new_allocated=balance.allocated_days,
                )
            )
            continue

        session.add(
            AccrualCredit(
                balance_id=balance.id,
                employee_id=employee.id,
                leave_type_id=leave_type_id,
                period=key,
                amount=rate,
                rate_source=rate_source.value,
            )
        )
        try:
            await session.flush()
        except IntegrityError as exc:
            # A concurrent run recorded this period first; the retry will skip it.
            raise ConcurrencyConflict() from exc

        await ledger.credit(
            session,
            employee.id,
            leave_type_id,
            period_start.year,
            rate,
            reason=f"monthly accrual {key} ({rate_source.value} rate)",
        )
        latest = max(key, balance.last_credited_period or key)
        await ledger.write_balance(
            session,
            balance,
            monthly_credit_rate=rate,
            last_credited_period=latest,
        )
        outcomes.append(
            EmployeeAccrualOutcome(
                employee_id=employee.id,
                leave_type_id=leave_type_id,
                success=True,
                new_allocated=balance.allocated_days,
            )
        )

    return outcomes


async def run_monthly_accrual(session: AsyncSession, period: date) -> MonthlyAccrualRunResult:
    """Credit the monthly rate to every active employee.

    Tenure is evaluated on the first day of the period's month and the credit
    lands in that year's balance. Each employee is one transaction; a failure
    rolls back only that employee. A period already credited to a balance is
    skipped, including when an earlier month is re-run after a later one.
    """
    period_start = period.replace(day=1)
    period_end = period_start.replace(day=monthrange(period_start.year, period_start.month)[1])
    key = period_key(period_start)
    result = MonthlyAccrualRunResult(period=key)

    # Plain ids survive the per-employee rollbacks that expire loaded rows.
    leave_type_ids = [leave_type.id for leave_type in await list_accruing_leave_types(session)]
    term_rates = await load_term_rates(session)
    employees = await _active_employees()

    for employee in employees:
        result.processed += 1

        if employee.join_date is None:
            logger.error("Monthly accrual %s: employee=%s has no join date", key, employee.id)
            result.errors += 1
            result.results.append(
                EmployeeAccrualOutcome(employee_id=employee.id, success=False, error="Employee has no join date")
            )
            continue

        if employee.join_date > period_end:
            result.skipped += 1
            result.results.append(EmployeeAccrualOutcome(employee_id=employee.id, success=True, skipped=True))
            continue

        try:
            tenure = compute_tenure(employee.join_date, period_start)
            rate, rate_source = resolve_monthly_rate(tenure, employee.employment_term, term_rates)

            async def _apply(
                employee: EmployeeInfo = employee, rate: Decimal = rate, rate_source: RateSource = rate_source
            ) -> list[EmployeeAccrualOutcome]:
                return await _credit_employee_month(
                    session, employee, leave_type_ids, rate, rate_source, period_start
                )

            outcomes = await run_with_retry(session, _apply)
        except Exception as exc:
            logger.exception("Monthly accrual %s failed for employee=%s", key, employee.id)
            result.errors += 1
            result.results.append(EmployeeAccrualOutcome(employee_id=employee.id, success=False, error=str(exc)))
            continue

        result.results.extend(outcomes)
        credited = [o for o in outcomes if not o.skipped]
        if credited:
            result.credited += 1
            await notify_safely(
                NotificationEvent.LEAVE_CREDITED,
                employee.id,
                {
                    "period": key,
                    "monthly_rate": str(rate),
                    "rate_source": rate_source.value,
                    "leave_type_ids": [str(o.leave_type_id) for o in credited],
                },
            )
        else:
            result.skipped += 1

    logger.info(
        "Monthly accrual %s: processed=%d credited=%d skipped=%d errors=%d",
        key,
        result.processed,
        result.credited,
        result.skipped,
        result.errors,
    )
    return result


# ---------------------------------------------------------------------------
# Anniversary carry-forward
# ---------------------------------------------------------------------------


async def _process_employee_anniversary(
    session: AsyncSession,
    employee: EmployeeInfo,
    leave_type_ids: list[uuid.UUID],
    tenure: TenureInfo,
    target_date: date,
) -> list[EmployeeAnniversaryOutcome]:
    """Move unused days into next year and restart this year's allocation counter.

    This year's allocation is cut back to the days already used, so used
    days stay in place for any later reversal.
    """
    cap = get_settings().carry_forward_cap_days
    year = target_date.year
    outcomes: list[EmployeeAnniversaryOutcome] = []

    for leave_type_id in leave_type_ids:
        current = await ledger.get_or_create_balance_for_update(session, employee.id, leave_type_id, year)
        if current.anniversary_processed_on == target_date:
            outcomes.append(
                EmployeeAnniversaryOutcome(
                    employee_id=employee.id,
                    leave_type_id=leave_type_id,
                    success=True,
                    skipped=True,
                )
            )
            continue

        remaining = current.allocated_days - current.used_days
        carried = ledger.quantize_days(compute_carry_forward(remaining, tenure.can_carry_forward, cap))

        following = await ledger.get_or_create_balance_for_update(session, employee.id, leave_type_id, year + 1)
        if carried > 0:
            await ledger.credit(
                session,
                employee.id,
                leave_type_id,
                year + 1,
                carried,
                reason=f"carry forward from {year}",
            )
        await ledger.write_balance(session, following, carry_forward_from_previous_year=carried)

        await ledger.write_balance(
            session,
            current,
            allocated_days=min(current.allocated_days, current.used_days),
            anniversary_processed_on=target_date,
        )
        outcomes.append(
            EmployeeAnniversaryOutcome(
                employee_id=employee.id,
                leave_type_id=leave_type_id,
                success=True,
                carried_forward=carried,
            )
        )

    return outcomes


async def run_anniversary_processing(session: AsyncSession, target_date: date) -> AnniversaryRunResult:
    """Process every active employee whose join-date anniversary is ``target_date``.

    Eligible employees carry unused days (up to ``carry_forward_cap_days``)
    into next year's row; everyone whose anniversary it is gets a fresh
    allocation counter. Idempotent through ``anniversary_processed_on``.
    """
    result = AnniversaryRunResult(target_date=target_date)

    # Plain ids survive the per-employee rollbacks that expire loaded rows.
    leave_type_ids = [leave_type.id for leave_type in await list_accruing_leave_types(session)]
    employees = await _active_employees()

    for employee in employees:
        if employee.join_date is None:
            logger.error("Anniversary run %s: employee=%s has no join date", target_date, employee.id)
            result.processed += 1
            result.errors += 1
            result.results.append(
                EmployeeAnniversaryOutcome(employee_id=employee.id, success=False, error="Employee has no join date")
            )
            continue

        tenure = compute_tenure(employee.join_date, target_date)
        if not tenure.is_anniversary_today:
            continue

        result.processed += 1
        try:

            async def _apply(
                employee: EmployeeInfo = employee, tenure: TenureInfo = tenure
            ) -> list[EmployeeAnniversaryOutcome]:
                return await _process_employee_anniversary(session, employee, leave_type_ids, tenure, target_date)

            outcomes = await run_with_retry(session, _apply)
        except Exception as exc:
            logger.exception("Anniversary processing failed for employee=%s", employee.id)
            result.errors += 1
            result.results.append(
                EmployeeAnniversaryOutcome(employee_id=employee.id, success=False, error=str(exc))
            )
            continue

        result.results.extend(outcomes)
        done = [o for o in outcomes if not o.skipped]
        if done:
            result.carried += 1
            await notify_safely(
                NotificationEvent.ANNIVERSARY_PROCESSED,
                employee.id,
                {
                    "target_date": target_date.isoformat(),
                    "tenure_months": tenure.tenure_months,
                    "carried_forward": {str(o.leave_type_id): str(o.carried_forward) for o in done},
                },
            )
        else:
            result.skipped += 1

    logger.info(
        "Anniversary run %s: processed=%d carried=%d skipped=%d errors=%d",
        target_date,
        result.processed,
        result.carried,
        result.skipped,
        result.errors,
    )
    return result
