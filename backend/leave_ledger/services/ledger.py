"""Balance ledger: the only code that mutates LeaveBalance rows.

Every operation runs inside the caller's transaction. The row is read with
``SELECT ... FOR UPDATE`` and written with an ``UPDATE ... WHERE version``
check, so a writer that lost a race gets ConcurrencyConflict instead of
silently overwriting the winner.
"""

from __future__ import annotations

import logging
import uuid
import warnings
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.attributes import set_committed_value
from sqlmodel import col

from leave_ledger.exceptions import (
    ConcurrencyConflict,
    InsufficientBalanceWarning,
    InvalidAdjustment,
    ValidationError,
)
from leave_ledger.models.adjustment import LeaveBalanceAdjustment
from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import AdjustmentType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
_CENT = Decimal("0.01")

# Columns a ledger operation may write.
_WRITABLE_FIELDS = frozenset(
    {
        "allocated_days",
        "used_days",
        "carry_forward_from_previous_year",
        "monthly_credit_rate",
        "last_credited_period",
        "anniversary_processed_on",
    }
)


def quantize_days(value: Decimal) -> Decimal:
    """Round a day amount to the two decimal places stored in the database."""
    return Decimal(value).quantize(_CENT)


def _require_non_negative(amount: Decimal, label: str = "amount") -> Decimal:
    if amount < 0:
        raise ValidationError(f"{label} must not be negative")
    return quantize_days(amount)


# ---------------------------------------------------------------------------
# Row access
# ---------------------------------------------------------------------------


async def get_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> LeaveBalance | None:
    """Read a balance row without locking it."""
    result = await session.execute(
        select(LeaveBalance).where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
            col(LeaveBalance.year) == year,
        )
    )
    return result.scalar_one_or_none()


async def get_or_create_balance_for_update(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> LeaveBalance:
    """Get the balance row with a FOR UPDATE lock, creating an empty one if absent."""
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
            col(LeaveBalance.year) == year,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    balance = result.scalar_one_or_none()

    if balance is None:
        balance = LeaveBalance(
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            year=year,
            version=1,
        )
        session.add(balance)
        try:
            await session.flush()
        except IntegrityError as exc:
            # Another transaction created the same (employee, type, year) row first.
            raise ConcurrencyConflict() from exc

    return balance


async def write_balance(session: AsyncSession, balance: LeaveBalance, **values: Any) -> LeaveBalance:
    """Persist ``values`` on ``balance`` guarded by its version counter.

    Raises ConcurrencyConflict when the row changed since it was read.
    """
    unknown = set(values) - _WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Not a writable balance field: {', '.join(sorted(unknown))}")

    seen_version = balance.version
    changes = dict(values)
    changes["version"] = seen_version + 1
    changes["updated_at"] = now_utc()

    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.id) == balance.id,
            col(LeaveBalance.version) == seen_version,
        )
        .values(**changes)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConcurrencyConflict()

    for key, value in changes.items():
        set_committed_value(balance, key, value)
    return balance


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def credit(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    amount: Decimal,
    reason: str,
) -> LeaveBalance:
    """Increase allocated days. Used by accrual, carry-forward and add adjustments."""
    amount = _require_non_negative(amount)
    balance = await get_or_create_balance_for_update(session, employee_id, leave_type_id, year)
    new_allocated = quantize_days(balance.allocated_days + amount)
    await write_balance(session, balance, allocated_days=new_allocated)
    logger.info(
        "Credited %s days to employee=%s type=%s year=%s (%s), allocated=%s",
        amount,
        employee_id,
        leave_type_id,
        year,
        reason,
        new_allocated,
    )
    return balance


async def debit_used(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    amount: Decimal,
) -> LeaveBalance:
    """Increase used days. Balances may go below zero remaining; used days cannot."""
    amount = _require_non_negative(amount)
    balance = await get_or_create_balance_for_update(session, employee_id, leave_type_id, year)
    new_used = quantize_days(balance.used_days + amount)
    await write_balance(session, balance, used_days=new_used)
    logger.info(
        "Debited %s used days for employee=%s type=%s year=%s, used=%s",
        amount,
        employee_id,
        leave_type_id,
        year,
        new_used,
    )
    return balance


async def restore_used(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    amount: Decimal,
) -> LeaveBalance:
    """Decrease used days, flooring at zero.

    Hitting the floor means the ledger and the application history disagree.
    That is reported as InsufficientBalanceWarning and the restore still
    succeeds.
    """
    amount = _require_non_negative(amount)
    balance = await get_or_create_balance_for_update(session, employee_id, leave_type_id, year)
    new_used = quantize_days(balance.used_days - amount)
    if new_used < ZERO:
        message = (
            f"Restoring {amount} days would leave used_days at {new_used} for employee={employee_id} "
            f"type={leave_type_id} year={year}; flooring at 0"
        )
        logger.warning(message)
        warnings.warn(message, InsufficientBalanceWarning, stacklevel=2)
        new_used = quantize_days(ZERO)

    await write_balance(session, balance, used_days=new_used)
    logger.info(
        "Restored %s used days for employee=%s type=%s year=%s, used=%s",
        amount,
        employee_id,
        leave_type_id,
        year,
        new_used,
    )
    return balance


async def manual_adjust(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    adjustment_type: AdjustmentType,
    amount: Decimal,
    reason: str,
    actor_id: uuid.UUID,
) -> tuple[LeaveBalance, LeaveBalanceAdjustment]:
    """Apply an HR adjustment to allocated days and record it.

    Exactly one LeaveBalanceAdjustment row is written per call. Raises
    InvalidAdjustment when a subtraction would take allocated days below zero.
    """
    if amount <= 0:
        raise ValidationError("Adjustment amount must be positive")
    if not reason or not reason.strip():
        raise ValidationError("Adjustment reason is required")
    amount = quantize_days(amount)

    balance = await get_or_create_balance_for_update(session, employee_id, leave_type_id, year)
    previous = quantize_days(balance.allocated_days)
    if adjustment_type == AdjustmentType.ADD:
        new_allocated = previous + amount
    else:
        new_allocated = previous - amount
        if new_allocated < ZERO:
            raise InvalidAdjustment(
                f"Cannot subtract {amount} days: only {previous} days are allocated for {year}"
            )

    await write_balance(session, balance, allocated_days=new_allocated)

    adjustment = LeaveBalanceAdjustment(
        balance_id=balance.id,
        employee_id=employee_id,
        leave_type_id=leave_type_id,
        year=year,
        adjustment_type=adjustment_type.value,
        amount=amount,
        reason=reason.strip(),
        previous_allocated=previous,
        new_allocated=new_allocated,
        adjusted_by=actor_id,
    )
    session.add(adjustment)
    await session.flush()

    logger.info(
        "Manual %s of %s days for employee=%s type=%s year=%s by %s: %s -> %s",
        adjustment_type.value,
        amount,
        employee_id,
        leave_type_id,
        year,
        actor_id,
        previous,
        new_allocated,
    )
    return balance, adjustment
