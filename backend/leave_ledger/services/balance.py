from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.balance import LeaveBalance
from leave_ledger.models.enums import AdjustmentType, NotificationEvent
from leave_ledger.schemas.balance import AdjustmentResultResponse, BalanceListResponse, BalanceResponse
from leave_ledger.services import ledger
from leave_ledger.services.adjustment import build_adjustment_response
from leave_ledger.services.leave_type import require_active_leave_type
from leave_ledger.services.notification import notify_safely
from leave_ledger.services.transaction import run_with_retry

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.models.adjustment import LeaveBalanceAdjustment
    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.balance import CreateAdjustmentRequest

_ZERO = Decimal("0")


def build_balance_response(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    balance: LeaveBalance | None,
) -> BalanceResponse:
    """Map a balance row to its response schema; a missing row reads as zeros."""
    if balance is None:
        return BalanceResponse(
            employee_id=employee_id,
            leave_type_id=leave_type_id,
            year=year,
            allocated=_ZERO,
            used=_ZERO,
            remaining=_ZERO,
            carry_forward=_ZERO,
            monthly_credit_rate=_ZERO,
            last_credited_period=None,
            updated_at=None,
        )
    return BalanceResponse(
        employee_id=balance.employee_id,
        leave_type_id=balance.leave_type_id,
        year=balance.year,
        allocated=balance.allocated_days,
        used=balance.used_days,
        remaining=balance.remaining_days,
        carry_forward=balance.carry_forward_from_previous_year,
        monthly_credit_rate=balance.monthly_credit_rate,
        last_credited_period=balance.last_credited_period,
        updated_at=balance.updated_at,
    )


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> BalanceResponse:
    """Read {allocated, used, remaining, carry_forward} for one employee, type and year."""
    balance = await ledger.get_balance(session, employee_id, leave_type_id, year)
    return build_balance_response(employee_id, leave_type_id, year, balance)


async def list_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
) -> BalanceListResponse:
    """All existing balance rows of an employee for one year."""
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.year) == year,
        )
        .order_by(col(LeaveBalance.created_at))
    )
    balances = list(result.scalars().all())
    return BalanceListResponse(
        items=[build_balance_response(b.employee_id, b.leave_type_id, b.year, b) for b in balances],
        total=len(balances),
    )


# ---------------------------------------------------------------------------
# Write path: HR adjustments
# ---------------------------------------------------------------------------


async def adjust_balance(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateAdjustmentRequest,
) -> AdjustmentResultResponse:
    """Apply a manual HR adjustment and return the new balance.

    Flow:
    1. Validate the leave type
    2. Lock the balance row and change allocated days
    3. Append the adjustment record
    4. Commit (retrying on a concurrent balance write)
    5. Notify the employee
    """
    await require_active_leave_type(session, payload.leave_type_id)

    async def _apply() -> tuple[LeaveBalance, LeaveBalanceAdjustment]:
        return await ledger.manual_adjust(
            session,
            payload.employee_id,
            payload.leave_type_id,
            payload.year,
            AdjustmentType(payload.adjustment_type),
            payload.amount,
            payload.reason,
            auth.user_id,
        )

    balance, adjustment = await run_with_retry(session, _apply)

    await notify_safely(
        NotificationEvent.BALANCE_ADJUSTED,
        payload.employee_id,
        {
            "leave_type_id": str(payload.leave_type_id),
            "year": payload.year,
            "adjustment_type": adjustment.adjustment_type,
            "amount": str(adjustment.amount),
            "new_allocated": str(adjustment.new_allocated),
        },
    )

    return AdjustmentResultResponse(
        balance=build_balance_response(payload.employee_id, payload.leave_type_id, payload.year, balance),
        adjustment=build_adjustment_response(adjustment),
    )
