"""Read side of the append-only adjustment trail.

Rows are only ever inserted by ``ledger.manual_adjust``; nothing updates or
deletes them.
"""

from __future__ import annotations

from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.exceptions import ValidationError
from leave_ledger.models.adjustment import LeaveBalanceAdjustment
from leave_ledger.models.enums import AdjustmentType
from leave_ledger.schemas.balance import AdjustmentListResponse, AdjustmentResponse

if TYPE_CHECKING:
    import uuid
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession


def build_adjustment_response(adjustment: LeaveBalanceAdjustment) -> AdjustmentResponse:
    """Map an adjustment model to its response schema."""
    return AdjustmentResponse(
        id=adjustment.id,
        balance_id=adjustment.balance_id,
        employee_id=adjustment.employee_id,
        leave_type_id=adjustment.leave_type_id,
        year=adjustment.year,
        adjustment_type=AdjustmentType(adjustment.adjustment_type),
        amount=adjustment.amount,
        reason=adjustment.reason,
        previous_allocated=adjustment.previous_allocated,
        new_allocated=adjustment.new_allocated,
        adjusted_by=adjustment.adjusted_by,
        created_at=adjustment.created_at,
    )


async def list_adjustments(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    start: date | None = None,
    end: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AdjustmentListResponse:
    """List adjustments, newest first, by employee and/or created_at date range.

    ``start`` and ``end`` are inclusive calendar dates in UTC.
    """
    if start is not None and end is not None and end < start:
        raise ValidationError("end must be on or after start")

    base_filter = []
    if employee_id is not None:
        base_filter.append(col(LeaveBalanceAdjustment.employee_id) == employee_id)
    if start is not None:
        base_filter.append(col(LeaveBalanceAdjustment.created_at) >= datetime.combine(start, time.min, tzinfo=UTC))
    if end is not None:
        next_day = datetime.combine(end + timedelta(days=1), time.min, tzinfo=UTC)
        base_filter.append(col(LeaveBalanceAdjustment.created_at) < next_day)

    count_result = await session.execute(
        select(func.count()).select_from(LeaveBalanceAdjustment).where(*base_filter)
    )
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveBalanceAdjustment)
        .where(*base_filter)
        .order_by(col(LeaveBalanceAdjustment.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    adjustments = list(result.scalars().all())

    return AdjustmentListResponse(
        items=[build_adjustment_response(a) for a in adjustments],
        total=total,
    )
