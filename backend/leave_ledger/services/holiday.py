"""Holiday maintenance.

Edits only affect approvals made afterwards: an approved application keeps
the sandwich snapshot taken when it was approved.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import AppError, NotFoundError, ValidationError
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.models.holiday import Holiday
from leave_ledger.schemas.holiday import HolidayListResponse, HolidayResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.holiday import CreateHolidayRequest, UpdateHolidayRequest

logger = logging.getLogger(__name__)


def _to_response(holiday: Holiday) -> HolidayResponse:
    return HolidayResponse.model_validate(holiday, from_attributes=True)


def _date_window(year: int | None, start: date | None, end: date | None) -> tuple[date | None, date | None]:
    """Fold the ``year`` shorthand and explicit bounds into one inclusive window."""
    if year is not None:
        if start is not None or end is not None:
            raise ValidationError("Use either year or start/end, not both")
        return date(year, 1, 1), date(year, 12, 31)
    if start is not None and end is not None and end < start:
        raise ValidationError("end must not be before start")
    return start, end


async def _load_or_404(session: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
    holiday = await session.get(Holiday, holiday_id)
    if holiday is None:
        raise NotFoundError("Holiday not found")
    return holiday


async def create_holiday(session: AsyncSession, auth: AuthContext, payload: CreateHolidayRequest) -> HolidayResponse:
    holiday = Holiday(**payload.model_dump())
    session.add(holiday)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError(f"A holiday already exists on {payload.date.isoformat()}", status_code=409) from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )
    await session.commit()
    logger.info("Holiday %s (%s) added by %s", holiday.date, holiday.name, auth.user_id)
    return _to_response(holiday)


async def update_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
    payload: UpdateHolidayRequest,
) -> HolidayResponse:
    holiday = await _load_or_404(session, holiday_id)
    before = model_to_audit_dict(holiday)

    changes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    for key, value in changes.items():
        setattr(holiday, key, value)
    session.add(holiday)

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(holiday),
    )
    await session.commit()
    return _to_response(holiday)


async def list_holidays(
    session: AsyncSession,
    year: int | None = None,
    start: date | None = None,
    end: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> HolidayListResponse:
    """Holidays in date order, optionally limited to a year or an inclusive date window."""
    window_start, window_end = _date_window(year, start, end)
    conditions = []
    if window_start is not None:
        conditions.append(col(Holiday.date) >= window_start)
    if window_end is not None:
        conditions.append(col(Holiday.date) <= window_end)

    total = (await session.execute(select(func.count()).select_from(Holiday).where(*conditions))).scalar_one()
    rows = await session.execute(
        select(Holiday).where(*conditions).order_by(col(Holiday.date)).offset(offset).limit(limit)
    )
    return HolidayListResponse(items=[_to_response(h) for h in rows.scalars().all()], total=total)


async def delete_holiday(session: AsyncSession, auth: AuthContext, holiday_id: uuid.UUID) -> None:
    holiday = await _load_or_404(session, holiday_id)
    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(holiday),
    )
    await session.delete(holiday)
    await session.commit()
    logger.info("Holiday %s removed by %s", holiday.date, auth.user_id)
