# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep, HrDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.holiday import (
    CreateHolidayRequest,
    HolidayListResponse,
    HolidayResponse,
    UpdateHolidayRequest,
)
from leave_ledger.services import holiday as holiday_service

holidays_router = APIRouter(prefix="/holidays", tags=["holidays"])


@holidays_router.get("", response_model=HolidayListResponse)
async def list_holidays(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=1900, le=2999),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=366),
) -> HolidayListResponse:
    return await holiday_service.list_holidays(session, year, start, end, offset, limit)


@holidays_router.post("", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_holiday(payload: CreateHolidayRequest, session: SessionDep, auth: HrDep) -> HolidayResponse:
    """Add a holiday. Only approvals made from now on see it."""
    return await holiday_service.create_holiday(session, auth, payload)


@holidays_router.patch("/{holiday_id}", response_model=HolidayResponse)
async def update_holiday(
    holiday_id: uuid.UUID,
    payload: UpdateHolidayRequest,
    session: SessionDep,
    auth: HrDep,
) -> HolidayResponse:
    return await holiday_service.update_holiday(session, auth, holiday_id, payload)


@holidays_router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(holiday_id: uuid.UUID, session: SessionDep, auth: HrDep) -> None:
    await holiday_service.delete_holiday(session, auth, holiday_id)
