# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep, HrDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.balance import (
    AdjustmentListResponse,
    AdjustmentResultResponse,
    BalanceListResponse,
    BalanceResponse,
    CreateAdjustmentRequest,
)
from leave_ledger.services import adjustment as adjustment_service
from leave_ledger.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)

adjustments_router = APIRouter(
    prefix="/adjustments",
    tags=["balances"],
)


@employee_balance_router.get("/{year}", response_model=BalanceListResponse)
async def list_employee_balances(
    employee_id: uuid.UUID,
    year: int,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceListResponse:
    """All leave-type balances of an employee for one year."""
    return await balance_service.list_balances(session, employee_id, year)


@employee_balance_router.get("/{leave_type_id}/{year}", response_model=BalanceResponse)
async def get_employee_balance(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Balance for one employee, leave type and year. Zeros when nothing was recorded yet."""
    return await balance_service.get_balance(session, employee_id, leave_type_id, year)


@adjustments_router.post("", response_model=AdjustmentResultResponse, status_code=status.HTTP_201_CREATED)
async def create_adjustment(
    payload: CreateAdjustmentRequest,
    session: SessionDep,
    auth: HrDep,
) -> AdjustmentResultResponse:
    """Add or subtract allocated days (HR only)."""
    return await balance_service.adjust_balance(session, auth, payload)


@adjustments_router.get("", response_model=AdjustmentListResponse)
async def list_adjustments(
    session: SessionDep,
    auth: HrDep,
    employee_id: uuid.UUID | None = Query(default=None),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AdjustmentListResponse:
    """Audit trail of manual adjustments, newest first (HR only)."""
    return await adjustment_service.list_adjustments(session, employee_id, start, end, offset, limit)
