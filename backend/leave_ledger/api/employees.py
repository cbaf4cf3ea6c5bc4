# ruff: noqa: B008, TC001, TC003
"""Employee records held by the identity stub, plus the tenure view the accrual jobs use."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from leave_ledger.api.deps import AuthDep, HrDep
from leave_ledger.exceptions import NotFoundError
from leave_ledger.schemas.employee import (
    EmployeeListResponse,
    EmployeeResponse,
    TenureResponse,
    UpsertEmployeeRequest,
)
from leave_ledger.services.employee import EmployeeInfo, get_employee_service
from leave_ledger.services.tenure import compute_tenure

employees_router = APIRouter(prefix="/employees", tags=["employees"])


async def _employee_or_404(employee_id: uuid.UUID) -> EmployeeInfo:
    employee = await get_employee_service().get_employee(employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(auth: AuthDep) -> EmployeeListResponse:
    employees = sorted(await get_employee_service().list_employees(), key=lambda e: e.full_name)
    items = [EmployeeResponse.model_validate(e.model_dump()) for e in employees]
    return EmployeeListResponse(items=items, total=len(items))


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def upsert_employee(employee_id: uuid.UUID, payload: UpsertEmployeeRequest, auth: HrDep) -> EmployeeResponse:
    """Create or replace an employee record (HR only)."""
    employee = EmployeeInfo(id=employee_id, **payload.model_dump())
    get_employee_service().seed(employee)  # ty: ignore[unresolved-attribute]
    return EmployeeResponse.model_validate(employee.model_dump())


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(employee_id: uuid.UUID, auth: AuthDep) -> EmployeeResponse:
    employee = await _employee_or_404(employee_id)
    return EmployeeResponse.model_validate(employee.model_dump())


@employees_router.get("/{employee_id}/tenure", response_model=TenureResponse)
async def get_tenure(
    employee_id: uuid.UUID,
    auth: AuthDep,
    as_of: date | None = Query(default=None),
) -> TenureResponse:
    """Tenure, monthly accrual rate and carry-forward eligibility on ``as_of`` (default today).

    Returns 400 when the employee has no join date.
    """
    employee = await _employee_or_404(employee_id)
    tenure = compute_tenure(employee.join_date, as_of)
    return TenureResponse(
        employee_id=employee.id,
        join_date=tenure.join_date,
        evaluation_date=tenure.evaluation_date,
        tenure_months=tenure.tenure_months,
        monthly_rate=tenure.monthly_rate,
        can_carry_forward=tenure.can_carry_forward,
        next_anniversary_date=tenure.next_anniversary_date,
    )
