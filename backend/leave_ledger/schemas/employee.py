# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from leave_ledger.models.enums import EmployeeStatus, EmploymentTerm


class UpsertEmployeeRequest(BaseModel):
    """Employee record pushed into the identity stub."""

    full_name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    join_date: date | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    manager_id: uuid.UUID | None = None
    employment_term: EmploymentTerm | None = None


class EmployeeResponse(BaseModel):
    id: uuid.UUID
    full_name: str
    email: str
    join_date: date | None
    status: EmployeeStatus
    manager_id: uuid.UUID | None
    employment_term: EmploymentTerm | None


class EmployeeListResponse(BaseModel):
    items: list[EmployeeResponse]
    total: int


class TenureResponse(BaseModel):
    """Accrual facts for an employee as of ``evaluation_date``."""

    employee_id: uuid.UUID
    join_date: date
    evaluation_date: date
    tenure_months: int
    monthly_rate: Decimal
    can_carry_forward: bool
    next_anniversary_date: date
