# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class MonthlyAccrualPayload(BaseModel):
    """Payload for POST /accruals/monthly."""

    period: str = Field(pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="Accrual month as YYYY-MM")


class AnniversaryPayload(BaseModel):
    """Payload for POST /accruals/anniversary."""

    target_date: date


class EmployeeAccrualResult(BaseModel):
    """Outcome of the monthly accrual for one employee."""

    employee_id: uuid.UUID
    success: bool
    leave_type_id: uuid.UUID | None = None
    skipped: bool = False
    new_allocated: Decimal | None = None
    error: str | None = None


class MonthlyAccrualResponse(BaseModel):
    """Response from the monthly accrual trigger endpoint."""

    period: str
    processed: int
    credited: int
    skipped: int
    errors: int
    results: list[EmployeeAccrualResult]


class EmployeeAnniversaryResult(BaseModel):
    """Outcome of anniversary processing for one employee."""

    employee_id: uuid.UUID
    success: bool
    leave_type_id: uuid.UUID | None = None
    skipped: bool = False
    carried_forward: Decimal | None = None
    error: str | None = None


class AnniversaryRunResponse(BaseModel):
    """Response from the anniversary trigger endpoint."""

    target_date: date
    processed: int
    carried: int
    skipped: int
    errors: int
    results: list[EmployeeAnniversaryResult]
