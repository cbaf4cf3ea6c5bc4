# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from leave_ledger.models.enums import EmploymentTerm


class SetTermRateRequest(BaseModel):
    """Monthly accrual rate for every employee on an employment term."""

    monthly_rate: Decimal = Field(ge=0, le=31, decimal_places=2)
    description: str | None = Field(default=None, max_length=255)


class TermRateResponse(BaseModel):
    id: uuid.UUID
    employment_term: EmploymentTerm
    monthly_rate: Decimal
    description: str | None
    updated_at: datetime


class TermRateListResponse(BaseModel):
    items: list[TermRateResponse]
    total: int
