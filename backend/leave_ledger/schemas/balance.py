# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from leave_ledger.models.enums import AdjustmentType

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Balance for one employee, leave type and year."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int
    allocated: Decimal
    used: Decimal
    remaining: Decimal
    carry_forward: Decimal
    monthly_credit_rate: Decimal
    last_credited_period: str | None
    updated_at: datetime | None  # None when no row exists yet


class BalanceListResponse(BaseModel):
    """All leave-type balances for an employee in one year."""

    items: list[BalanceResponse]
    total: int


# ---------------------------------------------------------------------------
# Adjustment schemas
# ---------------------------------------------------------------------------


class CreateAdjustmentRequest(BaseModel):
    """Request body for a manual HR balance adjustment."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int = Field(ge=2000, le=2100)
    adjustment_type: AdjustmentType
    amount: Decimal = Field(gt=0, max_digits=8, decimal_places=2)
    reason: str = Field(min_length=1, max_length=1000)


class AdjustmentResponse(BaseModel):
    """A single immutable adjustment record."""

    id: uuid.UUID
    balance_id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int
    adjustment_type: AdjustmentType
    amount: Decimal
    reason: str
    previous_allocated: Decimal
    new_allocated: Decimal
    adjusted_by: uuid.UUID
    created_at: datetime


class AdjustmentListResponse(BaseModel):
    """Paginated adjustment records."""

    items: list[AdjustmentResponse]
    total: int


class AdjustmentResultResponse(BaseModel):
    """The new balance and the adjustment row that produced it."""

    balance: BalanceResponse
    adjustment: AdjustmentResponse

