# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_ledger.models.enums import HalfDayPeriod, LeaveStatus
from leave_ledger.schemas.balance import BalanceResponse

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitApplicationPayload(BaseModel):
    """Request body for filing a new leave application."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    days_count: Decimal = Field(gt=0, max_digits=6, decimal_places=2)
    is_half_day: bool = False
    half_day_period: HalfDayPeriod | None = None
    lop_days: Decimal = Field(default=Decimal("0"), ge=0, max_digits=6, decimal_places=2)
    reason: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must be on or after start_date"
            raise ValueError(msg)
        return self


class TransitionPayload(BaseModel):
    """Request body for moving an application to a new status."""

    new_status: LeaveStatus
    comments: str | None = Field(default=None, max_length=1000)


class SandwichPreviewPayload(BaseModel):
    """Request body for previewing the chargeable days of a date range."""

    employee_id: uuid.UUID
    start_date: date
    end_date: date
    is_half_day: bool = False
    target_status: LeaveStatus = LeaveStatus.APPROVED

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must be on or after start_date"
            raise ValueError(msg)
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ApplicationResponse(BaseModel):
    """Response schema for a single leave application."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    days_count: Decimal
    is_half_day: bool
    half_day_period: HalfDayPeriod | None
    lop_days: Decimal
    status: LeaveStatus
    reason: str | None
    approver_comments: str | None
    applied_at: datetime
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    sandwich_deducted_days: Decimal | None
    sandwich_extra_days: Decimal | None
    is_sandwich_leave: bool | None
    sandwich_reason: str | None
    created_at: datetime


class ApplicationListResponse(BaseModel):
    """Paginated list of leave applications."""

    items: list[ApplicationResponse]
    total: int


class TransitionResponse(BaseModel):
    """The application after a transition and the balance it touched."""

    application: ApplicationResponse
    balance: BalanceResponse


class BridgeResponse(BaseModel):
    """A non-working run that would be bridged to an approved partner."""

    partner_application_id: uuid.UUID
    days: Decimal
    first_date: date
    last_date: date


class SandwichPreviewResponse(BaseModel):
    """Chargeable days for a date range, before LOP."""

    deducted_days: Decimal
    reason: str
    is_sandwich_leave: bool
    working_days: Decimal
    interior_days: Decimal
    bridged_days: Decimal
    penalty_days: Decimal
    bridges: list[BridgeResponse]
