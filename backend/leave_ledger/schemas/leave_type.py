# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateLeaveTypeRequest(BaseModel):
    """Request body for creating a leave type."""

    key: str = Field(min_length=1, max_length=50, pattern=r"^[a-z][a-z0-9_]*$")
    name: str = Field(min_length=1, max_length=255)
    accrues: bool = True


class UpdateLeaveTypeRequest(BaseModel):
    """Request body for updating a leave type. Omitted fields are unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    accrues: bool | None = None
    is_active: bool | None = None


class LeaveTypeResponse(BaseModel):
    """Response schema for a leave type."""

    id: uuid.UUID
    key: str
    name: str
    accrues: bool
    is_active: bool
    created_at: datetime


class LeaveTypeListResponse(BaseModel):
    """List of leave types."""

    items: list[LeaveTypeResponse]
    total: int
