# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveBalanceAdjustment(UUIDBase, TimestampMixin, table=True):
    """Immutable record of one manual HR change to allocated days."""

    __tablename__ = "leave_balance_adjustment"
    __table_args__ = (sa.Index("ix_adjustment_employee_created", "employee_id", "created_at"),)

    balance_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_balance.id"), nullable=False, index=True),
    )
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int
    adjustment_type: str = Field(max_length=20)
    amount: Decimal = Field(max_digits=8, decimal_places=2)
    reason: str
    previous_allocated: Decimal = Field(max_digits=8, decimal_places=2)
    new_allocated: Decimal = Field(max_digits=8, decimal_places=2)
    adjusted_by: uuid.UUID
