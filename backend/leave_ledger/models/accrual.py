# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class AccrualCredit(UUIDBase, TimestampMixin, table=True):
    """One monthly accrual credit. At most one row per balance and ``YYYY-MM`` period."""

    __tablename__ = "accrual_credit"
    __table_args__ = (sa.UniqueConstraint("balance_id", "period", name="uq_accrual_credit_balance_period"),)

    balance_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_balance.id"), nullable=False, index=True),
    )
    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID
    period: str = Field(max_length=7)
    amount: Decimal = Field(max_digits=8, decimal_places=2)
    rate_source: str = Field(max_length=20)


class EmploymentTermRate(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """Monthly accrual rate for an employment term. Overrides the tenure rate when present."""

    __tablename__ = "employment_term_rate"

    employment_term: str = Field(max_length=30, unique=True, index=True)
    monthly_rate: Decimal = Field(max_digits=5, decimal_places=2)
    description: str | None = Field(default=None, max_length=255)
