# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase


class LeaveBalance(UUIDBase, TimestampMixin, UpdatedAtMixin, table=True):
    """Running day totals for one employee, leave type and year.

    ``remaining_days`` is derived on read and never stored.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_balance_employee_type_year"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id"), nullable=False, index=True),
    )
    year: int
    allocated_days: Decimal = Field(default=Decimal("0"), max_digits=8, decimal_places=2)
    used_days: Decimal = Field(default=Decimal("0"), max_digits=8, decimal_places=2)
    carry_forward_from_previous_year: Decimal = Field(default=Decimal("0"), max_digits=8, decimal_places=2)
    monthly_credit_rate: Decimal = Field(default=Decimal("0"), max_digits=8, decimal_places=2)
    last_credited_period: str | None = Field(default=None, max_length=7)
    anniversary_processed_on: date | None = None
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})

    @property
    def remaining_days(self) -> Decimal:
        return self.allocated_days - self.used_days
