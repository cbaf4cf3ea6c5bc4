# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase, now_utc
from leave_ledger.models.enums import LeaveStatus


class LeaveApplication(UUIDBase, TimestampMixin, table=True):
    """An employee's leave application and its approval state.

    The ``sandwich_*`` fields are the snapshot taken at approval time. They
    are the only source used when the approval is later reversed.
    """

    __tablename__ = "leave_application"
    __table_args__ = (sa.Index("ix_application_employee_status", "employee_id", "status"),)

    employee_id: uuid.UUID = Field(index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id"), nullable=False, index=True),
    )
    start_date: date = Field(index=True)
    end_date: date
    days_count: Decimal = Field(max_digits=6, decimal_places=2)
    is_half_day: bool = False
    half_day_period: str | None = Field(default=None, max_length=20)
    lop_days: Decimal = Field(default=Decimal("0"), max_digits=6, decimal_places=2)
    status: str = Field(default=LeaveStatus.PENDING, max_length=20, sa_column_kwargs={"server_default": "pending"})
    reason: str | None = None
    approver_comments: str | None = None
    applied_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None

    sandwich_deducted_days: Decimal | None = Field(default=None, max_digits=6, decimal_places=2)
    sandwich_extra_days: Decimal | None = Field(default=None, max_digits=6, decimal_places=2)
    is_sandwich_leave: bool | None = None
    sandwich_reason: str | None = Field(default=None, max_length=255)

    @property
    def balance_year(self) -> int:
        return self.start_date.year

    @property
    def debited_days(self) -> Decimal:
        """Days actually taken from the balance: the snapshot minus LOP, never negative."""
        if self.sandwich_deducted_days is None:
            return Decimal("0")
        return max(Decimal("0"), self.sandwich_deducted_days - self.lop_days)


class SandwichBridge(UUIDBase, TimestampMixin, table=True):
    """Non-working days charged to ``bearer`` because ``partner`` sits on the other side.

    An active bridge is released when either application leaves the approved state.
    """

    __tablename__ = "sandwich_bridge"

    bearer_application_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_application.id"), nullable=False, index=True),
    )
    partner_application_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_application.id"), nullable=False, index=True),
    )
    bridged_days: Decimal = Field(max_digits=6, decimal_places=2)
    first_bridged_date: date
    last_bridged_date: date
    released_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
