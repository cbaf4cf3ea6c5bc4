from __future__ import annotations

from sqlmodel import Field

from leave_ledger.models.base import TimestampMixin, UUIDBase


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """A kind of leave tracked by the ledger (e.g. annual, comp-off)."""

    __tablename__ = "leave_type"

    key: str = Field(max_length=50, unique=True, index=True)
    name: str = Field(max_length=255)
    accrues: bool = Field(default=True)
    is_active: bool = Field(default=True)
