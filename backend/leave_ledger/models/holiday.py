from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_ledger.models.base import UUIDBase


class Holiday(UUIDBase, table=True):
    """A holiday. Non-optional holidays are not charged as leave days."""

    __tablename__ = "holiday"
    __table_args__ = (sa.UniqueConstraint("date", name="uq_holiday_date"),)

    date: datetime.date = Field(index=True)
    name: str = Field(max_length=255)
    is_optional: bool = False
