# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field, computed_field


class CreateHolidayRequest(BaseModel):
    date: date
    name: str = Field(min_length=1, max_length=255)
    is_optional: bool = False


class UpdateHolidayRequest(BaseModel):
    """Rename a holiday or flip it between mandatory and optional. The date is fixed."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    is_optional: bool | None = None


class HolidayResponse(BaseModel):
    id: uuid.UUID
    date: date
    name: str
    is_optional: bool

    @computed_field
    @property
    def blocks_leave(self) -> bool:
        """True when the day is non-working in the calendar used for sandwich charging."""
        return not self.is_optional and self.date.weekday() < 5


class HolidayListResponse(BaseModel):
    items: list[HolidayResponse]
    total: int
