# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel


class AuditEntryResponse(BaseModel):
    """One recorded change: who did what, with the row before and after."""

    id: uuid.UUID
    actor_id: uuid.UUID
    action: str
    before: dict[str, Any] | None
    after: dict[str, Any] | None
    created_at: datetime


class AuditHistoryResponse(BaseModel):
    """Audit entries for one entity, oldest first."""

    items: list[AuditEntryResponse]
    total: int
