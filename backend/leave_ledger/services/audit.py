"""General audit log for application transitions and reference-data changes.

Balance adjustments have their own trail (``LeaveBalanceAdjustment``); this
log records who moved which application where, and the before/after image
of the row.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.audit import AuditLog
from leave_ledger.schemas.audit import AuditEntryResponse, AuditHistoryResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from leave_ledger.models.enums import AuditAction, AuditEntityType


def _json_value(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Row image for ``before_json``/``after_json``, with every value JSON-safe."""
    return {key: _json_value(value) for key, value in model.model_dump().items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an entry to the caller's transaction. It commits or rolls back with the change it describes."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def list_entity_history(
    session: AsyncSession,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
) -> AuditHistoryResponse:
    """All audit entries for one entity, oldest first."""
    result = await session.execute(
        select(AuditLog)
        .where(
            col(AuditLog.entity_type) == entity_type.value,
            col(AuditLog.entity_id) == entity_id,
        )
        .order_by(col(AuditLog.created_at))
    )
    entries = list(result.scalars().all())
    return AuditHistoryResponse(
        items=[
            AuditEntryResponse(
                id=entry.id,
                actor_id=entry.actor_id,
                action=entry.action,
                before=entry.before_json,
                after=entry.after_json,
                created_at=entry.created_at,
            )
            for entry in entries
        ],
        total=len(entries),
    )
