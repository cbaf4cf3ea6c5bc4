from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_ledger.exceptions import AppError, NotFoundError, ValidationError
from leave_ledger.models.enums import AuditAction, AuditEntityType
from leave_ledger.models.leave_type import LeaveType
from leave_ledger.schemas.leave_type import LeaveTypeListResponse, LeaveTypeResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.leave_type import CreateLeaveTypeRequest, UpdateLeaveTypeRequest


def _build_leave_type_response(leave_type: LeaveType) -> LeaveTypeResponse:
    return LeaveTypeResponse(
        id=leave_type.id,
        key=leave_type.key,
        name=leave_type.name,
        accrues=leave_type.accrues,
        is_active=leave_type.is_active,
        created_at=leave_type.created_at,
    )


async def get_leave_type_or_404(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    """Fetch a leave type by ID. Raises 404 if not found."""
    result = await session.execute(select(LeaveType).where(col(LeaveType.id) == leave_type_id))
    leave_type = result.scalar_one_or_none()
    if leave_type is None:
        raise NotFoundError("Leave type not found")
    return leave_type


async def require_active_leave_type(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    """Validate a leave type referenced by a ledger operation.

    Unknown and inactive types are malformed input, not missing resources.
    """
    result = await session.execute(select(LeaveType).where(col(LeaveType.id) == leave_type_id))
    leave_type = result.scalar_one_or_none()
    if leave_type is None:
        raise ValidationError(f"Unknown leave type {leave_type_id}")
    if not leave_type.is_active:
        raise ValidationError(f"Leave type '{leave_type.key}' is inactive")
    return leave_type


async def list_accruing_leave_types(session: AsyncSession) -> list[LeaveType]:
    """Active leave types that receive monthly accrual and anniversary carry-forward."""
    result = await session.execute(
        select(LeaveType)
        .where(col(LeaveType.accrues).is_(True), col(LeaveType.is_active).is_(True))
        .order_by(col(LeaveType.key))
    )
    return list(result.scalars().all())


async def create_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Create a leave type."""
    leave_type = LeaveType(key=payload.key, name=payload.name, accrues=payload.accrues)
    session.add(leave_type)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise AppError(f"Leave type '{payload.key}' already exists", status_code=409) from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)


async def update_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Update name, accrual flag or active flag of a leave type."""
    leave_type = await get_leave_type_or_404(session, leave_type_id)
    before = model_to_audit_dict(leave_type)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(leave_type, field, value)
    session.add(leave_type)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)


async def list_leave_types(session: AsyncSession, include_inactive: bool = False) -> LeaveTypeListResponse:
    """List leave types ordered by key."""
    query = select(LeaveType).order_by(col(LeaveType.key))
    if not include_inactive:
        query = query.where(col(LeaveType.is_active).is_(True))

    result = await session.execute(query)
    leave_types = list(result.scalars().all())
    return LeaveTypeListResponse(
        items=[_build_leave_type_response(lt) for lt in leave_types],
        total=len(leave_types),
    )
