# ruff: noqa: TC003
"""Leave application lifecycle.

Status changes are the only application-driven trigger for ledger
mutation. Effects are keyed on the (old, new) status pair, so writing the
same status twice is a no-op rather than a second debit or restore.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_ledger.exceptions import (
    InvalidTransition,
    NotFoundError,
    OverlapConflict,
    PermissionDeniedError,
    ValidationError,
)
from leave_ledger.models.application import LeaveApplication, SandwichBridge
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import (
    AuditAction,
    AuditEntityType,
    HalfDayPeriod,
    LeaveStatus,
    NotificationEvent,
)
from leave_ledger.schemas.application import (
    ApplicationListResponse,
    ApplicationResponse,
    BridgeResponse,
    SandwichPreviewResponse,
    TransitionResponse,
)
from leave_ledger.services import ledger, sandwich
from leave_ledger.services.audit import list_entity_history, model_to_audit_dict, write_audit_log
from leave_ledger.services.balance import build_balance_response
from leave_ledger.services.employee import get_employee_service
from leave_ledger.services.leave_type import require_active_leave_type
from leave_ledger.services.notification import notify_safely
from leave_ledger.services.transaction import run_with_retry

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.application import SandwichPreviewPayload, SubmitApplicationPayload
    from leave_ledger.schemas.audit import AuditHistoryResponse
    from leave_ledger.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HALF_DAY = Decimal("0.5")
_REASON_MAX_LENGTH = 255

_ACTIVE_STATUSES = [LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value]

# Every allowed (old, new) pair and the audit action it records.
_TRANSITIONS: dict[tuple[LeaveStatus, LeaveStatus], AuditAction] = {
    (LeaveStatus.PENDING, LeaveStatus.APPROVED): AuditAction.APPROVE,
    (LeaveStatus.PENDING, LeaveStatus.REJECTED): AuditAction.REJECT,
    (LeaveStatus.PENDING, LeaveStatus.WITHDRAWN): AuditAction.WITHDRAW,
    (LeaveStatus.PENDING, LeaveStatus.CANCELLED): AuditAction.CANCEL,
    (LeaveStatus.APPROVED, LeaveStatus.REJECTED): AuditAction.REJECT,
    (LeaveStatus.APPROVED, LeaveStatus.WITHDRAWN): AuditAction.WITHDRAW,
    (LeaveStatus.APPROVED, LeaveStatus.CANCELLED): AuditAction.CANCEL,
}

_EVENTS: dict[LeaveStatus, NotificationEvent] = {
    LeaveStatus.APPROVED: NotificationEvent.LEAVE_APPROVED,
    LeaveStatus.REJECTED: NotificationEvent.LEAVE_REJECTED,
    LeaveStatus.WITHDRAWN: NotificationEvent.LEAVE_WITHDRAWN,
    LeaveStatus.CANCELLED: NotificationEvent.LEAVE_CANCELLED,
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_application_response(application: LeaveApplication) -> ApplicationResponse:
    """Map an application model to its response schema."""
    return ApplicationResponse(
        id=application.id,
        employee_id=application.employee_id,
        leave_type_id=application.leave_type_id,
        start_date=application.start_date,
        end_date=application.end_date,
        days_count=application.days_count,
        is_half_day=application.is_half_day,
        half_day_period=HalfDayPeriod(application.half_day_period) if application.half_day_period else None,
        lop_days=application.lop_days,
        status=LeaveStatus(application.status),
        reason=application.reason,
        approver_comments=application.approver_comments,
        applied_at=application.applied_at,
        decided_at=application.decided_at,
        decided_by=application.decided_by,
        sandwich_deducted_days=application.sandwich_deducted_days,
        sandwich_extra_days=application.sandwich_extra_days,
        is_sandwich_leave=application.is_sandwich_leave,
        sandwich_reason=application.sandwich_reason,
        created_at=application.created_at,
    )


def _truncate_reason(reason: str) -> str:
    if len(reason) <= _REASON_MAX_LENGTH:
        return reason
    return reason[: _REASON_MAX_LENGTH - 3] + "..."


async def _get_application_or_404(
    session: AsyncSession,
    application_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveApplication:
    """Fetch an application by ID. Raises 404 if not found."""
    query = select(LeaveApplication).where(col(LeaveApplication.id) == application_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    application = result.scalar_one_or_none()
    if application is None:
        raise NotFoundError("Leave application not found")
    return application


async def _check_application_overlap(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> None:
    """Raise 409 if a pending or approved application shares any date with the range."""
    result = await session.execute(
        select(LeaveApplication.id)
        .where(
            col(LeaveApplication.employee_id) == employee_id,
            col(LeaveApplication.status).in_(_ACTIVE_STATUSES),
            col(LeaveApplication.start_date) <= end_date,
            col(LeaveApplication.end_date) >= start_date,
        )
        .limit(1)
    )
    if result.scalar_one_or_none() is not None:
        raise OverlapConflict("Application overlaps with an existing pending or approved application")


def _validate_submission(payload: SubmitApplicationPayload) -> None:
    """Field rules that do not need the database."""
    if payload.end_date < payload.start_date:
        raise ValidationError("end_date must be on or after start_date")
    if payload.days_count <= 0:
        raise ValidationError("days_count must be positive")
    if payload.lop_days < 0:
        raise ValidationError("lop_days must not be negative")
    if payload.lop_days > payload.days_count:
        raise ValidationError("lop_days cannot exceed days_count")

    if payload.is_half_day:
        if payload.start_date != payload.end_date:
            raise ValidationError("A half day leave must start and end on the same date")
        if payload.days_count != _HALF_DAY:
            raise ValidationError("A half day leave must have days_count of 0.5")
        if payload.half_day_period is None:
            raise ValidationError("half_day_period is required for a half day leave")
    elif payload.half_day_period is not None:
        raise ValidationError("half_day_period is only allowed for a half day leave")


async def _check_transition_permission(
    auth: AuthContext,
    application: LeaveApplication,
    old_status: LeaveStatus,
    new_status: LeaveStatus,
) -> None:
    """Enforce who may move an application into ``new_status``."""
    if auth.is_hr:
        return

    is_owner = auth.user_id == application.employee_id

    if new_status in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
        employee = await get_employee_service().get_employee(application.employee_id)
        is_manager = employee is not None and employee.is_managed_by(auth.user_id)
        if not is_manager or is_owner:
            raise PermissionDeniedError("Only HR or the employee's manager can approve or reject leave")
        return

    if new_status == LeaveStatus.WITHDRAWN:
        if not is_owner:
            raise PermissionDeniedError("Only the employee or HR can withdraw leave")
        return

    if new_status == LeaveStatus.CANCELLED:
        if not is_owner:
            raise PermissionDeniedError("Only the employee or HR can cancel leave")
        if old_status == LeaveStatus.APPROVED:
            raise PermissionDeniedError("Approved leave can only be cancelled by HR")


async def _active_bridges(
    session: AsyncSession,
    *,
    bearer_id: uuid.UUID | None = None,
    partner_id: uuid.UUID | None = None,
) -> list[SandwichBridge]:
    query = select(SandwichBridge).where(col(SandwichBridge.released_at).is_(None))
    if bearer_id is not None:
        query = query.where(col(SandwichBridge.bearer_application_id) == bearer_id)
    if partner_id is not None:
        query = query.where(col(SandwichBridge.partner_application_id) == partner_id)
    result = await session.execute(query.order_by(col(SandwichBridge.first_bridged_date)))
    return list(result.scalars().all())


async def _approve(session: AsyncSession, application: LeaveApplication) -> None:
    """Snapshot the chargeable days, record bridges and debit the balance."""
    result = await sandwich.compute(
        session,
        application.employee_id,
        application.start_date,
        application.end_date,
        application.is_half_day,
        LeaveStatus.APPROVED,
        reference_time=application.applied_at,
        exclude_application_id=application.id,
    )

    application.sandwich_deducted_days = ledger.quantize_days(result.deducted_days)
    application.sandwich_extra_days = ledger.quantize_days(result.extra_days)
    application.is_sandwich_leave = result.is_sandwich_leave
    application.sandwich_reason = _truncate_reason(result.reason)

    for bridge in result.bridges:
        session.add(
            SandwichBridge(
                bearer_application_id=application.id,
                partner_application_id=bridge.partner_application_id,
                bridged_days=bridge.days,
                first_bridged_date=bridge.first_date,
                last_bridged_date=bridge.last_date,
            )
        )

    await ledger.debit_used(
        session,
        application.employee_id,
        application.leave_type_id,
        application.balance_year,
        application.debited_days,
    )


async def _release_bridge_from_bearer(
    session: AsyncSession,
    auth: AuthContext,
    bridge: SandwichBridge,
    partner: LeaveApplication,
    now: datetime,
) -> None:
    """Drop a bridge whose partner left the approved state.

    The bearer keeps every other day it was charged; only the bridged run
    comes off its snapshot, and the balance gets back the difference it
    actually paid.
    """
    bearer = await _get_application_or_404(session, bridge.bearer_application_id, for_update=True)
    bridge.released_at = now
    session.add(bridge)

    if bearer.sandwich_deducted_days is None:
        return

    before = model_to_audit_dict(bearer)
    previous_debit = bearer.debited_days

    bearer.sandwich_deducted_days = ledger.quantize_days(
        max(_ZERO, bearer.sandwich_deducted_days - bridge.bridged_days)
    )
    extra = max(_ZERO, (bearer.sandwich_extra_days or _ZERO) - bridge.bridged_days)
    bearer.sandwich_extra_days = ledger.quantize_days(extra)
    bearer.is_sandwich_leave = extra > 0
    bearer.sandwich_reason = _truncate_reason(
        f"{bearer.sandwich_reason or ''}; bridge to {partner.id} released ({bridge.bridged_days} days)".lstrip("; ")
    )
    session.add(bearer)

    refund = previous_debit - bearer.debited_days
    if refund > 0:
        await ledger.restore_used(
            session,
            bearer.employee_id,
            bearer.leave_type_id,
            bearer.balance_year,
            refund,
        )

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.APPLICATION,
        entity_id=bearer.id,
        action=AuditAction.RELEASE_BRIDGE,
        before_json=before,
        after_json=model_to_audit_dict(bearer),
    )
    logger.info(
        "Released %s bridged days from application=%s after partner=%s left approved",
        bridge.bridged_days,
        bearer.id,
        partner.id,
    )


async def _reverse(session: AsyncSession, auth: AuthContext, application: LeaveApplication, now: datetime) -> None:
    """Undo an approval using only the stored snapshot."""
    await ledger.restore_used(
        session,
        application.employee_id,
        application.leave_type_id,
        application.balance_year,
        application.debited_days,
    )

    for bridge in await _active_bridges(session, bearer_id=application.id):
        bridge.released_at = now
        session.add(bridge)

    for bridge in await _active_bridges(session, partner_id=application.id):
        await _release_bridge_from_bearer(session, auth, bridge, application, now)

    application.sandwich_deducted_days = None
    application.sandwich_extra_days = None
    application.is_sandwich_leave = None
    application.sandwich_reason = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_application(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitApplicationPayload,
) -> ApplicationResponse:
    """File a pending leave application. No ledger effect.

    Flow:
    1. Check the actor may file for this employee
    2. Validate fields, leave type and employee
    3. Check for overlapping pending or approved applications
    4. Create the application (PENDING)
    5. Write audit log
    6. Commit, then notify
    """
    # 1. Permission.
    if auth.user_id != payload.employee_id and not auth.is_hr:
        raise PermissionDeniedError("Employees can only file leave for themselves")

    # 2. Validation.
    _validate_submission(payload)
    await require_active_leave_type(session, payload.leave_type_id)

    employee = await get_employee_service().get_employee(payload.employee_id)
    if employee is None:
        raise ValidationError(f"Unknown employee {payload.employee_id}")
    if not employee.is_active:
        raise ValidationError("Inactive employees cannot file leave")

    # 3. Overlap.
    await _check_application_overlap(session, payload.employee_id, payload.start_date, payload.end_date)

    # 4. Create application.
    application = LeaveApplication(
        employee_id=payload.employee_id,
        leave_type_id=payload.leave_type_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days_count=payload.days_count,
        is_half_day=payload.is_half_day,
        half_day_period=payload.half_day_period.value if payload.half_day_period else None,
        lop_days=payload.lop_days,
        status=LeaveStatus.PENDING.value,
        reason=payload.reason,
    )
    session.add(application)
    await session.flush()

    # 5. Audit log.
    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.APPLICATION,
        entity_id=application.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(application),
    )

    # 6. Commit.
    await session.commit()
    await session.refresh(application)

    await notify_safely(
        NotificationEvent.LEAVE_SUBMITTED,
        application.employee_id,
        {
            "application_id": str(application.id),
            "start_date": application.start_date.isoformat(),
            "end_date": application.end_date.isoformat(),
            "days_count": str(application.days_count),
        },
    )
    return _build_application_response(application)


async def transition_application(
    session: AsyncSession,
    auth: AuthContext,
    application_id: uuid.UUID,
    new_status: LeaveStatus,
    comments: str | None = None,
) -> TransitionResponse:
    """Move an application to ``new_status`` and apply the ledger effect of the pair.

    pending -> approved: compute chargeable days, snapshot them, debit
    ``max(0, chargeable - lop)``. approved -> withdrawn/rejected/cancelled:
    restore exactly what the snapshot says was debited and release any
    sandwich bridges. pending -> rejected/withdrawn/cancelled: status only.
    Writing the current status again changes nothing, but only for a caller
    allowed to make that move.
    """
    new_status = LeaveStatus(new_status)
    application = await _get_application_or_404(session, application_id)
    old_status = LeaveStatus(application.status)

    await _check_transition_permission(auth, application, old_status, new_status)

    if old_status == new_status:
        logger.info("Ignoring duplicate %s transition for application=%s", new_status, application_id)
        balance = await ledger.get_balance(
            session, application.employee_id, application.leave_type_id, application.balance_year
        )
        return TransitionResponse(
            application=_build_application_response(application),
            balance=build_balance_response(
                application.employee_id, application.leave_type_id, application.balance_year, balance
            ),
        )

    action = _TRANSITIONS.get((old_status, new_status))
    if action is None:
        raise InvalidTransition(f"Cannot move a {old_status.value} application to {new_status.value}")

    async def _apply() -> LeaveApplication:
        locked = await _get_application_or_404(session, application_id, for_update=True)
        current = LeaveStatus(locked.status)
        if current == new_status:
            return locked
        if current != old_status:
            raise InvalidTransition(f"Cannot move a {current.value} application to {new_status.value}")

        before = model_to_audit_dict(locked)
        now = now_utc()

        if old_status == LeaveStatus.PENDING and new_status == LeaveStatus.APPROVED:
            await _approve(session, locked)
        elif old_status == LeaveStatus.APPROVED:
            await _reverse(session, auth, locked, now)

        locked.status = new_status.value
        locked.decided_at = now
        locked.decided_by = auth.user_id
        if comments is not None:
            locked.approver_comments = comments
        session.add(locked)
        await session.flush()

        await write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.APPLICATION,
            entity_id=locked.id,
            action=action,
            before_json=before,
            after_json=model_to_audit_dict(locked),
        )
        return locked

    application = await run_with_retry(session, _apply)
    await session.refresh(application)

    balance = await ledger.get_balance(
        session, application.employee_id, application.leave_type_id, application.balance_year
    )
    logger.info(
        "Application=%s moved %s -> %s by %s",
        application.id,
        old_status.value,
        new_status.value,
        auth.user_id,
    )

    await notify_safely(
        _EVENTS[new_status],
        application.employee_id,
        {
            "application_id": str(application.id),
            "status": new_status.value,
            "comments": comments,
            "deducted_days": str(application.sandwich_deducted_days)
            if application.sandwich_deducted_days is not None
            else None,
        },
    )

    return TransitionResponse(
        application=_build_application_response(application),
        balance=build_balance_response(
            application.employee_id, application.leave_type_id, application.balance_year, balance
        ),
    )


async def get_application(session: AsyncSession, application_id: uuid.UUID) -> ApplicationResponse:
    """Get a single application."""
    application = await _get_application_or_404(session, application_id)
    return _build_application_response(application)


async def get_application_history(session: AsyncSession, application_id: uuid.UUID) -> AuditHistoryResponse:
    """Audit trail of one application: submission, transitions and bridge releases."""
    await _get_application_or_404(session, application_id)
    return await list_entity_history(session, AuditEntityType.APPLICATION, application_id)


async def list_applications(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status: LeaveStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> ApplicationListResponse:
    """List applications, newest start date first."""
    base_filter = []
    if employee_id is not None:
        base_filter.append(col(LeaveApplication.employee_id) == employee_id)
    if status is not None:
        base_filter.append(col(LeaveApplication.status) == status.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveApplication).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveApplication)
        .where(*base_filter)
        .order_by(col(LeaveApplication.start_date).desc(), col(LeaveApplication.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    applications = list(result.scalars().all())

    return ApplicationListResponse(
        items=[_build_application_response(a) for a in applications],
        total=total,
    )


async def preview_sandwich(
    session: AsyncSession,
    payload: SandwichPreviewPayload,
) -> SandwichPreviewResponse:
    """Chargeable days a range would cost if decided now. Writes nothing."""
    result = await sandwich.compute(
        session,
        payload.employee_id,
        payload.start_date,
        payload.end_date,
        payload.is_half_day,
        payload.target_status,
        reference_time=now_utc(),
    )
    return SandwichPreviewResponse(
        deducted_days=result.deducted_days,
        reason=result.reason,
        is_sandwich_leave=result.is_sandwich_leave,
        working_days=result.working_days,
        interior_days=result.interior_days,
        bridged_days=result.bridged_days,
        penalty_days=result.penalty_days,
        bridges=[
            BridgeResponse(
                partner_application_id=bridge.partner_application_id,
                days=bridge.days,
                first_date=bridge.first_date,
                last_date=bridge.last_date,
            )
            for bridge in result.bridges
        ],
    )
