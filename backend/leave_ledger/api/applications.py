# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leave_ledger.api.deps import AuthDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import LeaveStatus
from leave_ledger.schemas.application import (
    ApplicationListResponse,
    ApplicationResponse,
    SandwichPreviewPayload,
    SandwichPreviewResponse,
    SubmitApplicationPayload,
    TransitionPayload,
    TransitionResponse,
)
from leave_ledger.schemas.audit import AuditHistoryResponse
from leave_ledger.services import application as application_service

applications_router = APIRouter(
    prefix="/applications",
    tags=["applications"],
)


@applications_router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    payload: SubmitApplicationPayload,
    session: SessionDep,
    auth: AuthDep,
) -> ApplicationResponse:
    """File a new leave application."""
    return await application_service.submit_application(session, auth, payload)


@applications_router.post("/preview", response_model=SandwichPreviewResponse)
async def preview_application(
    payload: SandwichPreviewPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SandwichPreviewResponse:
    """Show the chargeable days a date range would cost, without saving anything."""
    return await application_service.preview_sandwich(session, payload)


@applications_router.get("", response_model=ApplicationListResponse)
async def list_applications(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> ApplicationListResponse:
    """List leave applications with optional filters."""
    return await application_service.list_applications(session, employee_id, status_filter, offset, limit)


@applications_router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ApplicationResponse:
    """Get a single leave application."""
    return await application_service.get_application(session, application_id)


@applications_router.post("/{application_id}/transition", response_model=TransitionResponse)
async def transition_application(
    application_id: uuid.UUID,
    payload: TransitionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> TransitionResponse:
    """Approve, reject, withdraw or cancel an application."""
    return await application_service.transition_application(
        session, auth, application_id, payload.new_status, payload.comments
    )


@applications_router.get("/{application_id}/history", response_model=AuditHistoryResponse)
async def get_application_history(
    application_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> AuditHistoryResponse:
    """Audit trail of an application, oldest entry first."""
    return await application_service.get_application_history(session, application_id)
