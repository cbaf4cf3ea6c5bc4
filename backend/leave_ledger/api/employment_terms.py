# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, status

from leave_ledger.api.deps import AuthDep, HrDep
from leave_ledger.db import SessionDep
from leave_ledger.models.enums import EmploymentTerm
from leave_ledger.schemas.employment_term import SetTermRateRequest, TermRateListResponse, TermRateResponse
from leave_ledger.services import employment_term as employment_term_service

employment_terms_router = APIRouter(prefix="/employment-term-rates", tags=["accruals"])


@employment_terms_router.get("", response_model=TermRateListResponse)
async def list_term_rates(session: SessionDep, auth: AuthDep) -> TermRateListResponse:
    return await employment_term_service.list_term_rates(session)


@employment_terms_router.put("/{employment_term}", response_model=TermRateResponse)
async def set_term_rate(
    employment_term: EmploymentTerm,
    payload: SetTermRateRequest,
    session: SessionDep,
    auth: HrDep,
) -> TermRateResponse:
    """Set the monthly accrual rate for an employment term (HR only)."""
    return await employment_term_service.set_term_rate(session, auth, employment_term, payload)


@employment_terms_router.delete("/{employment_term}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_term_rate(employment_term: EmploymentTerm, session: SessionDep, auth: HrDep) -> None:
    """Remove a term rate; its employees accrue at the tenure rate again (HR only)."""
    await employment_term_service.delete_term_rate(session, auth, employment_term)
