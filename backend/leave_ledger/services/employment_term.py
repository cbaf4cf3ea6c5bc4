"""Per-employment-term accrual rates.

A configured term rate replaces the tenure rate in the monthly accrual for
every employee on that term. Terms without a row keep the tenure rule.
Carry-forward eligibility always follows tenure.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_ledger.exceptions import NotFoundError
from leave_ledger.models.accrual import EmploymentTermRate
from leave_ledger.models.base import now_utc
from leave_ledger.models.enums import AuditAction, AuditEntityType, EmploymentTerm, RateSource
from leave_ledger.schemas.employment_term import TermRateListResponse, TermRateResponse
from leave_ledger.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.schemas.auth import AuthContext
    from leave_ledger.schemas.employment_term import SetTermRateRequest
    from leave_ledger.services.tenure import TenureInfo

logger = logging.getLogger(__name__)


def resolve_monthly_rate(
    tenure: TenureInfo,
    employment_term: EmploymentTerm | None,
    term_rates: dict[EmploymentTerm, Decimal],
) -> tuple[Decimal, RateSource]:
    """The rate the monthly accrual credits, and where it came from."""
    if employment_term is not None and employment_term in term_rates:
        return term_rates[employment_term], RateSource.EMPLOYMENT_TERM
    return tenure.monthly_rate, RateSource.TENURE


async def load_term_rates(session: AsyncSession) -> dict[EmploymentTerm, Decimal]:
    result = await session.execute(select(EmploymentTermRate))
    return {EmploymentTerm(row.employment_term): row.monthly_rate for row in result.scalars().all()}


def _to_response(rate: EmploymentTermRate) -> TermRateResponse:
    return TermRateResponse.model_validate(rate, from_attributes=True)


async def _get_term_rate(session: AsyncSession, term: EmploymentTerm) -> EmploymentTermRate | None:
    result = await session.execute(
        select(EmploymentTermRate).where(col(EmploymentTermRate.employment_term) == term.value)
    )
    return result.scalar_one_or_none()


async def list_term_rates(session: AsyncSession) -> TermRateListResponse:
    result = await session.execute(select(EmploymentTermRate).order_by(col(EmploymentTermRate.employment_term)))
    rates = list(result.scalars().all())
    return TermRateListResponse(items=[_to_response(r) for r in rates], total=len(rates))


async def set_term_rate(
    session: AsyncSession,
    auth: AuthContext,
    term: EmploymentTerm,
    payload: SetTermRateRequest,
) -> TermRateResponse:
    """Create or replace the rate for ``term``. Applies from the next accrual run."""
    rate = await _get_term_rate(session, term)
    before = model_to_audit_dict(rate) if rate is not None else None

    if rate is None:
        rate = EmploymentTermRate(
            employment_term=term.value,
            monthly_rate=payload.monthly_rate,
            description=payload.description,
        )
    else:
        rate.monthly_rate = payload.monthly_rate
        rate.description = payload.description
        rate.updated_at = now_utc()
    session.add(rate)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYMENT_TERM_RATE,
        entity_id=rate.id,
        action=AuditAction.CREATE if before is None else AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(rate),
    )
    await session.commit()
    logger.info("Monthly rate for %s set to %s by %s", term.value, payload.monthly_rate, auth.user_id)
    return _to_response(rate)


async def delete_term_rate(session: AsyncSession, auth: AuthContext, term: EmploymentTerm) -> None:
    """Drop the override so employees on ``term`` fall back to the tenure rate."""
    rate = await _get_term_rate(session, term)
    if rate is None:
        raise NotFoundError(f"No rate configured for {term.value}")

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYMENT_TERM_RATE,
        entity_id=rate.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(rate),
    )
    await session.delete(rate)
    await session.commit()
