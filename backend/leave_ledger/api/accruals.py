# ruff: noqa: TC001, TC003
"""API endpoints for triggering the accrual jobs by hand."""

from __future__ import annotations

from fastapi import APIRouter

from leave_ledger.api.deps import HrDep
from leave_ledger.db import SessionDep
from leave_ledger.schemas.accrual import (
    AnniversaryPayload,
    AnniversaryRunResponse,
    EmployeeAccrualResult,
    EmployeeAnniversaryResult,
    MonthlyAccrualPayload,
    MonthlyAccrualResponse,
)
from leave_ledger.services.accrual import parse_period, run_anniversary_processing, run_monthly_accrual

accruals_router = APIRouter(
    prefix="/accruals",
    tags=["accruals"],
)


@accruals_router.post("/monthly", response_model=MonthlyAccrualResponse)
async def trigger_monthly_accrual(
    payload: MonthlyAccrualPayload,
    session: SessionDep,
    auth: HrDep,
) -> MonthlyAccrualResponse:
    """Run the monthly accrual for a period (HR only).

    Safe to repeat: employees already credited for the period are skipped.
    """
    result = await run_monthly_accrual(session, parse_period(payload.period))
    return MonthlyAccrualResponse(
        period=result.period,
        processed=result.processed,
        credited=result.credited,
        skipped=result.skipped,
        errors=result.errors,
        results=[
            EmployeeAccrualResult(
                employee_id=o.employee_id,
                success=o.success,
                leave_type_id=o.leave_type_id,
                skipped=o.skipped,
                new_allocated=o.new_allocated,
                error=o.error,
            )
            for o in result.results
        ],
    )


@accruals_router.post("/anniversary", response_model=AnniversaryRunResponse)
async def trigger_anniversary_processing(
    payload: AnniversaryPayload,
    session: SessionDep,
    auth: HrDep,
) -> AnniversaryRunResponse:
    """Run anniversary carry-forward for a date (HR only)."""
    result = await run_anniversary_processing(session, payload.target_date)
    return AnniversaryRunResponse(
        target_date=result.target_date,
        processed=result.processed,
        carried=result.carried,
        skipped=result.skipped,
        errors=result.errors,
        results=[
            EmployeeAnniversaryResult(
                employee_id=o.employee_id,
                success=o.success,
                leave_type_id=o.leave_type_id,
                skipped=o.skipped,
                carried_forward=o.carried_forward,
                error=o.error,
            )
            for o in result.results
        ],
    )
