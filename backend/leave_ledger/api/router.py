from fastapi import APIRouter

from leave_ledger.api.accruals import accruals_router
from leave_ledger.api.applications import applications_router
from leave_ledger.api.balances import adjustments_router, employee_balance_router
from leave_ledger.api.employees import employees_router
from leave_ledger.api.employment_terms import employment_terms_router
from leave_ledger.api.holidays import holidays_router
from leave_ledger.api.leave_types import leave_types_router

api_router = APIRouter()
api_router.include_router(leave_types_router)
api_router.include_router(applications_router)
api_router.include_router(employee_balance_router)
api_router.include_router(adjustments_router)
api_router.include_router(accruals_router)
api_router.include_router(holidays_router)
api_router.include_router(employees_router)
api_router.include_router(employment_terms_router)
