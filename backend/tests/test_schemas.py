"""Unit tests for request payload validation."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from leave_ledger.models.enums import LeaveStatus
from leave_ledger.schemas.accrual import MonthlyAccrualPayload
from leave_ledger.schemas.application import SandwichPreviewPayload, SubmitApplicationPayload, TransitionPayload
from leave_ledger.schemas.balance import CreateAdjustmentRequest
from leave_ledger.schemas.leave_type import CreateLeaveTypeRequest


def _submit(**kwargs: object) -> SubmitApplicationPayload:
    values: dict[str, object] = {
        "employee_id": uuid.uuid4(),
        "leave_type_id": uuid.uuid4(),
        "start_date": date(2025, 4, 7),
        "end_date": date(2025, 4, 9),
        "days_count": Decimal("3"),
    }
    values.update(kwargs)
    return SubmitApplicationPayload.model_validate(values)


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


def test_submit_defaults() -> None:
    payload = _submit()
    assert payload.is_half_day is False
    assert payload.lop_days == 0
    assert payload.half_day_period is None


def test_submit_rejects_reversed_dates() -> None:
    with pytest.raises(ValidationError, match="end_date"):
        _submit(start_date=date(2025, 4, 9), end_date=date(2025, 4, 7))


def test_submit_rejects_non_positive_days() -> None:
    with pytest.raises(ValidationError):
        _submit(days_count=Decimal("0"))


def test_submit_rejects_negative_lop() -> None:
    with pytest.raises(ValidationError):
        _submit(lop_days=Decimal("-1"))


def test_submit_rejects_three_decimal_places() -> None:
    with pytest.raises(ValidationError):
        _submit(days_count=Decimal("1.125"))


def test_transition_accepts_lowercase_status() -> None:
    payload = TransitionPayload.model_validate({"new_status": "withdrawn"})
    assert payload.new_status == LeaveStatus.WITHDRAWN


def test_transition_rejects_unknown_status() -> None:
    with pytest.raises(ValidationError):
        TransitionPayload.model_validate({"new_status": "archived"})


def test_preview_defaults_to_approved_target() -> None:
    payload = SandwichPreviewPayload(employee_id=uuid.uuid4(), start_date=date(2025, 4, 7), end_date=date(2025, 4, 7))
    assert payload.target_status == LeaveStatus.APPROVED


# ---------------------------------------------------------------------------
# Adjustments, accruals, leave types
# ---------------------------------------------------------------------------


def test_adjustment_requires_reason() -> None:
    with pytest.raises(ValidationError):
        CreateAdjustmentRequest.model_validate(
            {
                "employee_id": str(uuid.uuid4()),
                "leave_type_id": str(uuid.uuid4()),
                "year": 2025,
                "adjustment_type": "add",
                "amount": "1",
                "reason": "",
            }
        )


@pytest.mark.parametrize("period", ["2025-1", "2025-00", "2025-13", "25-01"])
def test_monthly_period_format(period: str) -> None:
    with pytest.raises(ValidationError):
        MonthlyAccrualPayload(period=period)


def test_monthly_period_valid() -> None:
    assert MonthlyAccrualPayload(period="2025-12").period == "2025-12"


def test_leave_type_key_pattern() -> None:
    assert CreateLeaveTypeRequest(key="comp_off", name="Compensatory Off").key == "comp_off"
    with pytest.raises(ValidationError):
        CreateLeaveTypeRequest(key="Comp Off", name="Compensatory Off")
