"""Tests for settings and the employee and notification collaborator stubs."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from leave_ledger.config import Settings
from leave_ledger.exceptions import DownstreamNotificationFailure
from leave_ledger.models.enums import EmployeeStatus, NotificationEvent
from leave_ledger.services.employee import EmployeeInfo, EmployeeService, InMemoryEmployeeService
from leave_ledger.services.notification import (
    InMemoryNotificationService,
    NotificationService,
    notify_safely,
    set_notification_service,
)

EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")


class _FailingNotificationService:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def notify(self, event_type: NotificationEvent, employee_id: uuid.UUID, payload: dict[str, Any]) -> None:
        raise self.exc


def _make_employee(name: str = "Asha", **kwargs: Any) -> EmployeeInfo:
    return EmployeeInfo(
        id=uuid.uuid4(),
        full_name=f"{name} Menon",
        email=f"{name.lower()}@example.com",
        join_date=date(2023, 1, 15),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# InMemoryEmployeeService
# ---------------------------------------------------------------------------


async def test_employee_service_get_not_found() -> None:
    svc = InMemoryEmployeeService()
    assert await svc.get_employee(uuid.uuid4()) is None


async def test_employee_service_seed_and_list() -> None:
    svc = InMemoryEmployeeService()
    asha = _make_employee("Asha")
    ravi = _make_employee("Ravi", status=EmployeeStatus.INACTIVE)
    svc.seed(asha)
    svc.seed(ravi)

    assert await svc.get_employee(asha.id) == asha
    assert {e.id for e in await svc.list_employees()} == {asha.id, ravi.id}
    assert asha.is_active is True
    assert ravi.is_active is False


def test_employee_service_satisfies_protocol() -> None:
    assert isinstance(InMemoryEmployeeService(), EmployeeService)


def test_is_managed_by() -> None:
    manager_id = uuid.uuid4()
    managed = _make_employee("Asha", manager_id=manager_id)
    unmanaged = _make_employee("Ravi")

    assert managed.is_managed_by(manager_id) is True
    assert managed.is_managed_by(uuid.uuid4()) is False
    assert unmanaged.is_managed_by(manager_id) is False


async def test_employee_service_initial_records() -> None:
    asha = _make_employee("Asha")
    svc = InMemoryEmployeeService([asha])
    assert await svc.get_employee(asha.id) == asha


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


def test_notification_service_satisfies_protocol() -> None:
    assert isinstance(InMemoryNotificationService(), NotificationService)


async def test_notify_safely_records_event(notifications: InMemoryNotificationService) -> None:
    assert await notify_safely(NotificationEvent.LEAVE_APPROVED, EMPLOYEE_ID, {"days": "1"}) is True
    assert notifications.sent[-1].employee_id == EMPLOYEE_ID
    assert notifications.sent[-1].payload == {"days": "1"}


async def test_notify_safely_logs_downstream_failure(caplog: pytest.LogCaptureFixture) -> None:
    set_notification_service(_FailingNotificationService(DownstreamNotificationFailure("mail relay down")))

    with caplog.at_level(logging.WARNING, logger="leave_ledger.services.notification"):
        sent = await notify_safely(NotificationEvent.LEAVE_REJECTED, EMPLOYEE_ID)

    assert sent is False
    assert "mail relay down" in caplog.text


async def test_notify_safely_survives_unexpected_errors(caplog: pytest.LogCaptureFixture) -> None:
    set_notification_service(_FailingNotificationService(RuntimeError("boom")))

    with caplog.at_level(logging.ERROR, logger="leave_ledger.services.notification"):
        sent = await notify_safely(NotificationEvent.LEAVE_CREDITED, EMPLOYEE_ID)

    assert sent is False
    assert "crashed" in caplog.text


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.junior_monthly_rate == Decimal("1.5")
        assert settings.senior_monthly_rate == Decimal("2.0")
        assert settings.carry_forward_cap_days is None
        assert settings.sandwich_sudden_leave_penalty is False

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CARRY_FORWARD_CAP_DAYS", "5")
        monkeypatch.setenv("SANDWICH_SUDDEN_LEAVE_PENALTY", "true")
        settings = Settings()
        assert settings.carry_forward_cap_days == Decimal("5")
        assert settings.sandwich_sudden_leave_penalty is True

    def test_senior_rate_below_junior_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(junior_monthly_rate=Decimal("2"), senior_monthly_rate=Decimal("1"))
