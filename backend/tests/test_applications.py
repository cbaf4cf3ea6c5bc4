"""Tests for the leave application workflow: submit, approve, reject, withdraw,
cancel, sandwich snapshots and their symmetric reversal.

April 2025: the 4th is a Friday and the 7th is a Monday.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlmodel import col

from leave_ledger.models.application import SandwichBridge
from leave_ledger.models.audit import AuditLog
from leave_ledger.models.enums import NotificationEvent
from leave_ledger.services.employee import EmployeeInfo

if TYPE_CHECKING:
    from httpx import AsyncClient, Response
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_ledger.services.employee import InMemoryEmployeeService
    from leave_ledger.services.notification import InMemoryNotificationService

HR_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b1")
OTHER_MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b2")
EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")

HR_HEADERS = {"X-User-Id": str(HR_ID), "X-Role": "hr"}
MANAGER_HEADERS = {"X-User-Id": str(MANAGER_ID), "X-Role": "manager"}
OTHER_MANAGER_HEADERS = {"X-User-Id": str(OTHER_MANAGER_ID), "X-Role": "manager"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}

APPLICATIONS_URL = "/applications"
YEAR = 2025


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _seed_employees(employees: InMemoryEmployeeService) -> None:
    employees.seed(
        EmployeeInfo(id=MANAGER_ID, full_name="Kiran Rao", email="kiran@example.com", join_date=date(2019, 4, 1))
    )
    employees.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            full_name="Asha Menon",
            email="asha@example.com",
            join_date=date(2023, 1, 15),
            manager_id=MANAGER_ID,
        )
    )


@pytest.fixture
async def granted_type_id(async_client: AsyncClient, leave_type_id: uuid.UUID) -> uuid.UUID:
    """Leave type with 10 days allocated to the employee for 2025."""
    resp = await async_client.post(
        "/adjustments",
        json={
            "employee_id": str(EMPLOYEE_ID),
            "leave_type_id": str(leave_type_id),
            "year": YEAR,
            "adjustment_type": "add",
            "amount": "10",
            "reason": "Opening balance",
        },
        headers=HR_HEADERS,
    )
    assert resp.status_code == 201
    return leave_type_id


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _submit(
    client: AsyncClient,
    leave_type_id: uuid.UUID,
    start: date,
    end: date,
    days: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> Response:
    body: dict[str, Any] = {
        "employee_id": str(EMPLOYEE_ID),
        "leave_type_id": str(leave_type_id),
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "days_count": days,
        **extra,
    }
    return await client.post(APPLICATIONS_URL, json=body, headers=headers or EMPLOYEE_HEADERS)


async def _submit_ok(
    client: AsyncClient, leave_type_id: uuid.UUID, start: date, end: date, days: str, **extra: Any
) -> str:
    resp = await _submit(client, leave_type_id, start, end, days, **extra)
    assert resp.status_code == 201, resp.text
    result: str = resp.json()["id"]
    return result


async def _transition(
    client: AsyncClient,
    application_id: str,
    new_status: str,
    headers: dict[str, str] | None = None,
) -> Response:
    return await client.post(
        f"{APPLICATIONS_URL}/{application_id}/transition",
        json={"new_status": new_status},
        headers=headers or MANAGER_HEADERS,
    )


async def _balance(client: AsyncClient, leave_type_id: uuid.UUID) -> dict[str, Any]:
    resp = await client.get(f"/employees/{EMPLOYEE_ID}/balances/{leave_type_id}/{YEAR}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data: dict[str, Any] = resp.json()
    return data


async def _application(client: AsyncClient, application_id: str) -> dict[str, Any]:
    resp = await client.get(f"{APPLICATIONS_URL}/{application_id}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data: dict[str, Any] = resp.json()
    return data


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def test_submit_creates_pending_without_ledger_effect(
    async_client: AsyncClient,
    granted_type_id: uuid.UUID,
    notifications: InMemoryNotificationService,
) -> None:
    resp = await _submit(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 9), "3")
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "pending"
    assert data["sandwich_deducted_days"] is None

    balance = await _balance(async_client, granted_type_id)
    assert Decimal(balance["used"]) == 0
    assert notifications.sent[-1].event_type == NotificationEvent.LEAVE_SUBMITTED


async def test_submit_for_someone_else_is_forbidden(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    resp = await _submit(
        async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1", headers=OTHER_MANAGER_HEADERS
    )
    assert resp.status_code == 403


async def test_hr_can_file_on_behalf(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    resp = await _submit(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1", headers=HR_HEADERS)
    assert resp.status_code == 201


async def test_submit_unknown_leave_type(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    resp = await _submit(async_client, uuid.uuid4(), date(2025, 4, 7), date(2025, 4, 7), "1")
    assert resp.status_code == 400


async def test_submit_overlap_is_rejected(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 9), "3")
    resp = await _submit(async_client, granted_type_id, date(2025, 4, 9), date(2025, 4, 10), "2")
    assert resp.status_code == 409
    assert resp.json()["error"] == "OverlapConflict"


async def test_submit_after_rejection_does_not_overlap(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 9), "3")
    assert (await _transition(async_client, app_id, "rejected")).status_code == 200
    resp = await _submit(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 9), "3")
    assert resp.status_code == 201


async def test_end_before_start_is_unprocessable(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    resp = await _submit(async_client, granted_type_id, date(2025, 4, 9), date(2025, 4, 7), "3")
    assert resp.status_code == 422


@pytest.mark.parametrize(
    ("end", "days", "extra"),
    [
        (date(2025, 4, 8), "0.5", {"is_half_day": True, "half_day_period": "first_half"}),
        (date(2025, 4, 7), "1", {"is_half_day": True, "half_day_period": "first_half"}),
        (date(2025, 4, 7), "0.5", {"is_half_day": True}),
        (date(2025, 4, 7), "1", {"half_day_period": "second_half"}),
        (date(2025, 4, 7), "1", {"lop_days": "1.5"}),
    ],
    ids=["multi-day-half", "half-day-full-count", "missing-period", "period-without-half-day", "lop-exceeds-days"],
)
async def test_submit_field_rules(
    async_client: AsyncClient,
    granted_type_id: uuid.UUID,
    end: date,
    days: str,
    extra: dict[str, Any],
) -> None:
    resp = await _submit(async_client, granted_type_id, date(2025, 4, 7), end, days, **extra)
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Approval and reversal
# ---------------------------------------------------------------------------


async def test_approve_debits_chargeable_minus_lop(
    async_client: AsyncClient,
    granted_type_id: uuid.UUID,
    notifications: InMemoryNotificationService,
) -> None:
    """Mon-Wed with 0.9 LOP: snapshot 3.0, balance debited 2.1."""
    app_id = await _submit_ok(
        async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 9), "3", lop_days="0.9"
    )

    resp = await _transition(async_client, app_id, "approved")
    assert resp.status_code == 200
    data = resp.json()
    assert data["application"]["status"] == "approved"
    assert Decimal(data["application"]["sandwich_deducted_days"]) == Decimal("3")
    assert data["application"]["is_sandwich_leave"] is False
    assert Decimal(data["balance"]["used"]) == Decimal("2.1")
    assert Decimal(data["balance"]["remaining"]) == Decimal("7.9")
    assert notifications.sent[-1].event_type == NotificationEvent.LEAVE_APPROVED


async def test_approve_then_withdraw_restores_exactly(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 4), date(2025, 4, 7), "2")

    approved = (await _transition(async_client, app_id, "approved")).json()
    assert Decimal(approved["application"]["sandwich_deducted_days"]) == Decimal("4")
    assert Decimal(approved["application"]["sandwich_extra_days"]) == Decimal("2")
    assert approved["application"]["is_sandwich_leave"] is True
    assert Decimal(approved["balance"]["used"]) == Decimal("4")

    withdrawn = await _transition(async_client, app_id, "withdrawn", headers=EMPLOYEE_HEADERS)
    assert withdrawn.status_code == 200
    data = withdrawn.json()
    assert data["application"]["status"] == "withdrawn"
    assert data["application"]["sandwich_deducted_days"] is None
    assert data["application"]["is_sandwich_leave"] is None
    assert Decimal(data["balance"]["used"]) == 0
    assert Decimal(data["balance"]["allocated"]) == Decimal("10")


async def test_reversal_uses_snapshot_not_current_calendar(
    async_client: AsyncClient, granted_type_id: uuid.UUID
) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 9), "3")
    await _transition(async_client, app_id, "approved")

    # A holiday added afterwards does not change what is restored.
    resp = await async_client.post(
        "/holidays", json={"date": "2025-04-08", "name": "Late holiday"}, headers=HR_HEADERS
    )
    assert resp.status_code == 201

    data = (await _transition(async_client, app_id, "rejected")).json()
    assert Decimal(data["balance"]["used"]) == 0


async def test_approve_weekend_only_range_fails_and_stays_pending(
    async_client: AsyncClient, granted_type_id: uuid.UUID
) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 5), date(2025, 4, 6), "2")
    resp = await _transition(async_client, app_id, "approved")
    assert resp.status_code == 400

    assert (await _application(async_client, app_id))["status"] == "pending"
    assert Decimal((await _balance(async_client, granted_type_id))["used"]) == 0


async def test_approval_allows_negative_remaining(async_client: AsyncClient, leave_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, leave_type_id, date(2025, 4, 7), date(2025, 4, 8), "2")
    data = (await _transition(async_client, app_id, "approved")).json()
    assert Decimal(data["balance"]["remaining"]) == Decimal("-2")


async def test_half_day_approval(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(
        async_client,
        granted_type_id,
        date(2025, 4, 7),
        date(2025, 4, 7),
        "0.5",
        is_half_day=True,
        half_day_period="second_half",
    )
    data = (await _transition(async_client, app_id, "approved")).json()
    assert Decimal(data["application"]["sandwich_deducted_days"]) == Decimal("0.5")
    assert Decimal(data["balance"]["used"]) == Decimal("0.5")


async def test_hr_cancel_of_approved_restores(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    await _transition(async_client, app_id, "approved")
    data = (await _transition(async_client, app_id, "cancelled", headers=HR_HEADERS)).json()
    assert data["application"]["status"] == "cancelled"
    assert Decimal(data["balance"]["used"]) == 0


# ---------------------------------------------------------------------------
# Sandwich across two applications
# ---------------------------------------------------------------------------


async def _approve_friday_and_monday(client: AsyncClient, leave_type_id: uuid.UUID) -> tuple[str, str]:
    friday = await _submit_ok(client, leave_type_id, date(2025, 4, 4), date(2025, 4, 4), "1")
    monday = await _submit_ok(client, leave_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")

    first = (await _transition(client, friday, "approved")).json()
    assert Decimal(first["application"]["sandwich_deducted_days"]) == Decimal("1")

    second = (await _transition(client, monday, "approved")).json()
    assert Decimal(second["application"]["sandwich_deducted_days"]) == Decimal("3")
    assert second["application"]["is_sandwich_leave"] is True
    assert Decimal(second["balance"]["used"]) == Decimal("4")
    return friday, monday


async def test_second_approval_records_bridge(
    async_client: AsyncClient, db_session: AsyncSession, granted_type_id: uuid.UUID
) -> None:
    friday, monday = await _approve_friday_and_monday(async_client, granted_type_id)

    bridges = (await db_session.execute(select(SandwichBridge))).scalars().all()
    assert len(bridges) == 1
    assert str(bridges[0].bearer_application_id) == monday
    assert str(bridges[0].partner_application_id) == friday
    assert bridges[0].bridged_days == Decimal("2")
    assert bridges[0].released_at is None


async def test_withdrawing_partner_releases_bridge(
    async_client: AsyncClient, db_session: AsyncSession, granted_type_id: uuid.UUID
) -> None:
    friday, monday = await _approve_friday_and_monday(async_client, granted_type_id)

    data = (await _transition(async_client, friday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == Decimal("1")

    bearer = await _application(async_client, monday)
    assert bearer["status"] == "approved"
    assert Decimal(bearer["sandwich_deducted_days"]) == Decimal("1")
    assert Decimal(bearer["sandwich_extra_days"]) == 0
    assert bearer["is_sandwich_leave"] is False
    assert "released" in bearer["sandwich_reason"]

    release_entries = (
        (await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "RELEASE_BRIDGE"))).scalars().all()
    )
    assert len(release_entries) == 1
    assert str(release_entries[0].entity_id) == monday

    # Reversing the bearer afterwards restores only what it still holds.
    data = (await _transition(async_client, monday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == 0


async def test_withdrawing_bearer_leaves_partner_untouched(
    async_client: AsyncClient, db_session: AsyncSession, granted_type_id: uuid.UUID
) -> None:
    friday, monday = await _approve_friday_and_monday(async_client, granted_type_id)

    data = (await _transition(async_client, monday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == Decimal("1")

    partner = await _application(async_client, friday)
    assert Decimal(partner["sandwich_deducted_days"]) == Decimal("1")

    bridges = (await db_session.execute(select(SandwichBridge))).scalars().all()
    assert all(b.released_at is not None for b in bridges)

    data = (await _transition(async_client, friday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == 0


async def _approve_friday_and_monday_with_lop(client: AsyncClient, leave_type_id: uuid.UUID) -> tuple[str, str]:
    """Friday plain, Monday with one LOP day: Monday's snapshot is 3 but it debits 2."""
    friday = await _submit_ok(client, leave_type_id, date(2025, 4, 4), date(2025, 4, 4), "1")
    monday = await _submit_ok(client, leave_type_id, date(2025, 4, 7), date(2025, 4, 7), "1", lop_days="1")

    await _transition(client, friday, "approved")
    second = (await _transition(client, monday, "approved")).json()
    assert Decimal(second["application"]["sandwich_deducted_days"]) == Decimal("3")
    assert Decimal(second["balance"]["used"]) == Decimal("3")
    return friday, monday


async def test_releasing_bridge_from_lop_bearer_refunds_only_what_it_paid(
    async_client: AsyncClient, granted_type_id: uuid.UUID
) -> None:
    friday, monday = await _approve_friday_and_monday_with_lop(async_client, granted_type_id)

    data = (await _transition(async_client, friday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == 0

    bearer = await _application(async_client, monday)
    assert Decimal(bearer["sandwich_deducted_days"]) == Decimal("1")
    assert bearer["is_sandwich_leave"] is False

    data = (await _transition(async_client, monday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == 0
    assert Decimal(data["balance"]["remaining"]) == Decimal("10")


async def test_withdrawing_lop_bearer_first_leaves_partner_charge(
    async_client: AsyncClient, granted_type_id: uuid.UUID
) -> None:
    friday, monday = await _approve_friday_and_monday_with_lop(async_client, granted_type_id)

    data = (await _transition(async_client, monday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == Decimal("1")
    assert Decimal((await _application(async_client, friday))["sandwich_deducted_days"]) == Decimal("1")

    data = (await _transition(async_client, friday, "withdrawn", headers=EMPLOYEE_HEADERS)).json()
    assert Decimal(data["balance"]["used"]) == 0
    assert Decimal(data["balance"]["remaining"]) == Decimal("10")


async def test_preview_reports_bridge_without_writing(
    async_client: AsyncClient, db_session: AsyncSession, granted_type_id: uuid.UUID
) -> None:
    friday = await _submit_ok(async_client, granted_type_id, date(2025, 4, 4), date(2025, 4, 4), "1")
    await _transition(async_client, friday, "approved")

    resp = await async_client.post(
        f"{APPLICATIONS_URL}/preview",
        json={"employee_id": str(EMPLOYEE_ID), "start_date": "2025-04-07", "end_date": "2025-04-07"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["deducted_days"]) == Decimal("3")
    assert Decimal(data["bridged_days"]) == Decimal("2")
    assert data["bridges"][0]["partner_application_id"] == friday

    assert (await db_session.execute(select(SandwichBridge))).scalars().all() == []


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


async def test_duplicate_approval_is_a_noop(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 8), "2")
    await _transition(async_client, app_id, "approved")

    resp = await _transition(async_client, app_id, "approved")
    assert resp.status_code == 200
    assert Decimal(resp.json()["balance"]["used"]) == Decimal("2")


async def test_duplicate_transition_still_checks_permission(
    async_client: AsyncClient, granted_type_id: uuid.UUID
) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 8), "2")
    await _transition(async_client, app_id, "approved")

    resp = await _transition(async_client, app_id, "approved", headers=OTHER_MANAGER_HEADERS)
    assert resp.status_code == 403
    assert "balance" not in resp.json()

    resp = await _transition(async_client, app_id, "approved", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_owner_repeating_own_cancellation_is_a_noop(
    async_client: AsyncClient, granted_type_id: uuid.UUID
) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    assert (await _transition(async_client, app_id, "cancelled", headers=EMPLOYEE_HEADERS)).status_code == 200

    resp = await _transition(async_client, app_id, "cancelled", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["application"]["status"] == "cancelled"


@pytest.mark.parametrize("terminal", ["rejected", "withdrawn", "cancelled"])
async def test_terminal_states_cannot_be_approved(
    async_client: AsyncClient, granted_type_id: uuid.UUID, terminal: str
) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    assert (await _transition(async_client, app_id, terminal, headers=HR_HEADERS)).status_code == 200

    resp = await _transition(async_client, app_id, "approved")
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidTransition"


async def test_approved_cannot_go_back_to_pending(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    await _transition(async_client, app_id, "approved")
    resp = await _transition(async_client, app_id, "pending", headers=HR_HEADERS)
    assert resp.status_code == 409


async def test_transition_unknown_application(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    resp = await _transition(async_client, str(uuid.uuid4()), "approved")
    assert resp.status_code == 404


async def test_transitions_are_audited(
    async_client: AsyncClient, db_session: AsyncSession, granted_type_id: uuid.UUID
) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    await _transition(async_client, app_id, "approved")

    result = await db_session.execute(
        select(AuditLog).where(col(AuditLog.entity_id) == uuid.UUID(app_id)).order_by(col(AuditLog.created_at))
    )
    actions = [entry.action for entry in result.scalars().all()]
    assert actions == ["SUBMIT", "APPROVE"]


async def test_history_endpoint(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    await _transition(async_client, app_id, "approved")

    resp = await async_client.get(f"{APPLICATIONS_URL}/{app_id}/history", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    submit, approve = body["items"]
    assert submit["action"] == "SUBMIT"
    assert submit["before"] is None
    assert approve["action"] == "APPROVE"
    assert approve["actor_id"] == str(MANAGER_ID)
    assert approve["before"]["status"] == "pending"
    assert approve["after"]["status"] == "approved"


async def test_history_of_unknown_application(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{APPLICATIONS_URL}/{uuid.uuid4()}/history", headers=HR_HEADERS)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------


async def test_employee_cannot_approve_own_leave(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    resp = await _transition(async_client, app_id, "approved", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_other_manager_cannot_approve(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    resp = await _transition(async_client, app_id, "approved", headers=OTHER_MANAGER_HEADERS)
    assert resp.status_code == 403


async def test_manager_cannot_withdraw(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    app_id = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    resp = await _transition(async_client, app_id, "withdrawn", headers=MANAGER_HEADERS)
    assert resp.status_code == 403


async def test_owner_can_cancel_only_while_pending(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    pending = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    assert (await _transition(async_client, pending, "cancelled", headers=EMPLOYEE_HEADERS)).status_code == 200

    approved = await _submit_ok(async_client, granted_type_id, date(2025, 4, 8), date(2025, 4, 8), "1")
    await _transition(async_client, approved, "approved")
    resp = await _transition(async_client, approved, "cancelled", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


async def test_list_filters_by_status(async_client: AsyncClient, granted_type_id: uuid.UUID) -> None:
    first = await _submit_ok(async_client, granted_type_id, date(2025, 4, 7), date(2025, 4, 7), "1")
    await _submit_ok(async_client, granted_type_id, date(2025, 4, 8), date(2025, 4, 8), "1")
    await _transition(async_client, first, "approved")

    resp = await async_client.get(
        APPLICATIONS_URL, params={"status": "approved", "employee_id": str(EMPLOYEE_ID)}, headers=HR_HEADERS
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == first
