"""Tests for leave type management."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpx import AsyncClient

HR_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")
EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")

HR_HEADERS = {"X-User-Id": str(HR_ID), "X-Role": "hr"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}

LEAVE_TYPES_URL = "/leave-types"


async def test_create_and_list(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL, json={"key": "annual", "name": "Annual Leave"}, headers=HR_HEADERS
    )
    assert resp.status_code == 201
    assert resp.json()["accrues"] is True
    assert resp.json()["is_active"] is True

    listed = (await async_client.get(LEAVE_TYPES_URL, headers=EMPLOYEE_HEADERS)).json()
    assert listed["total"] == 1
    assert listed["items"][0]["key"] == "annual"


async def test_duplicate_key_conflicts(async_client: AsyncClient) -> None:
    await async_client.post(LEAVE_TYPES_URL, json={"key": "annual", "name": "Annual Leave"}, headers=HR_HEADERS)
    resp = await async_client.post(LEAVE_TYPES_URL, json={"key": "annual", "name": "Other"}, headers=HR_HEADERS)
    assert resp.status_code == 409


async def test_invalid_key_is_unprocessable(async_client: AsyncClient) -> None:
    resp = await async_client.post(LEAVE_TYPES_URL, json={"key": "Annual Leave", "name": "x"}, headers=HR_HEADERS)
    assert resp.status_code == 422


async def test_create_requires_hr(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        LEAVE_TYPES_URL, json={"key": "annual", "name": "Annual Leave"}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403


async def test_deactivate_hides_from_default_list(async_client: AsyncClient, leave_type_id: uuid.UUID) -> None:
    resp = await async_client.patch(
        f"{LEAVE_TYPES_URL}/{leave_type_id}", json={"is_active": False}, headers=HR_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    active = (await async_client.get(LEAVE_TYPES_URL, headers=EMPLOYEE_HEADERS)).json()
    assert active["total"] == 0
    everything = (
        await async_client.get(LEAVE_TYPES_URL, params={"include_inactive": True}, headers=EMPLOYEE_HEADERS)
    ).json()
    assert everything["total"] == 1


async def test_inactive_type_rejects_adjustments(async_client: AsyncClient, leave_type_id: uuid.UUID) -> None:
    await async_client.patch(f"{LEAVE_TYPES_URL}/{leave_type_id}", json={"is_active": False}, headers=HR_HEADERS)
    resp = await async_client.post(
        "/adjustments",
        json={
            "employee_id": str(EMPLOYEE_ID),
            "leave_type_id": str(leave_type_id),
            "year": 2025,
            "adjustment_type": "add",
            "amount": "1",
            "reason": "Bonus day",
        },
        headers=HR_HEADERS,
    )
    assert resp.status_code == 400


async def test_update_unknown_type(async_client: AsyncClient) -> None:
    resp = await async_client.patch(f"{LEAVE_TYPES_URL}/{uuid.uuid4()}", json={"name": "x"}, headers=HR_HEADERS)
    assert resp.status_code == 404
