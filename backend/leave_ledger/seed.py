"""Seed script for development data.

Run with:  python -m leave_ledger.seed
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any

import httpx

BASE_URL = "http://localhost:8000"
HR_USER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": HR_USER_ID,
    "X-Role": "hr",
}

# Well-known employee UUIDs
MANAGER_ID = "00000000-0000-0000-0000-000000000002"
ASHA_ID = "00000000-0000-0000-0000-000000000003"
RAVI_ID = "00000000-0000-0000-0000-000000000004"
MEERA_ID = "00000000-0000-0000-0000-000000000005"

EMPLOYEES = [
    {
        "id": MANAGER_ID,
        "full_name": "Kiran Rao",
        "email": "kiran.rao@example.com",
        "join_date": "2019-04-01",
        "employment_term": "full_time",
    },
    {
        "id": ASHA_ID,
        "full_name": "Asha Menon",
        "email": "asha.menon@example.com",
        "join_date": "2023-01-15",
        "employment_term": "full_time",
        "manager_id": MANAGER_ID,
    },
    {
        "id": RAVI_ID,
        "full_name": "Ravi Kumar",
        "email": "ravi.kumar@example.com",
        "join_date": "2024-11-04",
        "employment_term": "probation",
        "manager_id": MANAGER_ID,
    },
    {
        "id": MEERA_ID,
        "full_name": "Meera Shah",
        "email": "meera.shah@example.com",
        "join_date": None,
        "manager_id": MANAGER_ID,
    },
]

LEAVE_TYPES = [
    {"key": "annual", "name": "Annual Leave", "accrues": True},
    {"key": "comp_off", "name": "Compensatory Off", "accrues": False},
]

HOLIDAYS = [
    {"date": "2025-01-26", "name": "Republic Day"},
    {"date": "2025-03-14", "name": "Holi"},
    {"date": "2025-08-15", "name": "Independence Day"},
    {"date": "2025-10-02", "name": "Gandhi Jayanti"},
    {"date": "2025-10-21", "name": "Diwali"},
    {"date": "2025-12-25", "name": "Christmas", "is_optional": True},
]

# (employee_id, year, amount, reason)
OPENING_BALANCES = [
    (ASHA_ID, 2025, "6", "Opening balance migrated from spreadsheet"),
    (RAVI_ID, 2025, "1.5", "Opening balance migrated from spreadsheet"),
]

ACCRUAL_PERIODS = ["2025-01", "2025-02", "2025-03"]

# Friday and the following Monday filed separately: the second approval bears the weekend.
APPLICATIONS = [
    {"employee_id": ASHA_ID, "start_date": "2025-04-04", "end_date": "2025-04-04", "days_count": "1"},
    {"employee_id": ASHA_ID, "start_date": "2025-04-07", "end_date": "2025-04-07", "days_count": "1"},
    {
        "employee_id": RAVI_ID,
        "start_date": "2025-04-15",
        "end_date": "2025-04-17",
        "days_count": "3",
        "lop_days": "1",
    },
]


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict[str, Any], label: str) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _safe_put(client: httpx.AsyncClient, url: str, json: dict[str, Any], label: str) -> dict | None:
    """PUT (upsert), naturally idempotent."""
    resp = await client.put(url, json=json, headers=HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    """Seed employees via PUT (upsert)."""
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        body = {k: v for k, v in emp.items() if k != "id"}
        await _safe_put(client, f"/employees/{emp['id']}", body, str(emp["full_name"]))


async def seed_leave_types(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed leave types and return a key->id mapping."""
    print("\n--- Seeding leave types ---")
    leave_type_ids: dict[str, str] = {}

    for leave_type in LEAVE_TYPES:
        result = await _safe_post(client, "/leave-types", leave_type, f"Leave type: {leave_type['key']}")
        if result:
            leave_type_ids[str(leave_type["key"])] = result["id"]

    # Some already existed (409), fetch them by listing
    if len(leave_type_ids) < len(LEAVE_TYPES):
        resp = await client.get("/leave-types", headers=HEADERS, params={"include_inactive": True})
        if resp.status_code == 200:
            for item in resp.json().get("items", []):
                leave_type_ids.setdefault(item["key"], item["id"])

    return leave_type_ids


async def seed_holidays(client: httpx.AsyncClient) -> None:
    """Seed holidays."""
    print("\n--- Seeding holidays ---")
    for holiday in HOLIDAYS:
        await _safe_post(client, "/holidays", holiday, f"Holiday: {holiday['name']}")


async def seed_opening_balances(client: httpx.AsyncClient, leave_type_ids: dict[str, str]) -> None:
    """Credit opening balances through HR adjustments, once per employee and year."""
    print("\n--- Seeding opening balances ---")
    annual_id = leave_type_ids.get("annual")
    if not annual_id:
        print("  [SKIP] annual leave type not found")
        return

    for employee_id, year, amount, reason in OPENING_BALANCES:
        resp = await client.get(f"/employees/{employee_id}/balances/{annual_id}/{year}", headers=HEADERS)
        if resp.status_code == 200 and resp.json()["updated_at"] is not None:
            print(f"  [SKIP] {employee_id[:12]}... already has a {year} balance")
            continue
        await _safe_post(
            client,
            "/adjustments",
            {
                "employee_id": employee_id,
                "leave_type_id": annual_id,
                "year": year,
                "adjustment_type": "add",
                "amount": amount,
                "reason": reason,
            },
            f"Opening balance {amount} for {employee_id[:12]}...",
        )


async def seed_accruals(client: httpx.AsyncClient) -> None:
    """Run the monthly accrual for past periods. Repeats are skipped by the service."""
    print("\n--- Running monthly accruals ---")
    for period in ACCRUAL_PERIODS:
        result = await _safe_post(client, "/accruals/monthly", {"period": period}, f"Accrual {period}")
        if result:
            print(
                f"         credited={result['credited']} skipped={result['skipped']} errors={result['errors']}"
            )


async def seed_applications(client: httpx.AsyncClient, leave_type_ids: dict[str, str]) -> None:
    """File and approve sample applications, including a Friday/Monday sandwich pair."""
    print("\n--- Seeding applications ---")
    annual_id = leave_type_ids.get("annual")
    if not annual_id:
        print("  [SKIP] annual leave type not found")
        return

    for application in APPLICATIONS:
        label = f"{application['employee_id'][:12]}... {application['start_date']}"
        created = await _safe_post(
            client,
            "/applications",
            {**application, "leave_type_id": annual_id, "reason": "Seeded leave"},
            f"Submit {label}",
        )
        if not created:
            continue
        await _safe_post(
            client,
            f"/applications/{created['id']}/transition",
            {"new_status": "approved", "comments": "Approved by seed script"},
            f"Approve {label}",
        )


async def seed_all(client: httpx.AsyncClient) -> None:
    """Run every seeding step in dependency order."""
    await seed_employees(client)
    leave_type_ids = await seed_leave_types(client)
    await seed_holidays(client)
    await seed_opening_balances(client, leave_type_ids)
    await seed_accruals(client)
    await seed_applications(client, leave_type_ids)


async def main() -> None:
    print("=" * 60)
    print("  Leave Ledger Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=30.0) as client:
        # Health check
        try:
            resp = await client.get("/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running")
            sys.exit(1)

        await seed_all(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
