"""Seed script for development data.

Run with:  python -m hr_vacations.seed
Requires the API to be running at BASE_URL.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
ADMIN_USER_ID = "00000000-0000-0000-0000-000000000001"

ADMIN_HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": ADMIN_USER_ID,
    "X-Role": "admin",
}

# Well-known user UUIDs (identity-provider subjects)
ALICE_USER_ID = "00000000-0000-0000-0000-000000000002"
BOB_USER_ID = "00000000-0000-0000-0000-000000000003"
CAROL_USER_ID = "00000000-0000-0000-0000-000000000004"

ADMIN_EMPLOYEE = {
    "user_id": ADMIN_USER_ID,
    "first_name": "Admin",
    "last_name": "User",
    "email": "admin@company.com",
    "department": "IT",
    "position": "System Administrator",
}

EMPLOYEES = [
    {
        "user_id": ALICE_USER_ID,
        "first_name": "Alice",
        "last_name": "Johnson",
        "email": "alice.johnson@company.com",
        "department": "Engineering",
        "position": "Engineering Manager",
        "hire_date": "2021-03-01",
    },
    {
        "user_id": BOB_USER_ID,
        "first_name": "Bob",
        "last_name": "Smith",
        "email": "bob.smith@company.com",
        "department": "Engineering",
        "position": "Software Engineer",
        "hire_date": "2023-06-01",
    },
    {
        "user_id": CAROL_USER_ID,
        "first_name": "Carol",
        "last_name": "Williams",
        "email": "carol.williams@company.com",
        "department": "Sales",
        "position": "Account Executive",
        "hire_date": "2024-03-01",
    },
]


def _headers_for(user_id: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "X-User-Id": user_id, "X-Role": "employee"}


async def _safe_post(
    client: httpx.AsyncClient, url: str, json: dict, label: str, headers: dict[str, str] | None = None
) -> dict | None:
    """POST with 409-conflict tolerance so the script can be re-run."""
    resp = await client.post(url, json=json, headers=headers or ADMIN_HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed the admin and demo employees. Returns email -> employee id."""
    print("\n--- Seeding employees ---")
    await _safe_post(client, f"{BASE_URL}/employees", ADMIN_EMPLOYEE, "Employee: Admin User")

    manager_id: str | None = None
    for emp in EMPLOYEES:
        payload = dict(emp)
        if manager_id is not None:
            payload["manager_id"] = manager_id
        result = await _safe_post(
            client, f"{BASE_URL}/employees", payload, f"Employee: {emp['first_name']} {emp['last_name']}"
        )
        if result and emp["first_name"] == "Alice":
            manager_id = result["id"]

    resp = await client.get(f"{BASE_URL}/employees", headers=ADMIN_HEADERS)
    return {item["email"]: item["id"] for item in resp.json().get("items", [])}


async def seed_requests(client: httpx.AsyncClient) -> None:
    """Seed vacation requests: Bob's stays pending, Carol's gets approved."""
    print("\n--- Seeding requests ---")
    today = date.today()

    bob_start = today + timedelta(days=14)
    await _safe_post(
        client,
        f"{BASE_URL}/vacations",
        {
            "start_date": bob_start.isoformat(),
            "end_date": (bob_start + timedelta(days=4)).isoformat(),
            "type": "vacation",
            "reason": "Family vacation",
        },
        "Request: Bob 5-day vacation (pending)",
        headers=_headers_for(BOB_USER_ID),
    )

    carol_start = today + timedelta(days=30)
    result = await _safe_post(
        client,
        f"{BASE_URL}/vacations",
        {
            "start_date": carol_start.isoformat(),
            "end_date": (carol_start + timedelta(days=1)).isoformat(),
            "type": "personal",
            "reason": "Moving house",
        },
        "Request: Carol 2-day personal",
        headers=_headers_for(CAROL_USER_ID),
    )
    if result:
        req_id = result["requestId"]
        resp = await client.put(
            f"{BASE_URL}/vacations/{req_id}/status",
            json={"status": "approved", "notes": "Good luck with the move"},
            headers=ADMIN_HEADERS,
        )
        if resp.status_code == 200:
            print("  [OK] Approved Carol's request")
        elif resp.status_code == 409:
            print("  [SKIP] Carol's request already decided")
        else:
            print(f"  [ERROR] Approving Carol's request: {resp.status_code}")


async def main() -> None:
    print("=" * 60)
    print("  HR Vacations - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        employee_ids = await seed_employees(client)
        print(f"\n  {len(employee_ids)} active employees")
        await seed_requests(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
