"""Seed script for development data.

Start the API with the manager seeded, then run the script:

    MANAGER_USER_IDS='["manager-1"]' uvicorn app.main:app
    python -m app.seed
"""

from __future__ import annotations

import asyncio
import sys
from datetime import timedelta
from typing import Any

import httpx

from app.models.base import utc_now
from app.services.balance import format_minutes

BASE_URL = "http://localhost:8000"
MANAGER_ID = "manager-1"

USERS = [
    {"id": MANAGER_ID, "name": "Morgan Manager", "email": "morgan@example.com"},
    {"id": "user-alice", "name": "Alice Johnson", "email": "alice.johnson@example.com"},
    {"id": "user-bob", "name": "Bob Smith", "email": "bob.smith@example.com"},
]

# (owner_id, type, minutes, note, hours_ago, decision)
EVENTS = [
    ("user-alice", "ADD", 90, "Release night", 30, "approve"),
    ("user-alice", "TAKE", 45, "Dentist", 6, None),
    ("user-bob", "ADD", 120, "Weekend on-call", 50, "approve"),
    ("user-bob", "TAKE", 240, "Long lunch", 20, "reject"),
    ("user-bob", "ADD", 30, None, 2, None),
]


def _headers(user_id: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "X-User-Id": user_id}


async def _safe_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    user_id: str,
    label: str,
    json: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    resp = await client.request(method, url, json=json, headers=_headers(user_id))
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already decided)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_users(client: httpx.AsyncClient) -> None:
    print("\n--- Registering users ---")
    for user in USERS:
        await _safe_request(
            client,
            "PUT",
            f"{BASE_URL}/users/me",
            user["id"],
            f"User: {user['name']}",
            json={"name": user["name"], "email": user["email"]},
        )


async def seed_events(client: httpx.AsyncClient) -> None:
    print("\n--- Logging events ---")
    now = utc_now()
    for owner_id, event_type, minutes, note, hours_ago, decision in EVENTS:
        body: dict[str, Any] = {
            "timestamp": (now - timedelta(hours=hours_ago)).isoformat(),
            "type": event_type,
            "minutes": minutes,
        }
        if note:
            body["note"] = note
        created = await _safe_request(
            client,
            "POST",
            f"{BASE_URL}/events",
            owner_id,
            f"{owner_id} {event_type} {format_minutes(minutes)}",
            json=body,
        )
        if created is None or decision is None:
            continue
        await _safe_request(
            client,
            "POST",
            f"{BASE_URL}/events/{created['id']}/{decision}",
            MANAGER_ID,
            f"  {decision} {created['id']}",
        )


async def print_balances(client: httpx.AsyncClient) -> None:
    print("\n--- Balances ---")
    for user in USERS:
        resp = await client.get(f"{BASE_URL}/balance", headers=_headers(user["id"]))
        if resp.status_code != 200:
            print(f"  [ERROR] {user['name']}: {resp.status_code}")
            continue
        data = resp.json()
        print(
            f"  {user['name']}: total {format_minutes(data['balance'])},"
            f" available {format_minutes(data['available_balance'])}"
        )


async def main() -> None:
    print("=" * 60)
    print("  TOIL Tracker — Development Seed Script")
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

        await seed_users(client)
        role = await client.get(f"{BASE_URL}/users/me/role", headers=_headers(MANAGER_ID))
        if role.status_code != 200 or role.json().get("role") != "manager":
            print(f"ERROR: {MANAGER_ID} is not a manager; start the API with MANAGER_USER_IDS='[\"{MANAGER_ID}\"]'")
            sys.exit(1)
        await seed_events(client)
        await print_balances(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
