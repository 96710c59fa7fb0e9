#!/usr/bin/env python3
"""
BoxOffice live inventory — one event's lifecycle, pushed to every viewer.

Creates an event → seeds a ticket tier → buys tickets (including one
oversell attempt) → updates the event → deletes it. Each successful step is
pushed by the hub to every WebSocket viewer connected at ws://localhost:3000/ws.

Run with: python examples/live_inventory.py

Requires: pip install httpx
Both servers must be running:
    boxoffice serve-api     # http://localhost:8000
    boxoffice serve-hub     # http://localhost:3000
"""

import sys
import uuid

import httpx

API = "http://localhost:8000/api/v1"
HUB = "http://localhost:3000"


def main():
    run_id = uuid.uuid4().hex[:6]
    api = httpx.Client(base_url=API, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking servers...")
    try:
        health = api.get("/health").json()
        hub = httpx.get(f"{HUB}/health", timeout=5).json()
    except httpx.ConnectError as exc:
        print(f"Server not reachable: {exc}")
        sys.exit(1)
    print(f"  Database:    {'✓' if health['database'] == 'ok' else '✗'}")
    print(f"  Hub viewers: {hub['subscribers']}")
    if not hub["subscribers"]:
        print("  (connect a WebSocket client to ws://localhost:3000/ws to watch the pushes)")

    # ── Create event ──────────────────────────────────────────────
    print("\n1. Creating event...")
    resp = api.post("/events", json={
        "title": f"Jazz Night {run_id}",
        "description": "An evening of live jazz",
        "location": "Blue Note Hall",
        "date": "2026-12-01 20:00:00",
        "image_url": "https://example.com/jazz.png",
        "organizer": "City Arts",
        "is_active": 1,
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    event_id = resp.json()["event_id"]
    print(f"   Event #{event_id} pushed as event_updated")

    # ── Seed tickets ──────────────────────────────────────────────
    print("\n2. Seeding 5 general admission tickets...")
    resp = api.post(f"/events/{event_id}/tickets", json={
        "title": "General Admission",
        "type": "standard",
        "available_quantity": 5,
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    ticket_id = resp.json()["id"]
    print(f"   Ticket #{ticket_id} pushed as ticket_updated")

    # ── Purchases ─────────────────────────────────────────────────
    print("\n3. Buying tickets...")
    for quantity in (3, 3, 2):
        resp = api.post("/tickets/purchase", json={"ticket_id": ticket_id, "quantity": quantity})
        if resp.status_code == 200:
            print(f"   Bought {quantity}: {resp.json()['available_quantity']} left")
        else:
            print(f"   Bought {quantity}: rejected ({resp.status_code}) {resp.json()['error']}")

    # ── Update event ──────────────────────────────────────────────
    print("\n4. Marking the event sold out...")
    resp = api.post("/events/update", json={
        "event_id": event_id,
        "title": f"Jazz Night {run_id} (sold out)",
        "is_active": 0,
    })
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Title now: {resp.json()['updated_event']['title']}")

    # ── Delete event ──────────────────────────────────────────────
    print("\n5. Deleting the event...")
    resp = api.post("/events/delete", json={"event_id": event_id})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   Deleted event #{resp.json()['deleted_event_id']}")

    # ── Done ──────────────────────────────────────────────────────
    print(f"\n✓ Walkthrough finished. Event #{event_id} produced 6 pushes (the rejected purchase pushed nothing).")


if __name__ == "__main__":
    main()
