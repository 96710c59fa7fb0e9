"""Event API tests — create, update, delete, read, and the change each emits.

Pattern: drive everything through HTTP, then check both the response body
and what the RecordingNotifier saw.
"""

import pytest

from boxoffice.events import ChangeKind, WireMessage
from tests.conftest import EVENT_FIELDS


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_event_echoes_fields(client, notifier):
    """All seven fields in → id assigned, fields echoed, is_active as int 1."""
    resp = await client.post("/api/v1/events", json=EVENT_FIELDS)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert isinstance(body["event_id"], int)

    new_event = body["new_event"]
    assert new_event["id"] == body["event_id"]
    for name, value in EVENT_FIELDS.items():
        assert new_event[name] == value
    assert new_event["is_active"] == 1
    assert type(new_event["is_active"]) is int


@pytest.mark.asyncio
async def test_create_event_emits_one_change(client, notifier):
    resp = await client.post("/api/v1/events", json=EVENT_FIELDS)
    event_id = resp.json()["event_id"]

    assert len(notifier.changes) == 1
    change = notifier.changes[0]
    assert change.kind is ChangeKind.EVENT_CREATED
    assert change.payload.id == event_id

    wire = change.to_wire()
    assert wire.type == "event_updated"
    assert wire.data["id"] == event_id
    assert wire.data["is_active"] == 1


@pytest.mark.asyncio
async def test_create_event_accepts_form_body(client):
    """A plain HTML form post works the same as JSON."""
    form = {k: str(v) for k, v in EVENT_FIELDS.items()}
    resp = await client.post("/api/v1/events", data=form)
    assert resp.status_code == 201
    assert resp.json()["new_event"]["is_active"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["title", "date", "image_url", "is_active"])
async def test_create_event_missing_field(client, notifier, missing):
    fields = {k: v for k, v in EVENT_FIELDS.items() if k != missing}
    resp = await client.post("/api/v1/events", json=fields)
    assert resp.status_code == 400
    assert resp.json() == {"error": f"{missing} is required"}
    assert notifier.changes == []

    listing = await client.get("/api/v1/events")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_create_event_rejects_bad_flag(client, notifier):
    resp = await client.post("/api/v1/events", json={**EVENT_FIELDS, "is_active": 7})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("is_active")
    assert notifier.changes == []


@pytest.mark.asyncio
async def test_create_event_rejects_non_object_json(client):
    resp = await client.post("/api/v1/events", json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body must be a JSON object"}


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_event_partial(client, notifier, event):
    """Only supplied fields change; the full row comes back."""
    resp = await client.post(
        "/api/v1/events/update",
        json={"event_id": event["id"], "title": "Late Jazz Night", "is_active": 0},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["event_id"] == event["id"]

    updated = body["updated_event"]
    assert updated["title"] == "Late Jazz Night"
    assert updated["is_active"] == 0
    assert updated["location"] == event["location"]
    assert updated["organizer"] == event["organizer"]

    assert len(notifier.changes) == 1
    change = notifier.changes[0]
    assert change.kind is ChangeKind.EVENT_UPDATED
    assert change.payload.model_dump() == updated


@pytest.mark.asyncio
async def test_update_event_no_fields(client, notifier, event):
    """event_id alone is not an update — storage stays untouched."""
    resp = await client.post("/api/v1/events/update", json={"event_id": event["id"]})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No valid fields provided to update"}
    assert notifier.changes == []

    stored = await client.get(f"/api/v1/events/{event['id']}")
    assert stored.json() == event


@pytest.mark.asyncio
async def test_update_event_ignores_unknown_fields(client, notifier, event):
    resp = await client.post(
        "/api/v1/events/update",
        json={"event_id": event["id"], "capacity": 500},
    )
    assert resp.status_code == 400
    assert notifier.changes == []


@pytest.mark.asyncio
async def test_update_event_requires_event_id(client):
    resp = await client.post("/api/v1/events/update", json={"title": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "event_id is required"}


@pytest.mark.asyncio
async def test_update_event_404(client, notifier):
    resp = await client.post(
        "/api/v1/events/update", json={"event_id": 99999, "title": "Ghost"}
    )
    assert resp.status_code == 404
    assert "error" in resp.json()
    assert notifier.changes == []


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_event(client, notifier, ticket):
    event_id = ticket["event_id"]
    resp = await client.post("/api/v1/events/delete", data={"event_id": str(event_id)})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "deleted_event_id": event_id}

    assert len(notifier.changes) == 1
    change = notifier.changes[0]
    assert change.kind is ChangeKind.EVENT_DELETED
    assert change.to_wire() == WireMessage(type="event_updated", data={"id": event_id})

    # Event and its tickets are gone
    assert (await client.get(f"/api/v1/events/{event_id}")).status_code == 404
    assert (await client.get(f"/api/v1/tickets/{ticket['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_event_404(client, notifier):
    resp = await client.post("/api/v1/events/delete", json={"event_id": 424242})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Event 424242 not found"}
    assert notifier.changes == []


# ═══════════════════════════════════════════════════════════
# Reads
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_events_active_only(client, event):
    await client.post("/api/v1/events", json={**EVENT_FIELDS, "title": "Cancelled", "is_active": 0})

    all_events = (await client.get("/api/v1/events")).json()
    assert [e["title"] for e in all_events] == ["Jazz Night", "Cancelled"]

    active = (await client.get("/api/v1/events", params={"active_only": True})).json()
    assert [e["id"] for e in active] == [event["id"]]


@pytest.mark.asyncio
async def test_get_event_404(client):
    resp = await client.get("/api/v1/events/99999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Event 99999 not found"}
