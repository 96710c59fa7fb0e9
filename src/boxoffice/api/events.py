"""Event API routes.

Learn: Mutations are POSTs whose bodies carry every identifier (form or
JSON), so a plain HTML form can drive them. Routes only pick the body
apart and delegate; the service validates, writes, and notifies.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from boxoffice.api.deps import get_notifier, request_fields
from boxoffice.db.engine import get_db
from boxoffice.errors import NotFoundError
from boxoffice.realtime.notifier import Notifier
from boxoffice.schemas import parse_fields
from boxoffice.schemas.event import (
    EventCreateResponse,
    EventDeleteResponse,
    EventIdentifier,
    EventRead,
    EventUpdateResponse,
)
from boxoffice.services.event_service import EventService

router = APIRouter()


def _svc(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> EventService:
    return EventService(db, notifier)


# ─── Mutations ──────────────────────────────────────────

@router.post("/events", response_model=EventCreateResponse, status_code=201)
async def create_event(
    fields: dict[str, Any] = Depends(request_fields),
    svc: EventService = Depends(_svc),
):
    event = await svc.create_event(fields)
    return EventCreateResponse(event_id=event.id, new_event=event)


@router.post("/events/update", response_model=EventUpdateResponse)
async def update_event(
    fields: dict[str, Any] = Depends(request_fields),
    svc: EventService = Depends(_svc),
):
    """Partially update an event identified by event_id in the body."""
    target = parse_fields(EventIdentifier, fields)
    changes = {k: v for k, v in fields.items() if k != "event_id"}
    event = await svc.update_event(target.event_id, changes)
    return EventUpdateResponse(event_id=event.id, updated_event=event)


@router.post("/events/delete", response_model=EventDeleteResponse)
async def delete_event(
    fields: dict[str, Any] = Depends(request_fields),
    svc: EventService = Depends(_svc),
):
    target = parse_fields(EventIdentifier, fields)
    deleted_id = await svc.delete_event(target.event_id)
    return EventDeleteResponse(deleted_event_id=deleted_id)


# ─── Reads ──────────────────────────────────────────────

@router.get("/events", response_model=list[EventRead])
async def list_events(
    active_only: bool = Query(False, description="Only active events"),
    svc: EventService = Depends(_svc),
):
    return await svc.list_events(active_only=active_only)


@router.get("/events/{event_id}", response_model=EventRead)
async def get_event(event_id: int, svc: EventService = Depends(_svc)):
    event = await svc.get_event(event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event
