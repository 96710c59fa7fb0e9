"""Event service — create, update, delete and read events.

Learn: Service layer separates business logic from HTTP routing. Each
mutation follows the same shape:
1. Validate the raw fields (ValidationError on bad input)
2. Write and re-read the row inside atomic() (StorageError if the
   database fails, and then nothing is committed)
3. Hand exactly one ChangeEvent to the notifier, after the commit

The notifier never raises, so step 3 cannot undo or fail a committed write.
"""

from collections.abc import Mapping
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from boxoffice.db.engine import atomic
from boxoffice.db.models import Event, Ticket
from boxoffice.errors import NotFoundError, ValidationError
from boxoffice.events import ChangeEvent
from boxoffice.realtime.notifier import Notifier
from boxoffice.schemas import parse_fields
from boxoffice.schemas.event import EventCreate, EventRead, EventUpdate


class EventService:
    """Business logic for events."""

    def __init__(self, db: AsyncSession, notifier: Notifier):
        self.db = db
        self.notifier = notifier

    # ─── Create ──────────────────────────────────────────

    async def create_event(self, fields: Mapping[str, Any]) -> EventRead:
        """Insert an event. All seven fields are required."""
        body = parse_fields(EventCreate, fields)

        event = Event(
            title=body.title,
            description=body.description,
            location=body.location,
            date=body.date,
            image_url=body.image_url,
            organizer=body.organizer,
            is_active=bool(body.is_active),
        )
        async with atomic(self.db):
            self.db.add(event)
            await self.db.flush()  # get auto-generated id

        created = EventRead.model_validate(event)
        await self.notifier.notify(ChangeEvent.event_created(created))
        return created

    # ─── Read ────────────────────────────────────────────

    async def get_event(self, event_id: int) -> Optional[Event]:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        return result.scalars().first()

    async def list_events(self, active_only: bool = False) -> list[Event]:
        query = select(Event).order_by(Event.id)
        if active_only:
            query = query.where(Event.is_active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update_event(
        self, event_id: int, fields: Mapping[str, Any]
    ) -> EventRead:
        """Apply any non-empty subset of the event fields.

        Unknown keys are ignored; if nothing updatable remains the call
        fails before the database is touched.
        """
        changes = parse_fields(EventUpdate, fields).changes()
        if not changes:
            raise ValidationError("No valid fields provided to update")
        if "is_active" in changes:
            changes["is_active"] = bool(changes["is_active"])

        async with atomic(self.db):
            event = await self.get_event(event_id)
            if event is None:
                raise NotFoundError(f"Event {event_id} not found")
            for name, value in changes.items():
                setattr(event, name, value)
            await self.db.flush()
            await self.db.refresh(event)
            updated = EventRead.model_validate(event)

        await self.notifier.notify(ChangeEvent.event_updated(updated))
        return updated

    # ─── Delete ──────────────────────────────────────────

    async def delete_event(self, event_id: int) -> int:
        """Delete an event and its tickets. Returns the deleted id."""
        async with atomic(self.db):
            event = await self.get_event(event_id)
            if event is None:
                raise NotFoundError(f"Event {event_id} not found")

            # Tickets first (FK constraint)
            await self.db.execute(delete(Ticket).where(Ticket.event_id == event_id))
            await self.db.execute(delete(Event).where(Event.id == event_id))

        await self.notifier.notify(ChangeEvent.event_deleted(event_id))
        return event_id
