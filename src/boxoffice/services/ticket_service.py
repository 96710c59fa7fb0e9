"""Ticket service — ticket tiers and the purchase critical section.

Learn: purchase_ticket() never reads the quantity and writes it back.
That read-then-write is exactly how two buyers both see "5 left", both
take 3, and the event oversells. Instead the check and the decrement are
one statement:

  UPDATE tickets
     SET available_quantity = available_quantity - :q
   WHERE id = :id AND is_active AND available_quantity >= :q
  RETURNING ...

The database row lock serializes concurrent purchases of the same ticket;
purchases of different tickets lock different rows and never contend. If
the UPDATE matches nothing, a follow-up read only decides which error to
report.
"""

from collections.abc import Mapping
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from boxoffice.db.engine import atomic
from boxoffice.db.models import Event, Ticket
from boxoffice.errors import (
    InsufficientInventoryError,
    NotFoundError,
    ValidationError,
)
from boxoffice.events import ChangeEvent
from boxoffice.realtime.notifier import Notifier
from boxoffice.schemas import parse_fields
from boxoffice.schemas.ticket import TicketCreate, TicketRead, TicketSnapshot


class TicketService:
    """Business logic for tickets and purchases."""

    def __init__(self, db: AsyncSession, notifier: Notifier):
        self.db = db
        self.notifier = notifier

    async def create_ticket(
        self, event_id: int, fields: Mapping[str, Any]
    ) -> TicketRead:
        """Add a ticket tier to an existing event."""
        body = parse_fields(TicketCreate, fields)

        async with atomic(self.db):
            event = await self.db.get(Event, event_id)
            if event is None:
                raise NotFoundError(f"Event {event_id} not found")
            ticket = Ticket(
                event_id=event_id,
                title=body.title,
                type=body.type,
                available_quantity=body.available_quantity,
                is_active=bool(body.is_active),
            )
            self.db.add(ticket)
            await self.db.flush()

        created = TicketRead.model_validate(ticket)
        await self.notifier.notify(
            ChangeEvent.ticket_updated(TicketSnapshot.model_validate(ticket))
        )
        return created

    async def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        result = await self.db.execute(select(Ticket).where(Ticket.id == ticket_id))
        return result.scalars().first()

    async def list_tickets(self, event_id: int) -> list[Ticket]:
        result = await self.db.execute(
            select(Ticket).where(Ticket.event_id == event_id).order_by(Ticket.id)
        )
        return list(result.scalars().all())

    # ─── Purchase ────────────────────────────────────────

    async def purchase_ticket(self, ticket_id: int, quantity: int) -> TicketSnapshot:
        """Atomically take `quantity` tickets. Returns the post-purchase snapshot.

        Raises:
            ValidationError: quantity is zero or negative
            NotFoundError: ticket missing or inactive
            InsufficientInventoryError: fewer than `quantity` left
        """
        if quantity <= 0:
            raise ValidationError("quantity must be a positive integer")

        stmt = (
            update(Ticket)
            .where(
                Ticket.id == ticket_id,
                Ticket.is_active.is_(True),
                Ticket.available_quantity >= quantity,
            )
            .values(available_quantity=Ticket.available_quantity - quantity)
            .returning(
                Ticket.id,
                Ticket.event_id,
                Ticket.title,
                Ticket.type,
                Ticket.available_quantity,
            )
            .execution_options(synchronize_session=False)
        )

        async with atomic(self.db):
            row = (await self.db.execute(stmt)).one_or_none()
            if row is None:
                await self._raise_purchase_failure(ticket_id, quantity)

        snapshot = TicketSnapshot.model_validate(dict(row._mapping))
        await self.notifier.notify(ChangeEvent.ticket_updated(snapshot))
        return snapshot

    async def _raise_purchase_failure(self, ticket_id: int, quantity: int) -> None:
        result = await self.db.execute(
            select(Ticket.is_active, Ticket.available_quantity).where(
                Ticket.id == ticket_id
            )
        )
        current = result.first()
        if current is None or not current.is_active:
            raise NotFoundError("Ticket not found or inactive")
        raise InsufficientInventoryError(
            f"Not enough tickets available "
            f"(requested {quantity}, available {current.available_quantity})"
        )
