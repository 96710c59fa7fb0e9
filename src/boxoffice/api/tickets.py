"""Ticket API routes — tiers per event and the purchase endpoint."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from boxoffice.api.deps import get_notifier, request_fields
from boxoffice.db.engine import get_db
from boxoffice.errors import NotFoundError
from boxoffice.realtime.notifier import Notifier
from boxoffice.schemas import parse_fields
from boxoffice.schemas.ticket import PurchaseRequest, PurchaseResponse, TicketRead
from boxoffice.services.event_service import EventService
from boxoffice.services.ticket_service import TicketService

router = APIRouter()


def _svc(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> TicketService:
    return TicketService(db, notifier)


@router.post("/tickets/purchase", response_model=PurchaseResponse)
async def purchase_ticket(
    fields: dict[str, Any] = Depends(request_fields),
    svc: TicketService = Depends(_svc),
):
    """Buy `quantity` tickets. Never oversells, however many buyers race."""
    body = parse_fields(PurchaseRequest, fields)
    ticket = await svc.purchase_ticket(body.ticket_id, body.quantity)
    return PurchaseResponse(
        ticket_id=ticket.id,
        available_quantity=ticket.available_quantity,
    )


@router.get("/tickets/{ticket_id}", response_model=TicketRead)
async def get_ticket(ticket_id: int, svc: TicketService = Depends(_svc)):
    ticket = await svc.get_ticket(ticket_id)
    if ticket is None:
        raise NotFoundError(f"Ticket {ticket_id} not found")
    return ticket


@router.post("/events/{event_id}/tickets", response_model=TicketRead, status_code=201)
async def create_ticket(
    event_id: int,
    fields: dict[str, Any] = Depends(request_fields),
    svc: TicketService = Depends(_svc),
):
    """Add a ticket tier to an event."""
    return await svc.create_ticket(event_id, fields)


@router.get("/events/{event_id}/tickets", response_model=list[TicketRead])
async def list_tickets(event_id: int, svc: TicketService = Depends(_svc)):
    if await EventService(svc.db, svc.notifier).get_event(event_id) is None:
        raise NotFoundError(f"Event {event_id} not found")
    return await svc.list_tickets(event_id)
