"""Change event types and their wire form.

Learn: A ChangeEvent is produced exactly once per successful mutation and
handed to the notifier. Its payload type is fixed by its kind, so nothing
downstream has to guess at the shape of an untyped dict:

  EVENT_CREATED / EVENT_UPDATED → EventRead (full row)
  EVENT_DELETED                 → EventRef  (identifier only)
  TICKET_UPDATED                → TicketSnapshot

On the wire (notifier → hub → viewers) every event-table change is tagged
"event_updated" and every ticket change "ticket_updated". Viewers tell a
deletion apart by its payload carrying nothing but the id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel

from boxoffice.schemas.event import EventRead, EventRef
from boxoffice.schemas.ticket import TicketSnapshot


class ChangeKind(str, Enum):
    EVENT_CREATED = "event.created"
    EVENT_UPDATED = "event.updated"
    EVENT_DELETED = "event.deleted"
    TICKET_UPDATED = "ticket.updated"


# ─── Wire tags ──────────────────────────────────────────

EVENT_UPDATED = "event_updated"
TICKET_UPDATED = "ticket_updated"

WIRE_TYPES: dict[ChangeKind, str] = {
    ChangeKind.EVENT_CREATED: EVENT_UPDATED,
    ChangeKind.EVENT_UPDATED: EVENT_UPDATED,
    ChangeKind.EVENT_DELETED: EVENT_UPDATED,
    ChangeKind.TICKET_UPDATED: TICKET_UPDATED,
}

Payload = Union[EventRead, EventRef, TicketSnapshot]

PAYLOAD_TYPES: dict[ChangeKind, type[BaseModel]] = {
    ChangeKind.EVENT_CREATED: EventRead,
    ChangeKind.EVENT_UPDATED: EventRead,
    ChangeKind.EVENT_DELETED: EventRef,
    ChangeKind.TICKET_UPDATED: TicketSnapshot,
}


class WireMessage(BaseModel):
    """The JSON object POSTed to /webhook and pushed to every viewer."""
    type: Literal["event_updated", "ticket_updated"]
    data: dict[str, Any]


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    payload: Payload

    def __post_init__(self):
        expected = PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.kind.value} requires a {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )

    @classmethod
    def event_created(cls, event: EventRead) -> "ChangeEvent":
        return cls(ChangeKind.EVENT_CREATED, event)

    @classmethod
    def event_updated(cls, event: EventRead) -> "ChangeEvent":
        return cls(ChangeKind.EVENT_UPDATED, event)

    @classmethod
    def event_deleted(cls, event_id: int) -> "ChangeEvent":
        return cls(ChangeKind.EVENT_DELETED, EventRef(id=event_id))

    @classmethod
    def ticket_updated(cls, ticket: TicketSnapshot) -> "ChangeEvent":
        return cls(ChangeKind.TICKET_UPDATED, ticket)

    def to_wire(self) -> WireMessage:
        return WireMessage(type=WIRE_TYPES[self.kind], data=self.payload.model_dump())
