"""Pydantic schemas for tickets and purchases."""

from pydantic import BaseModel, Field, field_validator


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=64)
    available_quantity: int = Field(..., ge=0)
    is_active: int = Field(default=1, ge=0, le=1)

    model_config = {"extra": "ignore"}


class TicketRead(BaseModel):
    id: int
    event_id: int
    title: str
    type: str
    available_quantity: int
    is_active: int

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("is_active", mode="before")
    @classmethod
    def _flag_as_int(cls, value):
        return int(value)


class TicketSnapshot(BaseModel):
    """What viewers are told after a ticket's inventory changes."""
    id: int
    event_id: int
    title: str
    type: str
    available_quantity: int

    model_config = {"from_attributes": True, "frozen": True}


class PurchaseRequest(BaseModel):
    """Quantity sign is checked by the service, not here."""
    ticket_id: int
    quantity: int

    model_config = {"extra": "ignore"}


class PurchaseResponse(BaseModel):
    success: bool = True
    ticket_id: int
    available_quantity: int
