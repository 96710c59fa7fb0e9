"""Pydantic schemas for events.

Learn: Separate schemas per direction:
- EventCreate: all seven fields required
- EventUpdate: any subset of the same fields
- EventRead: the stored row as returned to callers and pushed to viewers
- EventRef: identifier only (the payload of a deletion)

is_active travels as an integer 0/1 in both directions even though the
column is a boolean.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

EVENT_FIELDS = (
    "title",
    "description",
    "location",
    "date",
    "image_url",
    "organizer",
    "is_active",
)


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str
    location: str = Field(..., max_length=255)
    date: str = Field(..., min_length=1, max_length=64)
    image_url: str = Field(..., max_length=1024)
    organizer: str = Field(..., max_length=255)
    is_active: int = Field(..., ge=0, le=1)

    model_config = {"extra": "ignore"}


class EventUpdate(BaseModel):
    """Partial update — only supplied, non-null fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)
    date: Optional[str] = Field(None, min_length=1, max_length=64)
    image_url: Optional[str] = Field(None, max_length=1024)
    organizer: Optional[str] = Field(None, max_length=255)
    is_active: Optional[int] = Field(None, ge=0, le=1)

    model_config = {"extra": "ignore"}

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class EventRead(BaseModel):
    id: int
    title: str
    description: str
    location: str
    date: str
    image_url: str
    organizer: str
    is_active: int

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("is_active", mode="before")
    @classmethod
    def _flag_as_int(cls, value):
        return int(value)


class EventRef(BaseModel):
    id: int

    model_config = {"frozen": True}


# ─── Request envelopes ──────────────────────────────────

class EventIdentifier(BaseModel):
    """Body of update/delete requests: which event to touch."""
    event_id: int

    model_config = {"extra": "ignore"}


# ─── Responses ──────────────────────────────────────────

class EventCreateResponse(BaseModel):
    success: bool = True
    event_id: int
    new_event: EventRead


class EventUpdateResponse(BaseModel):
    success: bool = True
    event_id: int
    updated_event: EventRead


class EventDeleteResponse(BaseModel):
    success: bool = True
    deleted_event_id: int
