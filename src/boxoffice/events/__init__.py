"""Change events — what a committed mutation tells the rest of the system."""

from boxoffice.events.types import ChangeEvent, ChangeKind, WireMessage

__all__ = ["ChangeEvent", "ChangeKind", "WireMessage"]
