"""BoxOffice — live event and ticket inventory.

Operators create, update and delete events and sell tickets through the
inventory API. Every committed change is pushed to a broadcast hub, which
fans it out to every connected WebSocket viewer.
"""

__version__ = "0.1.0"
