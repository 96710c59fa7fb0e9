"""Broadcast hub — owns every live viewer connection and fans changes out.

Learn: The registry is private to the hub and guarded by one asyncio.Lock.
accept(), remove() and the enqueue step of ingest() all take the lock, so
nobody ever sees a half-updated member set.

Fan-out is two-stage:
1. ingest() serializes the message once and drops the same text into
   every connected subscriber's outbox (under the lock, so each outbox
   receives messages in ingest order).
2. One pump() task per subscriber drains its own outbox onto the socket,
   each send bounded by send_timeout.

A slow or dead viewer therefore only stalls its own pump. When a send fails
or times out, that subscriber is evicted; a full outbox evicts too, since
the hub keeps no backlog.

Subscriber lifecycle:
  CONNECTED → CLOSING → CLOSED   (hub-initiated close)
  CONNECTED → CLOSED             (transport disconnect or send failure)
"""

import asyncio
import uuid
from enum import Enum
from typing import Optional, Protocol

import structlog

from boxoffice.events import WireMessage

logger = structlog.get_logger()

# WebSocket close codes: viewer fell behind / hub shutting down
CLOSE_TRY_AGAIN_LATER = 1013
CLOSE_GOING_AWAY = 1001


class Connection(Protocol):
    """The slice of a WebSocket the hub needs."""

    async def send_text(self, data: str) -> None:
        ...

    async def close(self, code: int = 1000) -> None:
        ...


class SubscriberState(str, Enum):
    CONNECTED = "connected"
    CLOSING = "closing"
    CLOSED = "closed"


class Subscriber:
    """One viewer connection plus its private outbox."""

    def __init__(self, connection: Connection, outbox_size: int):
        self.id = uuid.uuid4().hex
        self.connection = connection
        self.state = SubscriberState.CONNECTED
        self._outbox: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=outbox_size)

    @property
    def connected(self) -> bool:
        return self.state is SubscriberState.CONNECTED

    def offer(self, text: str) -> bool:
        """Queue text for this viewer without waiting. False if the outbox is full."""
        try:
            self._outbox.put_nowait(text)
        except asyncio.QueueFull:
            return False
        return True

    async def next_message(self) -> Optional[str]:
        return await self._outbox.get()

    def wake(self) -> None:
        # None tells a waiting pump to re-check state; if the outbox is full
        # the pump is not waiting and will see the state on its next message.
        try:
            self._outbox.put_nowait(None)
        except asyncio.QueueFull:
            pass


class BroadcastHub:
    """Registry of live subscribers with fan-out delivery."""

    def __init__(self, *, send_timeout: float = 5.0, outbox_size: int = 256):
        self.send_timeout = send_timeout
        self.outbox_size = outbox_size
        self._subscribers: dict[str, Subscriber] = {}
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ─── Membership ─────────────────────────────────────

    async def accept(self, connection: Connection) -> Subscriber:
        """Register a freshly opened connection as CONNECTED."""
        subscriber = Subscriber(connection, self.outbox_size)
        async with self._lock:
            self._subscribers[subscriber.id] = subscriber
            count = len(self._subscribers)

        logger.info(
            "hub.subscriber_connected",
            subscriber_id=subscriber.id,
            subscribers=count,
        )
        return subscriber

    async def remove(
        self,
        subscriber: Subscriber,
        *,
        reason: str = "disconnected",
        close_code: Optional[int] = None,
    ) -> None:
        """Evict a subscriber. Safe to call more than once.

        With close_code the hub closes the socket itself (CLOSING, then
        CLOSED once the close frame is out or has timed out). Without it the
        transport is already gone and the subscriber goes straight to CLOSED.
        """
        async with self._lock:
            if self._subscribers.pop(subscriber.id, None) is None:
                return
            remaining = len(self._subscribers)
            if close_code is None:
                subscriber.state = SubscriberState.CLOSED
            else:
                subscriber.state = SubscriberState.CLOSING

        subscriber.wake()

        if close_code is not None:
            try:
                await asyncio.wait_for(
                    subscriber.connection.close(code=close_code),
                    timeout=self.send_timeout,
                )
            except Exception as e:
                # Peer already gone; nothing left to close.
                logger.debug(
                    "hub.close_failed",
                    subscriber_id=subscriber.id,
                    error=repr(e),
                )
            finally:
                subscriber.state = SubscriberState.CLOSED

        logger.info(
            "hub.subscriber_removed",
            subscriber_id=subscriber.id,
            reason=reason,
            subscribers=remaining,
        )

    async def close_all(self) -> None:
        """Close every subscriber (hub shutdown)."""
        async with self._lock:
            subscribers = list(self._subscribers.values())
        for subscriber in subscribers:
            await self.remove(subscriber, reason="shutdown", close_code=CLOSE_GOING_AWAY)

    # ─── Fan-out ────────────────────────────────────────

    async def ingest(self, message: WireMessage) -> int:
        """Fan one change out to every connected subscriber.

        Returns how many outboxes accepted the message. Delivery itself is
        asynchronous (see pump()).
        """
        text = message.model_dump_json()

        async with self._lock:
            targets = [s for s in self._subscribers.values() if s.connected]
            overflowed = [s for s in targets if not s.offer(text)]

        for subscriber in overflowed:
            await self.remove(
                subscriber,
                reason="outbox_full",
                close_code=CLOSE_TRY_AGAIN_LATER,
            )

        delivered = len(targets) - len(overflowed)
        logger.info(
            "hub.ingested",
            type=message.type,
            delivered=delivered,
            dropped=len(overflowed),
        )
        return delivered

    async def pump(self, subscriber: Subscriber) -> None:
        """Drain a subscriber's outbox onto its connection until it leaves.

        Learn: Runs as its own task per connection. Any send failure
        (socket error or timeout) evicts only this subscriber.
        """
        while True:
            text = await subscriber.next_message()
            if text is None or not subscriber.connected:
                return
            try:
                await asyncio.wait_for(
                    subscriber.connection.send_text(text),
                    timeout=self.send_timeout,
                )
            except Exception as e:
                logger.warning(
                    "hub.send_failed",
                    subscriber_id=subscriber.id,
                    error=repr(e),
                )
                await self.remove(subscriber, reason="send_failed")
                return
