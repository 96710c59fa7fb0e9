"""Hub routes — webhook ingress and the viewer WebSocket.

Learn: Each viewer connects to /ws. The handler:
1. Registers the connection with the hub (before the handshake completes,
   so a client whose connect() has returned is already subscribed)
2. Runs the hub's pump for this subscriber in a background task
   (outbox → socket), closing the socket if the hub drops the viewer
3. Listens for client frames (ping → pong) inline until the client goes away
4. Cancels the pump and removes the subscriber

The inventory API's notifier POSTs every committed change to /webhook.
"""

import asyncio
import json

import structlog
from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from boxoffice import __version__
from boxoffice.events import WireMessage
from boxoffice.realtime.hub import (
    CLOSE_TRY_AGAIN_LATER,
    BroadcastHub,
    Subscriber,
    SubscriberState,
)

logger = structlog.get_logger()
router = APIRouter()

PONG = json.dumps({"type": "pong"})


def get_hub(request: Request) -> BroadcastHub:
    return request.app.state.hub


@router.post("/webhook")
async def receive_change(message: WireMessage, hub: BroadcastHub = Depends(get_hub)):
    """Accept one change from the notifier and push it to every viewer."""
    delivered = await hub.ingest(message)
    return {
        "status": "pushed",
        "delivered": delivered,
        "payload": message.model_dump(),
    }


@router.get("/health")
async def hub_health(hub: BroadcastHub = Depends(get_hub)):
    return {
        "status": "healthy",
        "server": "ok",
        "version": __version__,
        "subscribers": hub.subscriber_count,
    }


def _is_open(websocket: WebSocket) -> bool:
    return (
        websocket.application_state == WebSocketState.CONNECTED
        and websocket.client_state == WebSocketState.CONNECTED
    )


async def _client_listener(websocket: WebSocket, subscriber: Subscriber) -> None:
    """Answer pings through the outbox so all sends stay on the pump."""
    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if isinstance(msg, dict) and msg.get("type") == "ping":
                subscriber.offer(PONG)
    except WebSocketDisconnect:
        pass


async def _pump_then_close(
    hub: BroadcastHub, subscriber: Subscriber, websocket: WebSocket
) -> None:
    """Run the hub's pump; if it evicted this viewer, close the socket.

    A hub-initiated close (CLOSING) is already in flight and left alone.
    Closing makes the viewer's next receive see a disconnect, which ends the
    handler's listen loop.
    """
    await hub.pump(subscriber)
    if subscriber.state is not SubscriberState.CLOSED or not _is_open(websocket):
        return
    try:
        await websocket.close(code=CLOSE_TRY_AGAIN_LATER)
    except Exception as e:
        logger.debug("hub.close_failed", subscriber_id=subscriber.id, error=repr(e))


@router.websocket("/ws")
async def viewer_websocket(websocket: WebSocket):
    """Long-lived connection that receives every change as a JSON text frame."""
    hub: BroadcastHub = websocket.app.state.hub
    subscriber = await hub.accept(websocket)
    pump_task = None

    try:
        await websocket.accept()
        pump_task = asyncio.create_task(_pump_then_close(hub, subscriber, websocket))
        await _client_listener(websocket, subscriber)
    finally:
        if pump_task is not None:
            pump_task.cancel()
            await asyncio.gather(pump_task, return_exceptions=True)
        await hub.remove(subscriber)
        if _is_open(websocket):
            await websocket.close()
