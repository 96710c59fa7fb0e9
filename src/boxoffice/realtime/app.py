"""Broadcast hub application factory.

Serves POST /webhook (from the inventory API's notifier) and the /ws
viewer socket on one port. Run with:
  uvicorn boxoffice.realtime.app:app --port 3000
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boxoffice import __version__
from boxoffice.config import settings
from boxoffice.logging_config import configure_logging
from boxoffice.middleware.request_id import RequestIdMiddleware
from boxoffice.realtime.hub import BroadcastHub
from boxoffice.realtime.websocket import router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """The hub lives exactly as long as the process serving it."""
    configure_logging(settings.environment, settings.log_level)
    app.state.hub = BroadcastHub(
        send_timeout=settings.ws_send_timeout_seconds,
        outbox_size=settings.subscriber_outbox_size,
    )
    logger.info(
        "hub.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.hub_port,
    )

    yield

    logger.info("hub.shutdown", subscribers=app.state.hub.subscriber_count)
    await app.state.hub.close_all()


def create_hub_app() -> FastAPI:
    app = FastAPI(
        title="BoxOffice Broadcast Hub",
        description="Pushes inventory changes to connected viewers",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_hub_app()
