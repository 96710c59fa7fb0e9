"""Inventory API application factory.

Learn: create_app() returns a configured FastAPI instance. The lifespan
owns the resources that outlive a request: the notifier's HTTP client
(one connection pool for every webhook call) and the database engine.

Run with:
  uvicorn boxoffice.main:app --port 8000
"""

from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boxoffice import __version__
from boxoffice.api import api_router
from boxoffice.api.errors import register_exception_handlers
from boxoffice.config import settings
from boxoffice.logging_config import configure_logging
from boxoffice.realtime.notifier import WebhookNotifier

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    configure_logging(settings.environment, settings.log_level)
    logger.info(
        "boxoffice.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        hub_webhook_url=settings.hub_webhook_url,
    )

    client = httpx.AsyncClient(timeout=settings.notify_timeout_seconds)
    app.state.notifier = WebhookNotifier(
        settings.hub_webhook_url,
        timeout=settings.notify_timeout_seconds,
        client=client,
    )

    yield

    logger.info("boxoffice.shutdown")
    await client.aclose()

    from boxoffice.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="BoxOffice Inventory API",
        description="Events, tickets and oversell-safe purchases",
        version=__version__,
        lifespan=lifespan,
    )

    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    from boxoffice.middleware.request_id import RequestIdMiddleware
    from boxoffice.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: boxoffice.main:app)
app = create_app()
