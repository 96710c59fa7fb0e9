"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
"""

from fastapi import APIRouter

from boxoffice.api.events import router as events_router
from boxoffice.api.health import router as health_router
from boxoffice.api.tickets import router as tickets_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(events_router, tags=["events"])
api_router.include_router(tickets_router, tags=["tickets"])
