"""Test fixtures — a throwaway SQLite database per test.

Learn: Each test gets its own database file under tmp_path, so tests never
see each other's rows. get_db is overridden to open a NEW session per
request (like production), which is what lets the concurrency tests run
real parallel transactions against the same ticket row.

The notifier is replaced by RecordingNotifier, which keeps every change
handed to it so tests can assert "exactly one ChangeEvent per mutation".
"""

import asyncio
import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from boxoffice.api.deps import get_notifier
from boxoffice.db.engine import get_db
from boxoffice.db.models import Base
from boxoffice.main import app


class RecordingNotifier:
    """Stands in for WebhookNotifier; remembers every change it was given."""

    def __init__(self):
        self.changes = []

    async def notify(self, change) -> bool:
        self.changes.append(change)
        return True


EVENT_FIELDS = {
    "title": "Jazz Night",
    "description": "An evening of live jazz",
    "location": "Blue Note Hall",
    "date": "2026-12-01 20:00:00",
    "image_url": "https://example.com/jazz.png",
    "organizer": "City Arts",
    "is_active": 1,
}


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'boxoffice.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture()
async def client(session_factory, notifier):
    """HTTP client with get_db and get_notifier overridden for testing."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def event(client, notifier):
    """An active event, created through the API."""
    resp = await client.post("/api/v1/events", json=EVENT_FIELDS)
    assert resp.status_code == 201
    notifier.changes.clear()
    return resp.json()["new_event"]


@pytest_asyncio.fixture()
async def ticket(client, notifier, event):
    """A general-admission ticket with 5 left."""
    resp = await client.post(
        f"/api/v1/events/{event['id']}/tickets",
        json={"title": "General Admission", "type": "standard", "available_quantity": 5},
    )
    assert resp.status_code == 201
    notifier.changes.clear()
    return resp.json()


class FakeConnection:
    """Viewer socket stand-in: records sends, can fail or stall on demand."""

    def __init__(self, *, fail: bool = False, delay: float = 0.0):
        self.received: asyncio.Queue[str] = asyncio.Queue()
        self.fail = fail
        self.delay = delay
        self.closed_with = None

    async def send_text(self, data: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionResetError("peer went away")
        await self.received.put(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code

    async def next(self, timeout: float = 1.0) -> dict:
        return json.loads(await asyncio.wait_for(self.received.get(), timeout))
