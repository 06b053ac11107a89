"""Test fixtures.

Provides:
- In-memory SQLite lead store (aiosqlite) with the production schema
- A fake Conversions API behind httpx.MockTransport that records requests
- An EventDispatcher wired to the fake API
- Async HTTP client for the FastAPI app with store and dispatcher overridden
- A lead write that fails after the first row
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leadbridge.db.models import Base, Lead
from leadbridge.db.repository import upsert_lead
from leadbridge.db.session import get_session, get_session_factory
from leadbridge.deps import get_dispatcher
from leadbridge.main import app
from leadbridge.services import importer
from leadbridge.services.dispatcher import EventDispatcher

PIXEL_ID = "PIXEL123"
ACCESS_TOKEN = "test-token"


class FakeConversionsApi:
    """Callable MockTransport handler that records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: dict | str = {"events_received": 1, "fbtrace_id": "trace-abc"}
        self.exc: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as s:
        yield s


@pytest.fixture
def add_leads(session_factory):
    """Insert leads directly, bypassing the importer."""

    async def _add(*leads: Lead) -> None:
        async with session_factory() as s:
            s.add_all(leads)
            await s.commit()

    return _add


@pytest.fixture
def capi() -> FakeConversionsApi:
    return FakeConversionsApi()


@pytest_asyncio.fixture
async def dispatcher(capi) -> AsyncGenerator[EventDispatcher, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(capi)) as http:
        yield EventDispatcher(PIXEL_ID, ACCESS_TOKEN, client=http)


@pytest_asyncio.fixture
async def client(session_factory, dispatcher) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the API, backed by the SQLite store and fake CAPI."""

    async def _session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def failing_second_write(monkeypatch):
    """Let the first upsert through, then fail like a dropped connection."""
    calls = {"n": 0}

    async def _upsert(session, values):
        calls["n"] += 1
        if calls["n"] > 1:
            raise OperationalError("INSERT", {}, Exception("server closed the connection"))
        await upsert_lead(session, values)

    monkeypatch.setattr(importer, "upsert_lead", _upsert)
