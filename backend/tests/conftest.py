"""Pytest configuration and fixtures for ShipTrack tests.

Tests run against a throwaway SQLite file per test (aiosqlite).  The engine
is held to a single pooled connection, so concurrent sessions queue for it
and transactions never interleave, as they would behind row locks on
PostgreSQL.
"""

import os
import tempfile

# Settings are read at import time; point them at test backends first.
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "shiptrack-test.db"),
)
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool  # noqa: E402

from shiptrack.auth.jwt import create_access_token  # noqa: E402
from shiptrack.database import Base, get_db  # noqa: E402
from shiptrack.main import app  # noqa: E402
from shiptrack.middleware.rate_limit import MemoryRateLimiter, get_rate_limiter  # noqa: E402
from shiptrack.models.shipment import Shipment, ShipmentStatusLog  # noqa: E402


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Fresh SQLite database with every table created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'shiptrack.db'}",
        poolclass=AsyncAdaptedQueuePool,
        pool_size=1,
        max_overflow=0,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def rate_limiter() -> MemoryRateLimiter:
    """A limiter with no history, so tests don't share budgets."""
    return MemoryRateLimiter()


@pytest_asyncio.fixture
async def client(session_factory, rate_limiter) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database and rate limiter overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest.fixture
def shipment_factory(session_factory):
    """Insert a committed shipment and return it."""

    async def _create(tracking_number: str = "AFG-2024-0001", **overrides) -> Shipment:
        fields = {
            "tracking_number": tracking_number,
            "sender_name": "Kwame Mensah",
            "sender_phone": "+233201234567",
            "sender_address": "12 Ring Road, Accra",
            "receiver_name": "Ama Owusu",
            "receiver_phone": "+233241234567",
            "receiver_address": "4 Harbour St, Tema",
            "origin": "Accra",
            "destination": "Tema",
            "weight": 12.5,
        }
        fields.update(overrides)
        async with session_factory() as session:
            shipment = Shipment(**fields)
            session.add(shipment)
            await session.commit()
        return shipment

    return _create


@pytest.fixture
def count_log_entries(session_factory):
    """Number of status-log rows stored for a shipment."""

    async def _count(shipment_id: str) -> int:
        async with session_factory() as session:
            result = await session.execute(
                select(func.count())
                .select_from(ShipmentStatusLog)
                .where(ShipmentStatusLog.shipment_id == shipment_id)
            )
            return result.scalar_one()

    return _count


# ── Auth Fixtures ────────────────────────────────────────────────

@pytest.fixture
def admin_token() -> str:
    return create_access_token(subject="admin-1", role="admin")


@pytest.fixture
def admin_headers(admin_token: str) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def viewer_headers() -> dict:
    """Valid credential without the admin capability."""
    token = create_access_token(subject="viewer-1", role="viewer")
    return {"Authorization": f"Bearer {token}"}


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "concurrency: Concurrent access tests")
