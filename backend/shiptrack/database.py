"""Database engine, session factory, and declarative base.

One DeclarativeBase (`Base`) holds the shipment, status-log and quote
tables.  `get_db()` is the FastAPI dependency: one session per request,
committed when the handler returns and rolled back on any exception, so
every write a request makes lands in a single transaction.
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from shiptrack.config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs: dict = {"echo": settings.debug and settings.log_level == "DEBUG"}
    if url.startswith("postgresql+asyncpg"):
        kwargs.update(
            pool_size=20,
            max_overflow=10,
            # Server round-trips are bounded even outside asyncio.wait_for
            connect_args={"command_timeout": settings.store_timeout_seconds},
        )
    return kwargs


engine = create_async_engine(settings.database_url, **_engine_kwargs(settings.database_url))

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ── Base class ──────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Session dependency ──────────────────────────────────────

async def get_db() -> AsyncSession:
    """Yield a request-scoped session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
