"""Tests for bounded store calls and the service-level error mapping."""

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from shiptrack.auth.identity import Principal
from shiptrack.config import settings
from shiptrack.middleware.exceptions import (
    PermissionDeniedError,
    ShipmentNotFoundError,
    StoreFailureError,
    StoreTimeoutError,
    UnauthorizedError,
)
from shiptrack.middleware.rate_limit import MemoryRateLimiter
from shiptrack.services.lookup import track_shipment
from shiptrack.services.store import run_store_op
from shiptrack.services.updates import update_shipment_status


async def _slow():
    await asyncio.sleep(5)


async def _broken():
    raise OperationalError("SELECT 1", {}, Exception("connection reset"))


async def _missing():
    raise ShipmentNotFoundError("abc")


class SlowLedger:
    async def lookup_by_tracking_number(self, db, tracking_number):
        await asyncio.sleep(5)


@pytest.mark.unit
@pytest.mark.asyncio
class TestRunStoreOp:

    async def test_returns_result(self):
        async def value():
            return 42

        assert await run_store_op(value(), operation="value") == 42

    async def test_timeout(self, monkeypatch):
        monkeypatch.setattr(settings, "store_timeout_seconds", 0.05)

        with pytest.raises(StoreTimeoutError) as exc_info:
            await run_store_op(_slow(), operation="slow")
        assert exc_info.value.status_code == 504

    async def test_driver_error_is_generic(self):
        with pytest.raises(StoreFailureError) as exc_info:
            await run_store_op(_broken(), operation="broken", shipment_id="s1")

        assert exc_info.value.status_code == 503
        assert "connection reset" not in exc_info.value.message

    async def test_domain_errors_pass_through(self):
        with pytest.raises(ShipmentNotFoundError):
            await run_store_op(_missing(), operation="missing")


@pytest.mark.unit
@pytest.mark.asyncio
class TestServiceErrors:

    async def test_lookup_times_out(self, session_factory, monkeypatch):
        monkeypatch.setattr(settings, "store_timeout_seconds", 0.05)

        async with session_factory() as session:
            with pytest.raises(StoreTimeoutError):
                await track_shipment(
                    session, "AFG-2024-0001", "ip:test", MemoryRateLimiter(), ledger=SlowLedger()
                )

    async def test_update_checks_capability_before_store(
        self, session_factory, shipment_factory, count_log_entries
    ):
        shipment = await shipment_factory()

        async with session_factory() as session:
            with pytest.raises(UnauthorizedError):
                await update_shipment_status(session, None, shipment.id, "in_transit", "Accra")
            with pytest.raises(PermissionDeniedError):
                await update_shipment_status(
                    session, Principal(subject="v", role="viewer"), shipment.id, "in_transit", "Accra"
                )

        assert await count_log_entries(shipment.id) == 0

    async def test_update_by_admin(self, session_factory, shipment_factory):
        shipment = await shipment_factory()

        async with session_factory() as session:
            entry = await update_shipment_status(
                session, Principal(subject="a", role="admin"), shipment.id, "picked_up", "Accra"
            )
            await session.commit()

        assert entry.status == "picked_up"
        assert entry.sequence == 1
