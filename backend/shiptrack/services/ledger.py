"""Shipment ledger: the only writer of shipment status.

A shipment's status history is an append-only log.  `append_status` adds
one entry and moves `Shipment.current_status` to match it, both inside the
caller's transaction:

    1. validate the status against the taxonomy (no store access on failure)
    2. SELECT the shipment FOR UPDATE; concurrent appenders to the same
       shipment queue here until the holder commits
    3. optional strict-transition check
    4. bump status_version, insert the entry with sequence=status_version,
       set current_status / updated_at
    5. flush; the request session commits or rolls back both writes together

So a reader never sees a new entry with the old status or the reverse, and
the last committed append decides `current_status`.

The ledger never commits.  Callers own the session (see database.get_db).
"""

import logging
from typing import Callable, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from shiptrack.config import settings
from shiptrack.database import utcnow
from shiptrack.middleware.exceptions import (
    IllegalTransitionError,
    ShipmentNotFoundError,
    TrackingNotFoundError,
    TrackingNumberConflictError,
)
from shiptrack.models.shipment import Shipment, ShipmentStatusLog
from shiptrack.models.statuses import (
    ShipmentStatus,
    is_legal_shipment_transition,
    parse_shipment_status,
)
from shiptrack.schemas.shipment import ShipmentCreate
from shiptrack.utils.tracking_number import generate_tracking_number, normalize_tracking_number

logger = logging.getLogger(__name__)


class ShipmentLedger:
    def __init__(
        self,
        strict_transitions: bool | None = None,
        generate: Callable[[], str] | None = None,
        max_attempts: int | None = None,
    ):
        self.strict_transitions = (
            settings.strict_shipment_transitions if strict_transitions is None else strict_transitions
        )
        self.generate = generate or (lambda: generate_tracking_number(settings.tracking_prefix))
        self.max_attempts = max_attempts or settings.tracking_number_max_attempts

    # ── Reads ────────────────────────────────────────────────

    async def _load_with_log(
        self, db: AsyncSession, *criteria
    ) -> tuple[Shipment, list[ShipmentStatusLog]] | None:
        """Shipment and its log (most recent first) from a single SELECT.

        One statement sees one snapshot, so current_status always matches
        the head of the log returned with it, even under READ COMMITTED.
        """
        result = await db.execute(
            select(Shipment)
            .where(*criteria)
            .options(joinedload(Shipment.log_entries))
            .execution_options(populate_existing=True)
        )
        shipment = result.unique().scalar_one_or_none()
        if shipment is None:
            return None
        return shipment, list(shipment.log_entries)

    async def lookup_by_tracking_number(
        self, db: AsyncSession, tracking_number: str
    ) -> tuple[Shipment, list[ShipmentStatusLog]]:
        key = normalize_tracking_number(tracking_number)
        found = await self._load_with_log(db, Shipment.tracking_number == key)
        if found is None:
            raise TrackingNotFoundError(key)
        return found

    async def get_shipment(
        self, db: AsyncSession, shipment_id: str
    ) -> tuple[Shipment, list[ShipmentStatusLog]]:
        found = await self._load_with_log(db, Shipment.id == shipment_id)
        if found is None:
            raise ShipmentNotFoundError(shipment_id)
        return found

    async def list_shipments(
        self,
        db: AsyncSession,
        status: ShipmentStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[Shipment], int]:
        base = select(Shipment)
        if status is not None:
            base = base.where(Shipment.current_status == status.value)

        count_result = await db.execute(
            select(func.count()).select_from(base.subquery())
        )
        total = count_result.scalar() or 0

        items_result = await db.execute(
            base.order_by(Shipment.created_at.desc()).limit(limit).offset(offset)
        )
        return items_result.scalars().all(), total

    # ── Writes ───────────────────────────────────────────────

    async def append_status(
        self,
        db: AsyncSession,
        shipment_id: str,
        status: object,
        location: str,
        notes: str | None = None,
    ) -> ShipmentStatusLog:
        new_status = parse_shipment_status(status)

        result = await db.execute(
            select(Shipment)
            .where(Shipment.id == shipment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        shipment = result.scalar_one_or_none()
        if shipment is None:
            raise ShipmentNotFoundError(shipment_id)

        if self.strict_transitions:
            current = ShipmentStatus(shipment.current_status)
            if not is_legal_shipment_transition(current, new_status):
                raise IllegalTransitionError(current.value, new_status.value)

        now = utcnow()
        shipment.status_version += 1
        entry = ShipmentStatusLog(
            shipment_id=shipment.id,
            sequence=shipment.status_version,
            status=new_status.value,
            location=location,
            notes=notes,
            created_at=now,
        )
        shipment.current_status = new_status.value
        shipment.updated_at = now
        db.add(entry)
        await db.flush()

        logger.debug(
            "Appended %s to shipment %s (seq %d)",
            new_status.value, shipment.id, entry.sequence,
        )
        return entry

    async def _tracking_number_taken(self, db: AsyncSession, candidate: str) -> bool:
        result = await db.execute(
            select(Shipment.id).where(Shipment.tracking_number == candidate).limit(1)
        )
        return result.first() is not None

    async def create_shipment(self, db: AsyncSession, data: ShipmentCreate) -> Shipment:
        """Persist a new shipment under a freshly generated tracking number.

        Candidates that already exist are skipped, up to `max_attempts`.
        A concurrent insert of the same candidate is still caught by the
        unique index and surfaces as TrackingNumberConflictError.
        """
        tracking_number = None
        for attempt in range(1, self.max_attempts + 1):
            candidate = normalize_tracking_number(self.generate())
            if not await self._tracking_number_taken(db, candidate):
                tracking_number = candidate
                break
            logger.info("Tracking number %s taken (attempt %d)", candidate, attempt)

        if tracking_number is None:
            raise TrackingNumberConflictError(
                f"No free tracking number after {self.max_attempts} attempts"
            )

        shipment = Shipment(
            tracking_number=tracking_number,
            current_status=ShipmentStatus.REGISTERED.value,
            status_version=0,
            **data.model_dump(),
        )
        db.add(shipment)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise TrackingNumberConflictError() from exc
        return shipment
