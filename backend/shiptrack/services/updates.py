"""Privileged status updates: the single write path into shipment status."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.auth.deps import ensure_admin
from shiptrack.auth.identity import Principal
from shiptrack.models.shipment import ShipmentStatusLog
from shiptrack.services.ledger import ShipmentLedger
from shiptrack.services.store import run_store_op

logger = logging.getLogger(__name__)


async def update_shipment_status(
    db: AsyncSession,
    principal: Principal | None,
    shipment_id: str,
    status: object,
    location: str,
    notes: str | None = None,
    ledger: ShipmentLedger | None = None,
) -> ShipmentStatusLog:
    """Append a status entry on behalf of an admin.

    Raises UnauthorizedError / PermissionDeniedError before the ledger is
    touched; otherwise whatever ShipmentLedger.append_status raises.
    """
    actor = ensure_admin(principal)

    ledger = ledger or ShipmentLedger()
    entry = await run_store_op(
        ledger.append_status(db, shipment_id, status, location, notes),
        operation="update_shipment_status",
        shipment_id=shipment_id,
    )

    logger.info(
        "Shipment %s moved to %s at %s by %s",
        shipment_id, entry.status, entry.location, actor.subject,
    )
    return entry
