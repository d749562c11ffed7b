"""Public tracking lookup.

Order of checks is fixed: rate limit first (so malformed floods are still
throttled), then input, then the ledger.  No credential is needed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.config import settings
from shiptrack.middleware.exceptions import InvalidInputError
from shiptrack.middleware.rate_limit import RateLimiter
from shiptrack.schemas.shipment import TrackingLogView, TrackingView
from shiptrack.services.ledger import ShipmentLedger
from shiptrack.services.store import run_store_op
from shiptrack.utils.tracking_number import normalize_tracking_number

logger = logging.getLogger(__name__)


async def track_shipment(
    db: AsyncSession,
    raw_id: object,
    caller_key: str,
    limiter: RateLimiter,
    ledger: ShipmentLedger | None = None,
) -> TrackingView:
    await limiter.enforce(
        f"track:{caller_key}",
        settings.track_rate_limit,
        settings.track_rate_window_seconds,
    )

    if not isinstance(raw_id, str):
        raise InvalidInputError("tracking_number is required")
    tracking_number = normalize_tracking_number(raw_id)
    if not tracking_number:
        raise InvalidInputError("tracking_number is required")

    ledger = ledger or ShipmentLedger()
    shipment, logs = await run_store_op(
        ledger.lookup_by_tracking_number(db, tracking_number),
        operation="track_shipment",
        tracking_number=tracking_number,
    )

    return TrackingView(
        tracking_number=shipment.tracking_number,
        origin=shipment.origin,
        destination=shipment.destination,
        current_status=shipment.current_status,
        estimated_delivery=shipment.estimated_delivery,
        shipment_status_logs=[TrackingLogView.model_validate(entry) for entry in logs],
    )
