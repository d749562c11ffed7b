"""Public tracking endpoint.

Endpoints:
    POST     /api/track   Look up a shipment by tracking number
    OPTIONS  /api/track   CORS preflight (empty 200)

The body is read by hand rather than through a Pydantic model so that the
rate limit is charged before the input is judged: a flood of malformed
requests is throttled like any other.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.database import get_db
from shiptrack.middleware.rate_limit import RateLimiter, client_key, get_rate_limiter
from shiptrack.middleware.security import PUBLIC_CORS_HEADERS
from shiptrack.schemas.shipment import TrackingView
from shiptrack.services.lookup import track_shipment

router = APIRouter()


async def _read_tracking_number(request: Request) -> object:
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("tracking_number")


@router.post("", response_model=TrackingView)
async def track(
    request: Request,
    db: AsyncSession = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    raw = await _read_tracking_number(request)
    return await track_shipment(db, raw, client_key(request), limiter)


@router.options("")
async def track_preflight():
    return Response(status_code=200, headers=PUBLIC_CORS_HEADERS)
