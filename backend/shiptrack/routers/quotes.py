"""Quote requests.

Endpoints:
    POST    /api/quotes              Submit a quote request (public, rate-limited)
    GET     /api/quotes              List quotes (admin)
    PATCH   /api/quotes/{quote_id}   Change a quote's status (admin)
    DELETE  /api/quotes/{quote_id}   Delete a quote (admin)
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.auth.deps import require_admin
from shiptrack.auth.identity import Principal
from shiptrack.config import settings
from shiptrack.database import get_db
from shiptrack.middleware.rate_limit import RateLimiter, client_key, get_rate_limiter
from shiptrack.schemas.common import PaginatedResponse
from shiptrack.schemas.quote import QuoteCreate, QuoteOut, QuoteStatusUpdate, QuoteSubmitted
from shiptrack.services import quotes as quote_service

router = APIRouter()


async def throttle_quote_submissions(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    await limiter.enforce(
        f"quote:{client_key(request)}",
        settings.quote_rate_limit,
        settings.quote_rate_window_seconds,
    )


# ── POST /api/quotes ─────────────────────────────────────────

@router.post(
    "",
    response_model=QuoteSubmitted,
    status_code=201,
    dependencies=[Depends(throttle_quote_submissions)],
)
async def submit_quote(
    body: QuoteCreate,
    db: AsyncSession = Depends(get_db),
):
    quote = await quote_service.submit_quote(db, body)
    return QuoteSubmitted.model_validate(quote, from_attributes=True)


# ── GET /api/quotes ──────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[QuoteOut])
async def list_quotes(
    status: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    items, total = await quote_service.list_quotes(db, principal, status, limit, offset)
    return PaginatedResponse(
        items=[QuoteOut.model_validate(q) for q in items],
        total=total,
        limit=limit,
        offset=offset,
    )


# ── PATCH /api/quotes/{quote_id} ─────────────────────────────

@router.patch("/{quote_id}", response_model=QuoteOut)
async def update_quote(
    quote_id: str,
    body: QuoteStatusUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    quote = await quote_service.update_quote_status(db, principal, quote_id, body.status)
    return QuoteOut.model_validate(quote)


# ── DELETE /api/quotes/{quote_id} ────────────────────────────

@router.delete("/{quote_id}", status_code=204)
async def delete_quote(
    quote_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    await quote_service.delete_quote(db, principal, quote_id)
    return Response(status_code=204)
