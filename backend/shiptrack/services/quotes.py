"""Quote desk: public submission, admin triage.

Quotes have their own small lifecycle (pending → contacted → completed)
and never touch the shipment ledger.  Admin operations take a Principal
and re-check the admin capability, mirroring update_shipment_status.

Any valid status may be set by default.  With QUOTE_FORWARD_ONLY=true only
a single step forward is accepted.
"""

import logging
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.auth.deps import ensure_admin
from shiptrack.auth.identity import Principal
from shiptrack.config import settings
from shiptrack.database import utcnow
from shiptrack.middleware.exceptions import IllegalTransitionError, QuoteNotFoundError
from shiptrack.models.quote import Quote
from shiptrack.models.statuses import (
    QuoteStatus,
    is_legal_quote_transition,
    parse_quote_status,
)
from shiptrack.schemas.quote import QuoteCreate
from shiptrack.services.store import run_store_op

logger = logging.getLogger(__name__)


async def _insert_quote(db: AsyncSession, data: QuoteCreate) -> Quote:
    quote = Quote(
        **data.model_dump(exclude={"service_type"}),
        service_type=data.service_type.value,
        status=QuoteStatus.PENDING.value,
    )
    db.add(quote)
    await db.flush()
    return quote


async def submit_quote(db: AsyncSession, data: QuoteCreate) -> Quote:
    quote = await run_store_op(_insert_quote(db, data), operation="submit_quote")
    logger.info("Quote %s submitted (%s, %s → %s)", quote.id, quote.service_type, quote.origin, quote.destination)
    return quote


async def _load_quote(db: AsyncSession, quote_id: str) -> Quote:
    quote = await db.get(Quote, quote_id)
    if quote is None:
        raise QuoteNotFoundError(quote_id)
    return quote


async def _list_quotes(
    db: AsyncSession,
    status: QuoteStatus | None,
    limit: int,
    offset: int,
) -> tuple[Sequence[Quote], int]:
    base = select(Quote)
    if status is not None:
        base = base.where(Quote.status == status.value)

    count_result = await db.execute(select(func.count()).select_from(base.subquery()))
    total = count_result.scalar() or 0

    items_result = await db.execute(
        base.order_by(Quote.created_at.desc()).limit(limit).offset(offset)
    )
    return items_result.scalars().all(), total


async def list_quotes(
    db: AsyncSession,
    principal: Principal | None,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[Sequence[Quote], int]:
    ensure_admin(principal)
    status_filter = parse_quote_status(status) if status else None
    return await run_store_op(
        _list_quotes(db, status_filter, limit, offset),
        operation="list_quotes",
    )


async def _set_status(db: AsyncSession, quote_id: str, target: QuoteStatus) -> Quote:
    quote = await _load_quote(db, quote_id)
    current = QuoteStatus(quote.status)
    if (
        settings.quote_forward_only
        and current != target
        and not is_legal_quote_transition(current, target)
    ):
        raise IllegalTransitionError(current.value, target.value)
    quote.status = target.value
    quote.updated_at = utcnow()
    await db.flush()
    return quote


async def update_quote_status(
    db: AsyncSession,
    principal: Principal | None,
    quote_id: str,
    status: object,
) -> Quote:
    actor = ensure_admin(principal)
    target = parse_quote_status(status)
    quote = await run_store_op(
        _set_status(db, quote_id, target),
        operation="update_quote_status",
        quote_id=quote_id,
    )
    logger.info("Quote %s set to %s by %s", quote_id, target.value, actor.subject)
    return quote


async def _delete(db: AsyncSession, quote_id: str) -> None:
    quote = await _load_quote(db, quote_id)
    await db.delete(quote)
    await db.flush()


async def delete_quote(db: AsyncSession, principal: Principal | None, quote_id: str) -> None:
    actor = ensure_admin(principal)
    await run_store_op(_delete(db, quote_id), operation="delete_quote", quote_id=quote_id)
    logger.info("Quote %s deleted by %s", quote_id, actor.subject)
