"""Shipment registry (admin dashboard).

Endpoints:
    POST  /api/shipments                 Register a shipment, generating its tracking number
    GET   /api/shipments                 List shipments (newest first, optional status filter)
    GET   /api/shipments/{shipment_id}   Detail with full status log

Status changes go through /api/status-updates, never through here.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.auth.deps import require_admin
from shiptrack.auth.identity import Principal
from shiptrack.database import get_db
from shiptrack.models.statuses import parse_shipment_status
from shiptrack.schemas.common import PaginatedResponse
from shiptrack.schemas.shipment import (
    ShipmentCreate,
    ShipmentDetail,
    ShipmentSummary,
    StatusLogOut,
)
from shiptrack.services.ledger import ShipmentLedger
from shiptrack.services.store import run_store_op

logger = logging.getLogger(__name__)

router = APIRouter()


# ── POST /api/shipments ──────────────────────────────────────

@router.post("", response_model=ShipmentDetail, status_code=201)
async def create_shipment(
    body: ShipmentCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    shipment = await run_store_op(
        ShipmentLedger().create_shipment(db, body),
        operation="create_shipment",
    )
    logger.info(
        "Shipment %s registered as %s by %s",
        shipment.id, shipment.tracking_number, principal.subject,
    )
    return ShipmentDetail.model_validate(shipment)


# ── GET /api/shipments ───────────────────────────────────────

@router.get("", response_model=PaginatedResponse[ShipmentSummary])
async def list_shipments(
    status: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_admin),
):
    status_filter = parse_shipment_status(status) if status else None
    items, total = await run_store_op(
        ShipmentLedger().list_shipments(db, status_filter, limit, offset),
        operation="list_shipments",
    )
    return PaginatedResponse(
        items=[ShipmentSummary.model_validate(s) for s in items],
        total=total,
        limit=limit,
        offset=offset,
    )


# ── GET /api/shipments/{shipment_id} ─────────────────────────

@router.get("/{shipment_id}", response_model=ShipmentDetail)
async def get_shipment(
    shipment_id: str,
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(require_admin),
):
    shipment, logs = await run_store_op(
        ShipmentLedger().get_shipment(db, shipment_id),
        operation="get_shipment",
        shipment_id=shipment_id,
    )
    detail = ShipmentDetail.model_validate(shipment)
    return detail.model_copy(
        update={"status_logs": [StatusLogOut.model_validate(e) for e in logs]}
    )
