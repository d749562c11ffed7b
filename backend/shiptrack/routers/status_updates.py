"""Privileged shipment status updates.

Endpoints:
    POST  /api/status-updates   Append a status entry (admin)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shiptrack.auth.deps import require_admin
from shiptrack.auth.identity import Principal
from shiptrack.database import get_db
from shiptrack.schemas.shipment import StatusLogOut, StatusUpdateRequest, StatusUpdateResponse
from shiptrack.services.updates import update_shipment_status

router = APIRouter()


@router.post("", response_model=StatusUpdateResponse, status_code=201)
async def post_status_update(
    body: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    entry = await update_shipment_status(
        db,
        principal,
        shipment_id=body.shipment_id,
        status=body.status,
        location=body.location,
        notes=body.notes,
    )
    return StatusUpdateResponse(entry=StatusLogOut.model_validate(entry))
