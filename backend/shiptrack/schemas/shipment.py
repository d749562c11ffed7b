"""Pydantic schemas for shipments, status updates and the public tracking view."""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ── Create shipment (admin) ──────────────────────────────────

class ShipmentCreate(BaseModel):
    """Payload for POST /api/shipments.  The tracking number is generated."""
    sender_name: str = Field(..., min_length=1, max_length=255)
    sender_phone: str = Field(..., min_length=1, max_length=50)
    sender_address: str = Field(..., min_length=1)
    receiver_name: str = Field(..., min_length=1, max_length=255)
    receiver_phone: str = Field(..., min_length=1, max_length=50)
    receiver_address: str = Field(..., min_length=1)
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(..., ge=0)
    length: float = Field(0.0, ge=0)
    width: float = Field(0.0, ge=0)
    height: float = Field(0.0, ge=0)
    estimated_delivery: date | None = None


# ── Status update (admin) ────────────────────────────────────

class StatusUpdateRequest(BaseModel):
    """Payload for POST /api/status-updates.

    `status` stays a plain string so that unknown values reach the ledger
    and come back as INVALID_STATUS rather than a generic schema error.
    """
    shipment_id: str = Field(..., min_length=1)
    status: str
    location: str = Field(..., min_length=1, max_length=255)
    notes: str | None = None


class StatusLogOut(BaseModel):
    id: str
    shipment_id: str
    sequence: int
    status: str
    location: str
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class StatusUpdateResponse(BaseModel):
    success: bool = True
    entry: StatusLogOut


# ── Admin views ──────────────────────────────────────────────

class ShipmentSummary(BaseModel):
    id: str
    tracking_number: str
    sender_name: str
    receiver_name: str
    origin: str
    destination: str
    current_status: str
    estimated_delivery: date | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ShipmentDetail(ShipmentSummary):
    sender_phone: str
    sender_address: str
    receiver_phone: str
    receiver_address: str
    weight: float
    length: float
    width: float
    height: float
    status_logs: list[StatusLogOut] = []


# ── Public tracking view ─────────────────────────────────────

class TrackingLogView(BaseModel):
    status: str
    location: str
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TrackingView(BaseModel):
    """What the public tracking page sees: no internal ids."""
    tracking_number: str
    origin: str
    destination: str
    current_status: str
    estimated_delivery: date | None
    shipment_status_logs: list[TrackingLogView]
