"""Pydantic schemas for quote requests."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from shiptrack.models.quote import ServiceType
from shiptrack.schemas.validators import validate_email, validate_no_xss, validate_phone


class QuoteCreate(BaseModel):
    """Payload for POST /api/quotes (public)."""
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    service_type: ServiceType
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(..., ge=0)
    message: str | None = Field(None, max_length=5000)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("message")
    @classmethod
    def _message(cls, v: str | None) -> str | None:
        return validate_no_xss(v)


class QuoteStatusUpdate(BaseModel):
    """Payload for PATCH /api/quotes/{id}."""
    status: str


class QuoteOut(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    service_type: str
    origin: str
    destination: str
    weight: float
    message: str | None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class QuoteSubmitted(BaseModel):
    """Public acknowledgement; admin-only fields stay hidden."""
    id: str
    status: str
    created_at: datetime
