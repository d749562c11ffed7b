"""Shipment and its append-only status log.

`current_status` mirrors the status of the latest log entry (or
"registered" while the log is empty).  Only ShipmentLedger writes either
table's status columns; both writes happen in one transaction.

`status_version` counts appended entries and is copied into each entry's
`sequence`, giving the log a strict per-shipment order even when two
timestamps collide.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiptrack.database import Base, utcnow
from shiptrack.models.statuses import ShipmentStatus


class Shipment(Base):
    __tablename__ = "shipments"
    __table_args__ = (
        CheckConstraint(
            "weight >= 0 AND length >= 0 AND width >= 0 AND height >= 0",
            name="ck_shipments_dimensions_non_negative",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    tracking_number: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )

    # ── Sender / receiver ────────────────────────────────────
    sender_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sender_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    sender_address: Mapped[str] = mapped_column(Text, nullable=False)
    receiver_name: Mapped[str] = mapped_column(String(255), nullable=False)
    receiver_phone: Mapped[str] = mapped_column(String(50), nullable=False)
    receiver_address: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Route ────────────────────────────────────────────────
    origin: Mapped[str] = mapped_column(String(255), nullable=False)
    destination: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Dimensions (kg / cm) ─────────────────────────────────
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    length: Mapped[float] = mapped_column(Float, default=0.0)
    width: Mapped[float] = mapped_column(Float, default=0.0)
    height: Mapped[float] = mapped_column(Float, default=0.0)

    # ── Status ───────────────────────────────────────────────
    current_status: Mapped[str] = mapped_column(
        String(30), default=ShipmentStatus.REGISTERED.value, nullable=False, index=True
    )
    status_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    estimated_delivery: Mapped[date | None] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # ── Relationships ────────────────────────────────────────
    log_entries = relationship(
        "ShipmentStatusLog",
        back_populates="shipment",
        order_by="ShipmentStatusLog.sequence.desc()",
        lazy="raise",
    )


class ShipmentStatusLog(Base):
    __tablename__ = "shipment_status_logs"
    __table_args__ = (
        UniqueConstraint("shipment_id", "sequence", name="uq_status_log_shipment_sequence"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    shipment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shipments.id"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(String(30), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    shipment = relationship("Shipment", back_populates="log_entries", lazy="raise")
