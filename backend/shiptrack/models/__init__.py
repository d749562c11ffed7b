"""Aggregate model imports for Alembic auto-detection."""

from shiptrack.models.quote import Quote, ServiceType  # noqa: F401
from shiptrack.models.shipment import Shipment, ShipmentStatusLog  # noqa: F401
from shiptrack.models.statuses import QuoteStatus, ShipmentStatus  # noqa: F401
