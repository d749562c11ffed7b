"""Status taxonomies for shipments and quotes.

Shipment lifecycle:
    registered → picked_up → in_transit → out_for_delivery → delivered
    cancelled is a terminal side-state reachable from any non-terminal state.

Quote lifecycle:
    pending → contacted → completed

Both enums are closed: parsing is an exact membership test, so
"In_Transit" or " delivered" are rejected rather than coerced.

The transition tables are only consulted when a strict policy is
switched on in settings; by default any member may follow any other.
"""

import enum

from shiptrack.middleware.exceptions import InvalidStatusError


class ShipmentStatus(str, enum.Enum):
    REGISTERED = "registered"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class QuoteStatus(str, enum.Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    COMPLETED = "completed"


SHIPMENT_LIFECYCLE: tuple[ShipmentStatus, ...] = (
    ShipmentStatus.REGISTERED,
    ShipmentStatus.PICKED_UP,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED,
)

TERMINAL_SHIPMENT_STATUSES = frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.CANCELLED})

QUOTE_LIFECYCLE: tuple[QuoteStatus, ...] = (
    QuoteStatus.PENDING,
    QuoteStatus.CONTACTED,
    QuoteStatus.COMPLETED,
)


def _forward_steps(lifecycle: tuple) -> set[tuple]:
    return {(a, b) for a, b in zip(lifecycle, lifecycle[1:])}


# Strict mode: one step forward along the lifecycle, or cancel from any
# non-terminal state.  Re-asserting the current status (e.g. a second
# in_transit scan at a new location) is also allowed.
SHIPMENT_TRANSITIONS: frozenset[tuple[ShipmentStatus, ShipmentStatus]] = frozenset(
    _forward_steps(SHIPMENT_LIFECYCLE)
    | {
        (s, ShipmentStatus.CANCELLED)
        for s in ShipmentStatus
        if s not in TERMINAL_SHIPMENT_STATUSES
    }
    | {(s, s) for s in ShipmentStatus if s not in TERMINAL_SHIPMENT_STATUSES}
)

QUOTE_TRANSITIONS: frozenset[tuple[QuoteStatus, QuoteStatus]] = frozenset(
    _forward_steps(QUOTE_LIFECYCLE)
)


def parse_shipment_status(value: object) -> ShipmentStatus:
    """Return the ShipmentStatus for `value` or raise InvalidStatusError."""
    if isinstance(value, ShipmentStatus):
        return value
    if isinstance(value, str):
        try:
            return ShipmentStatus(value)
        except ValueError:
            pass
    raise InvalidStatusError(value, [s.value for s in ShipmentStatus])


def parse_quote_status(value: object) -> QuoteStatus:
    """Return the QuoteStatus for `value` or raise InvalidStatusError."""
    if isinstance(value, QuoteStatus):
        return value
    if isinstance(value, str):
        try:
            return QuoteStatus(value)
        except ValueError:
            pass
    raise InvalidStatusError(value, [s.value for s in QuoteStatus])


def is_legal_shipment_transition(current: ShipmentStatus, target: ShipmentStatus) -> bool:
    return (current, target) in SHIPMENT_TRANSITIONS


def is_legal_quote_transition(current: QuoteStatus, target: QuoteStatus) -> bool:
    return (current, target) in QUOTE_TRANSITIONS
