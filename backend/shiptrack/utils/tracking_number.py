"""Tracking number generation and normalization.

Format:  {PREFIX}-{YYYY}-{NNNN}   e.g. AFG-2026-4821

NNNN is a uniform random draw from 1000..9999, so two shipments can be
handed the same candidate.  Uniqueness is the store's job (unique index on
shipments.tracking_number); retrying on collision is done by whoever
persists the shipment, see ShipmentLedger.create_shipment.
"""

import random
import re
from datetime import date

DEFAULT_PREFIX = "AFG"

_WHITESPACE = re.compile(r"\s+")
_FORMAT = re.compile(r"^(?P<prefix>[A-Z0-9]+)-(?P<year>\d{4})-(?P<seq>\d{4})$")

_rng = random.SystemRandom()


def generate_tracking_number(
    prefix: str = DEFAULT_PREFIX,
    today: date | None = None,
) -> str:
    """Return a fresh candidate tracking number for the current year."""
    year = (today or date.today()).year
    return f"{prefix}-{year}-{_rng.randint(1000, 9999)}"


def normalize_tracking_number(raw: str) -> str:
    """Uppercase and strip every whitespace character.

    Used as the lookup key, so "afg-2024-0001 " and "AFG-2024-0001"
    resolve to the same shipment.  Idempotent.
    """
    return _WHITESPACE.sub("", raw).upper()


def is_well_formed(tracking_number: str, prefix: str | None = None) -> bool:
    """Advisory check against PREFIX-YYYY-NNNN; lookups do not require it."""
    match = _FORMAT.match(tracking_number)
    if not match:
        return False
    return prefix is None or match.group("prefix") == prefix.upper()
