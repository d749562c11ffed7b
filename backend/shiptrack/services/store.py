"""Bounded calls into the backing store.

`run_store_op` puts a deadline on a store coroutine and converts driver
errors into StoreFailureError / StoreTimeoutError after logging them with
the operation name and identifiers.  Domain errors (not found, invalid
status, ...) pass through untouched.  Nothing is retried here: a write
that timed out may or may not have committed.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from shiptrack.config import settings
from shiptrack.middleware.exceptions import StoreFailureError, StoreTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _describe(context: dict) -> str:
    return ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)


async def run_store_op(awaitable: Awaitable[T], *, operation: str, **context) -> T:
    timeout = settings.store_timeout_seconds
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Store timeout after %.1fs during %s (%s)", timeout, operation, _describe(context))
        raise StoreTimeoutError()
    except SQLAlchemyError as exc:
        logger.error(
            "Store failure during %s (%s): %s",
            operation,
            _describe(context),
            exc,
            exc_info=True,
        )
        raise StoreFailureError() from exc
