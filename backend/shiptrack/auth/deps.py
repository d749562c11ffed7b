"""FastAPI dependencies for authentication and authorization.

Dependencies:
  require_admin   → Bearer credential → Principal with the admin capability

Helpers:
  authorize(header, provider)  → Principal, or UnauthorizedError
  ensure_admin(principal)      → the same capability check for services
"""

import asyncio
import logging

from fastapi import Depends, Request

from shiptrack.auth.identity import IdentityProvider, Principal, get_identity_provider
from shiptrack.config import settings
from shiptrack.middleware.exceptions import (
    IdentityTimeoutError,
    PermissionDeniedError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Authorization header must be 'Bearer <token>'")
    return token.strip()


async def authorize(authorization: str | None, provider: IdentityProvider) -> Principal:
    """Resolve the caller's Principal; fail closed on anything doubtful."""
    token = _bearer_token(authorization)
    try:
        principal = await asyncio.wait_for(
            provider.verify(token), timeout=settings.identity_timeout_seconds
        )
    except asyncio.TimeoutError:
        logger.error("Identity provider timed out after %.1fs", settings.identity_timeout_seconds)
        raise IdentityTimeoutError()
    if principal is None:
        raise UnauthorizedError("Invalid or expired token")
    return principal


def ensure_admin(principal: Principal | None) -> Principal:
    """Raise unless `principal` may perform privileged operations."""
    if principal is None:
        raise UnauthorizedError()
    if not principal.is_admin:
        raise PermissionDeniedError("Admin access required")
    return principal


async def require_admin(
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Principal:
    """Restrict endpoint to admins.

    Usage:
        @router.post("/status-updates")
        async def post_update(principal: Principal = Depends(require_admin)):
            ...
    """
    principal = await authorize(request.headers.get("authorization"), provider)
    return ensure_admin(principal)
