"""Principals and the identity providers that vouch for them.

The core only asks one question of a caller: is this an admin?  How the
credential is checked belongs to an IdentityProvider.  The default one
verifies our HS256 JWTs; swap it by overriding `get_identity_provider`.
"""

from dataclasses import dataclass
from typing import Protocol

from shiptrack.auth.jwt import decode_token
from shiptrack.config import settings


@dataclass(frozen=True)
class Principal:
    """An authenticated caller."""
    subject: str
    role: str
    admin_roles: frozenset[str] = frozenset({"admin"})

    @property
    def is_admin(self) -> bool:
        return self.role in self.admin_roles


class IdentityProvider(Protocol):
    async def verify(self, token: str) -> Principal | None:
        """Return the Principal for `token`, or None if it is not valid."""
        ...


class JWTIdentityProvider:
    def __init__(self, admin_roles: set[str] | None = None):
        self.admin_roles = frozenset(admin_roles or settings.admin_role_set)

    async def verify(self, token: str) -> Principal | None:
        payload = decode_token(token)
        subject = payload.get("sub")
        if not subject or payload.get("type") != "access":
            return None
        return Principal(
            subject=str(subject),
            role=str(payload.get("role", "")),
            admin_roles=self.admin_roles,
        )


_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency for the configured identity provider."""
    global _provider
    if _provider is None:
        _provider = JWTIdentityProvider()
    return _provider
