"""Tests for credential checking and the admin capability."""

import asyncio
from datetime import timedelta

import pytest
from jose import jwt

from shiptrack.auth.deps import authorize, ensure_admin
from shiptrack.auth.identity import JWTIdentityProvider, Principal
from shiptrack.auth.jwt import create_access_token
from shiptrack.config import settings
from shiptrack.middleware.exceptions import (
    IdentityTimeoutError,
    PermissionDeniedError,
    UnauthorizedError,
)


class StaticProvider:
    def __init__(self, principal: Principal | None):
        self.principal = principal
        self.seen: list[str] = []

    async def verify(self, token: str) -> Principal | None:
        self.seen.append(token)
        return self.principal


class SlowProvider:
    async def verify(self, token: str) -> Principal | None:
        await asyncio.sleep(5)
        return Principal(subject="late", role="admin")


@pytest.mark.unit
@pytest.mark.asyncio
class TestAuthorize:

    async def test_bearer_token_is_passed_to_provider(self):
        provider = StaticProvider(Principal(subject="u1", role="admin"))

        principal = await authorize("Bearer abc.def", provider)

        assert principal.subject == "u1"
        assert provider.seen == ["abc.def"]

    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "Bearer ", "abc.def"])
    async def test_malformed_header(self, header):
        provider = StaticProvider(Principal(subject="u1", role="admin"))

        with pytest.raises(UnauthorizedError):
            await authorize(header, provider)
        assert provider.seen == []

    async def test_rejected_token(self):
        with pytest.raises(UnauthorizedError):
            await authorize("Bearer abc", StaticProvider(None))

    async def test_provider_timeout(self, monkeypatch):
        monkeypatch.setattr(settings, "identity_timeout_seconds", 0.05)

        with pytest.raises(IdentityTimeoutError) as exc_info:
            await authorize("Bearer abc", SlowProvider())
        assert exc_info.value.status_code == 504


@pytest.mark.unit
class TestEnsureAdmin:

    def test_missing_principal(self):
        with pytest.raises(UnauthorizedError):
            ensure_admin(None)

    def test_non_admin(self):
        with pytest.raises(PermissionDeniedError):
            ensure_admin(Principal(subject="u2", role="viewer"))

    def test_admin(self):
        principal = Principal(subject="u1", role="admin")
        assert ensure_admin(principal) is principal

    def test_custom_admin_roles(self):
        principal = Principal(subject="u3", role="dispatcher", admin_roles=frozenset({"dispatcher"}))
        assert principal.is_admin


@pytest.mark.unit
@pytest.mark.asyncio
class TestJWTIdentityProvider:

    async def test_valid_admin_token(self):
        token = create_access_token(subject="admin-7", role="admin")

        principal = await JWTIdentityProvider().verify(token)

        assert principal == Principal(subject="admin-7", role="admin", admin_roles=frozenset({"admin"}))
        assert principal.is_admin

    async def test_non_admin_role(self):
        token = create_access_token(subject="clerk-1", role="clerk")

        principal = await JWTIdentityProvider().verify(token)

        assert principal is not None
        assert not principal.is_admin

    async def test_expired_token(self):
        token = create_access_token(subject="admin-7", role="admin", expires_delta=timedelta(seconds=-5))
        assert await JWTIdentityProvider().verify(token) is None

    async def test_wrong_signing_key(self):
        token = jwt.encode(
            {"sub": "admin-7", "role": "admin", "type": "access"},
            "some-other-key",
            algorithm="HS256",
        )
        assert await JWTIdentityProvider().verify(token) is None

    async def test_wrong_token_type(self):
        token = jwt.encode(
            {"sub": "admin-7", "role": "admin", "type": "refresh"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        assert await JWTIdentityProvider().verify(token) is None
