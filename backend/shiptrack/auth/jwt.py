"""JWT token creation and decoding.

ShipTrack does not log anyone in; tokens are minted by the identity
service that fronts the admin dashboard and share its signing key.
`create_access_token` exists for that service, the CLI and the tests.

Token claims:
  - sub:   admin user ID (opaque to ShipTrack)
  - role:  role string; roles listed in ADMIN_ROLES may mutate state
  - type:  "access"
  - exp:   expiry timestamp
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from shiptrack.config import settings


def create_access_token(
    subject: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": subject,
        "role": role,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return {}
