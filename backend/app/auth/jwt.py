"""JWT token creation and decoding.

Token claims:
  - sub:            user ID
  - role:           user role string
  - permissions:    effective permission strings (access tokens only)
  - type:           "access" | "refresh"
  - iat / exp:      issue and expiry timestamps
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ALGORITHM = settings.jwt_algorithm


def _encode(claims: dict, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + lifetime}
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def create_access_token(
    user_id: str,
    role: str,
    permissions: list[str],
    expires_delta: timedelta | None = None,
) -> str:
    return _encode(
        {"sub": user_id, "role": role, "permissions": permissions, "type": "access"},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user_id: str, role: str) -> str:
    return _encode(
        {"sub": user_id, "role": role, "type": "refresh"},
        timedelta(days=settings.refresh_token_expire_days),
    )


def decode_token(token: str, expected_type: str | None = None) -> dict:
    """Decode and validate a JWT.

    Returns an empty dict when the signature or expiry is invalid, or
    when `expected_type` is given and the token is of another type.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
    if expected_type and payload.get("type") != expected_type:
        return {}
    return payload
