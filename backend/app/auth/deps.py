"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_user        → decode JWT, load user from DB, return User
  get_optional_user       → same, but None for anonymous requests
  require_permission(...) → restrict to specific granular permissions
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import decode_token
from app.auth.permissions import has_permission
from app.database import get_db
from app.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def _load_user(token: str, db: AsyncSession) -> User | None:
    payload = decode_token(token, expected_type="access")
    user_id: str | None = payload.get("sub")
    if not user_id:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None

    # Stash token payload for downstream deps
    user._token_payload = payload  # type: ignore[attr-defined]
    return user


# ── Core user dependency ────────────────────────────────────

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the JWT, load the user, and return it.

    Also stashes the decoded payload on the user object as `_token_payload`
    so downstream deps can read claims (permissions) without re-decoding.
    """
    user = await _load_user(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    token: str | None = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the user when a valid bearer token is present, else None."""
    if not token:
        return None
    return await _load_user(token, db)


# ── Permission-based access control ─────────────────────────

def user_permissions(user: User) -> list[str]:
    payload: dict = getattr(user, "_token_payload", {})
    return payload.get("permissions", [])


def require_permission(*perms: str):
    """Dependency factory - restrict to users who hold ALL listed permissions.

    Reads permissions from the JWT claims (embedded at login), so this is
    a zero-DB-hit check for the hot path.

    Usage:
        @router.post("/properties")
        async def create_property(user: User = Depends(require_permission("property.write"))):
            ...
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        held = user_permissions(user)
        missing = [p for p in perms if not has_permission(held, p)]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return _check
