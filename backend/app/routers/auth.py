"""Auth routes: register, login, refresh, me.

Route overview:
  POST /register  - public sign-up (role `user`), returns tokens
  POST /login     - email + password login
  POST /refresh   - exchange a refresh token for new access + refresh tokens
  GET  /me        - return the current user profile + permissions
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user
from app.auth.jwt import create_access_token, create_refresh_token, decode_token
from app.auth.password import hash_password, verify_password
from app.auth.permissions import resolve_permissions
from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def build_user_out(user: User, permissions: list[str]) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone=user.phone,
        role=user.role.value,
        is_active=user.is_active,
        bio=user.bio,
        avatar_url=user.avatar_url,
        permissions=permissions,
        preferred_language=user.preferred_language or "es",
        preferred_theme=user.preferred_theme or "light",
    )


def _build_token_response(user: User, permissions: list[str]) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(
            user_id=user.id,
            role=user.role.value,
            permissions=permissions,
        ),
        refresh_token=create_refresh_token(
            user_id=user.id,
            role=user.role.value,
        ),
        user=build_user_out(user, permissions),
    )


# ── POST /register ──────────────────────────────────────────

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Public sign-up. Admins promote accounts to `agent` from /api/users."""
    email = body.email.lower()
    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        full_name=body.full_name,
        phone=body.phone,
        role=UserRole.USER,
        preferred_language=body.preferred_language,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    permissions = resolve_permissions(user.role.value)
    return _build_token_response(user, permissions)


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Email + password login. Returns JWT with role and permissions."""
    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not user.hashed_password:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    permissions = resolve_permissions(user.role.value, user.custom_permissions)
    return _build_token_response(user, permissions)


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new access + refresh token pair."""
    payload = decode_token(body.refresh_token, expected_type="refresh")
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user_id = payload.get("sub")
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    # Re-resolve permissions (may have changed since last token)
    permissions = resolve_permissions(user.role.value, user.custom_permissions)
    return _build_token_response(user, permissions)


# ── GET /me ──────────────────────────────────────────────────

@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    """Return the current authenticated user's profile and permissions."""
    permissions = resolve_permissions(user.role.value, user.custom_permissions)
    return build_user_out(user, permissions)
