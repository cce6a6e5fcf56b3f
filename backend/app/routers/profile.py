"""Own-profile routes.

  GET   /           - current user's profile
  PATCH /           - update name, phone, bio, avatar, UI preferences
  POST  /password   - change password (requires the current one)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user
from app.auth.password import hash_password, verify_password
from app.auth.permissions import resolve_permissions
from app.database import get_db
from app.models.user import User
from app.routers.auth import build_user_out
from app.schemas.auth import UserOut
from app.schemas.user import PasswordChange, ProfileUpdate

logger = logging.getLogger("brymar.profile")

router = APIRouter()


@router.get("/", response_model=UserOut)
async def get_profile(user: User = Depends(get_current_user)):
    permissions = resolve_permissions(user.role.value, user.custom_permissions)
    return build_user_out(user, permissions)


@router.patch("/", response_model=UserOut)
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    updates = body.model_dump(exclude_unset=True)
    for key, value in updates.items():
        setattr(user, key, value)

    await db.flush()
    await db.refresh(user)
    permissions = resolve_permissions(user.role.value, user.custom_permissions)
    return build_user_out(user, permissions)


@router.post("/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    body: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(body.current_password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.hashed_password = hash_password(body.new_password)
    await db.flush()
    logger.info(f"Password changed for user {user.id}")
