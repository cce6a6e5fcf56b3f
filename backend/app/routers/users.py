"""Admin user management.

Endpoints:
    GET    /api/users              List users (paginated, optional role filter)
    PATCH  /api/users/{user_id}    Change role, active flag or permission overrides
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_permission
from app.auth.permissions import ALL_PERMISSIONS, resolve_permissions
from app.database import get_db
from app.models.user import User, UserRole
from app.routers.auth import build_user_out
from app.schemas.auth import UserOut
from app.schemas.common import PaginatedResponse
from app.schemas.user import UserAdminUpdate

logger = logging.getLogger("brymar.users")

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[UserOut])
async def list_users(
    role: UserRole | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_permission("users.manage")),
):
    conditions = []
    if role is not None:
        conditions.append(User.role == role)

    total = await db.scalar(select(func.count(User.id)).where(*conditions)) or 0
    result = await db.execute(
        select(User).where(*conditions).order_by(User.created_at.desc()).limit(limit).offset(offset)
    )
    items = [
        build_user_out(u, resolve_permissions(u.role.value, u.custom_permissions))
        for u in result.scalars().all()
    ]
    return PaginatedResponse(items=items, total=total, limit=limit, offset=offset)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    body: UserAdminUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_permission("users.manage")),
):
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    updates = body.model_dump(exclude_unset=True)
    if user.id == admin.id and (updates.get("is_active") is False or updates.get("role") not in (None, UserRole.ADMIN)):
        raise HTTPException(status_code=400, detail="You cannot demote or deactivate yourself")

    overrides = updates.get("custom_permissions")
    if overrides:
        unknown = sorted(set(overrides) - ALL_PERMISSIONS)
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown permissions: {', '.join(unknown)}")

    for key, value in updates.items():
        setattr(user, key, value)

    await db.flush()
    await db.refresh(user)
    logger.info(f"User {user.id} updated by {admin.id}: {sorted(updates)}")
    return build_user_out(user, resolve_permissions(user.role.value, user.custom_permissions))
