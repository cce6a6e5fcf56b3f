"""Land routes.

Public (mounted at /api/lands):
  GET  /             - published lands, filtered + paginated (cached)
  GET  /{land_id}    - one published land (cached)

Dashboard (mounted at /api/dashboard/lands):
  GET / · POST / · GET/PATCH/DELETE /{land_id} · POST /{land_id}/publish
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, require_permission, user_permissions
from app.database import get_db
from app.models.land import Land
from app.models.user import User
from app.schemas.common import LandType, ListingStatus, PaginatedResponse
from app.schemas.land import LandCreate, LandOut, LandUpdate
from app.services import listings
from app.utils.cache import cached, mark_stale

router = APIRouter()
dashboard_router = APIRouter()

SORTS = {
    "newest": Land.created_at.desc(),
    "price_asc": Land.price.asc(),
    "price_desc": Land.price.desc(),
    "surface_desc": Land.surface.desc(),
}


# ── Public ───────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[LandOut])
@cached(ttl=300, prefix="lands")
async def list_lands(
    land_type: LandType | None = Query(None),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    min_surface: float | None = Query(None, ge=0),
    max_surface: float | None = Query(None, ge=0),
    location: str | None = Query(None, max_length=100),
    q: str | None = Query(None, max_length=100),
    sort: str = Query("newest", pattern="^(newest|price_asc|price_desc|surface_desc)$"),
    limit: int = Query(12, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    conditions = [Land.status == ListingStatus.PUBLISHED.value]
    if land_type:
        conditions.append(Land.land_type == land_type.value)
    if min_price is not None:
        conditions.append(Land.price >= min_price)
    if max_price is not None:
        conditions.append(Land.price <= max_price)
    if min_surface is not None:
        conditions.append(Land.surface >= min_surface)
    if max_surface is not None:
        conditions.append(Land.surface <= max_surface)
    if location:
        conditions.append(Land.location.icontains(location))
    if q:
        pattern = f"%{q.lower()}%"
        conditions.append(or_(
            func.lower(Land.name).like(pattern),
            func.lower(Land.description).like(pattern),
        ))

    total = await db.scalar(select(func.count(Land.id)).where(*conditions)) or 0
    result = await db.execute(
        select(Land).where(*conditions).order_by(SORTS[sort]).limit(limit).offset(offset)
    )
    items_out = [LandOut.model_validate(land) for land in result.scalars().all()]

    return PaginatedResponse(items=items_out, total=total, limit=limit, offset=offset)


@router.get("/{land_id}", response_model=LandOut)
@cached(ttl=300, prefix="lands")
async def get_land(
    land_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Land).where(Land.id == land_id, Land.status == ListingStatus.PUBLISHED.value)
    )
    land = result.scalar_one_or_none()
    if not land:
        raise HTTPException(status_code=404, detail="Land not found")
    return LandOut.model_validate(land)


# ── Dashboard ────────────────────────────────────────────────

async def _get_modifiable(db: AsyncSession, user: User, land_id: str) -> Land:
    result = await db.execute(select(Land).where(Land.id == land_id))
    land = result.scalar_one_or_none()
    if not land:
        raise HTTPException(status_code=404, detail="Land not found")
    if not listings.can_modify(user, land, "land.manage", user_permissions(user)):
        raise HTTPException(status_code=403, detail="Not allowed to modify this land")
    return land


def _check_publish(user: User, new_status) -> None:
    if new_status == ListingStatus.PUBLISHED and "land.publish" not in user_permissions(user):
        raise HTTPException(status_code=403, detail="Missing permissions: land.publish")


@dashboard_router.get("/", response_model=PaginatedResponse[LandOut])
async def list_my_lands(
    status_filter: ListingStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conditions = []
    if "land.manage" not in user_permissions(user):
        conditions.append(Land.owner_id == user.id)
    if status_filter:
        conditions.append(Land.status == status_filter.value)

    total = await db.scalar(select(func.count(Land.id)).where(*conditions)) or 0
    result = await db.execute(
        select(Land).where(*conditions)
        .order_by(Land.updated_at.desc()).limit(limit).offset(offset)
    )
    items_out = [LandOut.model_validate(land) for land in result.scalars().all()]
    return PaginatedResponse(items=items_out, total=total, limit=limit, offset=offset)


@dashboard_router.post("/", response_model=LandOut, status_code=status.HTTP_201_CREATED)
async def create_land(
    body: LandCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("land.write")),
):
    _check_publish(user, body.status)
    land = await listings.create_land(db, user, body.model_dump(mode="json"))
    await db.refresh(land)
    return LandOut.model_validate(land)


@dashboard_router.get("/{land_id}", response_model=LandOut)
async def get_my_land(
    land_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    land = await _get_modifiable(db, user, land_id)
    return LandOut.model_validate(land)


@dashboard_router.patch("/{land_id}", response_model=LandOut)
async def update_land(
    land_id: str,
    body: LandUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("land.write")),
):
    land = await _get_modifiable(db, user, land_id)
    _check_publish(user, body.status)
    updates = body.model_dump(mode="json", exclude_unset=True)
    land = await listings.apply_updates(db, land, updates, "lands")
    return LandOut.model_validate(land)


@dashboard_router.delete("/{land_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_land(
    land_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("land.write")),
):
    land = await _get_modifiable(db, user, land_id)
    await db.delete(land)
    await db.flush()
    mark_stale(db, "lands:*")


@dashboard_router.post("/{land_id}/publish", response_model=LandOut)
async def publish_land(
    land_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("land.publish")),
):
    land = await _get_modifiable(db, user, land_id)
    land = await listings.apply_updates(db, land, {"status": ListingStatus.PUBLISHED.value}, "lands")
    return LandOut.model_validate(land)
