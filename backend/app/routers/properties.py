"""Property routes.

Public (mounted at /api/properties):
  GET  /                 - published properties, filtered + paginated (cached)
  GET  /{property_id}    - one published property (cached)

Dashboard (mounted at /api/dashboard/properties):
  GET    /                      - own properties (all with property.manage)
  POST   /                      - create
  GET    /{property_id}
  PATCH  /{property_id}
  DELETE /{property_id}
  POST   /{property_id}/publish
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, require_permission, user_permissions
from app.database import get_db
from app.models.property import Property
from app.models.user import User
from app.schemas.common import ListingStatus, PaginatedResponse, PropertyType
from app.schemas.property import PropertyCreate, PropertyOut, PropertyUpdate
from app.services import listings
from app.utils.cache import cached, mark_stale

router = APIRouter()
dashboard_router = APIRouter()

SORTS = {
    "newest": Property.created_at.desc(),
    "price_asc": Property.price.asc(),
    "price_desc": Property.price.desc(),
    "surface_desc": Property.surface.desc(),
}


# ── Public ───────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[PropertyOut])
@cached(ttl=300, prefix="properties")
async def list_properties(
    property_type: PropertyType | None = Query(None),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    min_surface: float | None = Query(None, ge=0),
    max_surface: float | None = Query(None, ge=0),
    bedrooms: int | None = Query(None, ge=0, description="Minimum bedrooms"),
    city: str | None = Query(None, max_length=100),
    province: str | None = Query(None, max_length=100),
    q: str | None = Query(None, max_length=100),
    featured: bool | None = Query(None),
    sort: str = Query("newest", pattern="^(newest|price_asc|price_desc|surface_desc)$"),
    limit: int = Query(12, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    conditions = [Property.status == ListingStatus.PUBLISHED.value]
    if property_type:
        conditions.append(Property.property_type == property_type.value)
    if min_price is not None:
        conditions.append(Property.price >= min_price)
    if max_price is not None:
        conditions.append(Property.price <= max_price)
    if min_surface is not None:
        conditions.append(Property.surface >= min_surface)
    if max_surface is not None:
        conditions.append(Property.surface <= max_surface)
    if bedrooms is not None:
        conditions.append(Property.bedrooms >= bedrooms)
    if city:
        conditions.append(Property.address["city"].as_string().icontains(city))
    if province:
        conditions.append(Property.address["province"].as_string().icontains(province))
    if q:
        pattern = f"%{q.lower()}%"
        conditions.append(or_(
            func.lower(Property.title).like(pattern),
            func.lower(Property.description).like(pattern),
        ))
    if featured is not None:
        conditions.append(Property.featured == featured)

    total = await db.scalar(select(func.count(Property.id)).where(*conditions)) or 0
    result = await db.execute(
        select(Property).where(*conditions).order_by(SORTS[sort]).limit(limit).offset(offset)
    )
    items_out = [PropertyOut.model_validate(p) for p in result.scalars().all()]

    return PaginatedResponse(items=items_out, total=total, limit=limit, offset=offset)


@router.get("/{property_id}", response_model=PropertyOut)
@cached(ttl=300, prefix="properties")
async def get_property(
    property_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Property).where(
            Property.id == property_id,
            Property.status == ListingStatus.PUBLISHED.value,
        )
    )
    prop = result.scalar_one_or_none()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return PropertyOut.model_validate(prop)


# ── Dashboard ────────────────────────────────────────────────

async def _get_modifiable(db: AsyncSession, user: User, property_id: str) -> Property:
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    if not listings.can_modify(user, prop, "property.manage", user_permissions(user)):
        raise HTTPException(status_code=403, detail="Not allowed to modify this property")
    return prop


def _check_publish(user: User, new_status) -> None:
    if new_status == ListingStatus.PUBLISHED and "property.publish" not in user_permissions(user):
        raise HTTPException(status_code=403, detail="Missing permissions: property.publish")


@dashboard_router.get("/", response_model=PaginatedResponse[PropertyOut])
async def list_my_properties(
    status_filter: ListingStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conditions = []
    if "property.manage" not in user_permissions(user):
        conditions.append(Property.owner_id == user.id)
    if status_filter:
        conditions.append(Property.status == status_filter.value)

    total = await db.scalar(select(func.count(Property.id)).where(*conditions)) or 0
    result = await db.execute(
        select(Property).where(*conditions)
        .order_by(Property.updated_at.desc()).limit(limit).offset(offset)
    )
    items_out = [PropertyOut.model_validate(p) for p in result.scalars().all()]
    return PaginatedResponse(items=items_out, total=total, limit=limit, offset=offset)


@dashboard_router.post("/", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("property.write")),
):
    _check_publish(user, body.status)
    prop = await listings.create_property(db, user, body.model_dump(mode="json"))
    await db.refresh(prop)
    return PropertyOut.model_validate(prop)


@dashboard_router.get("/{property_id}", response_model=PropertyOut)
async def get_my_property(
    property_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prop = await _get_modifiable(db, user, property_id)
    return PropertyOut.model_validate(prop)


@dashboard_router.patch("/{property_id}", response_model=PropertyOut)
async def update_property(
    property_id: str,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("property.write")),
):
    prop = await _get_modifiable(db, user, property_id)
    _check_publish(user, body.status)
    updates = body.model_dump(mode="json", exclude_unset=True)
    prop = await listings.apply_updates(db, prop, updates, "properties")
    return PropertyOut.model_validate(prop)


@dashboard_router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("property.write")),
):
    prop = await _get_modifiable(db, user, property_id)
    await db.delete(prop)
    await db.flush()
    mark_stale(db, "properties:*")


@dashboard_router.post("/{property_id}/publish", response_model=PropertyOut)
async def publish_property(
    property_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("property.publish")),
):
    prop = await _get_modifiable(db, user, property_id)
    prop = await listings.apply_updates(db, prop, {"status": ListingStatus.PUBLISHED.value}, "properties")
    return PropertyOut.model_validate(prop)
