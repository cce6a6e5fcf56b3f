"""Blog routes.

Public (mounted at /api/blog):
  GET  /          - published posts, newest first (cached)
  GET  /{slug}    - one published post by slug (cached)

Dashboard (mounted at /api/dashboard/blog):
  GET / · POST / · GET/PATCH/DELETE /{post_id} · POST /{post_id}/publish
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, require_permission, user_permissions
from app.database import get_db
from app.models.blog_post import BlogPost
from app.models.user import User
from app.schemas.blog import BlogPostCreate, BlogPostOut, BlogPostUpdate
from app.schemas.common import BlogCategory, BlogStatus, PaginatedResponse
from app.services import listings
from app.utils.cache import cached, mark_stale

router = APIRouter()
dashboard_router = APIRouter()


# ── Public ───────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[BlogPostOut])
@cached(ttl=300, prefix="blog")
async def list_posts(
    category: BlogCategory | None = Query(None),
    q: str | None = Query(None, max_length=100),
    limit: int = Query(10, ge=1, le=50),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    conditions = [BlogPost.status == BlogStatus.PUBLISHED.value]
    if category:
        conditions.append(BlogPost.category == category.value)
    if q:
        pattern = f"%{q.lower()}%"
        conditions.append(or_(
            func.lower(BlogPost.title).like(pattern),
            func.lower(BlogPost.content).like(pattern),
        ))

    total = await db.scalar(select(func.count(BlogPost.id)).where(*conditions)) or 0
    result = await db.execute(
        select(BlogPost).where(*conditions)
        .order_by(BlogPost.published_at.desc()).limit(limit).offset(offset)
    )
    items_out = [BlogPostOut.model_validate(p) for p in result.scalars().all()]
    return PaginatedResponse(items=items_out, total=total, limit=limit, offset=offset)


@router.get("/{slug}", response_model=BlogPostOut)
@cached(ttl=300, prefix="blog")
async def get_post(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(BlogPost).where(
            BlogPost.slug == slug,
            BlogPost.status == BlogStatus.PUBLISHED.value,
        )
    )
    post = result.scalar_one_or_none()
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return BlogPostOut.model_validate(post)


# ── Dashboard ────────────────────────────────────────────────

async def _get_modifiable(db: AsyncSession, user: User, post_id: str) -> BlogPost:
    result = await db.execute(select(BlogPost).where(BlogPost.id == post_id))
    post = result.scalar_one_or_none()
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    if not listings.can_modify(user, post, "blog.manage", user_permissions(user)):
        raise HTTPException(status_code=403, detail="Not allowed to modify this post")
    return post


def _check_publish(user: User, new_status) -> None:
    if new_status == BlogStatus.PUBLISHED and "blog.publish" not in user_permissions(user):
        raise HTTPException(status_code=403, detail="Missing permissions: blog.publish")


@dashboard_router.get("/", response_model=PaginatedResponse[BlogPostOut])
async def list_my_posts(
    status_filter: BlogStatus | None = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conditions = []
    if "blog.manage" not in user_permissions(user):
        conditions.append(BlogPost.author_id == user.id)
    if status_filter:
        conditions.append(BlogPost.status == status_filter.value)

    total = await db.scalar(select(func.count(BlogPost.id)).where(*conditions)) or 0
    result = await db.execute(
        select(BlogPost).where(*conditions)
        .order_by(BlogPost.updated_at.desc()).limit(limit).offset(offset)
    )
    items_out = [BlogPostOut.model_validate(p) for p in result.scalars().all()]
    return PaginatedResponse(items=items_out, total=total, limit=limit, offset=offset)


@dashboard_router.post("/", response_model=BlogPostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: BlogPostCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("blog.write")),
):
    _check_publish(user, body.status)
    post = await listings.create_blog_post(db, user, body.model_dump(mode="json"))
    await db.refresh(post)
    return BlogPostOut.model_validate(post)


@dashboard_router.get("/{post_id}", response_model=BlogPostOut)
async def get_my_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    post = await _get_modifiable(db, user, post_id)
    return BlogPostOut.model_validate(post)


@dashboard_router.patch("/{post_id}", response_model=BlogPostOut)
async def update_post(
    post_id: str,
    body: BlogPostUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("blog.write")),
):
    post = await _get_modifiable(db, user, post_id)
    _check_publish(user, body.status)
    updates = body.model_dump(mode="json", exclude_unset=True)
    post = await listings.apply_updates(db, post, updates, "blog")
    return BlogPostOut.model_validate(post)


@dashboard_router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("blog.write")),
):
    post = await _get_modifiable(db, user, post_id)
    await db.delete(post)
    await db.flush()
    mark_stale(db, "blog:*")


@dashboard_router.post("/{post_id}/publish", response_model=BlogPostOut)
async def publish_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("blog.publish")),
):
    post = await _get_modifiable(db, user, post_id)
    post = await listings.apply_updates(db, post, {"status": BlogStatus.PUBLISHED.value}, "blog")
    return BlogPostOut.model_validate(post)
