"""Create / update helpers for properties, lands and blog posts.

Shared by the dashboard CRUD routes and by wizard submission so both
paths build records the same way. Functions add to the session, flush
and mark the public cache stale; the request's session dependency owns
the commit and the invalidation that follows it.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime

from slugify import slugify
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.blog_post import BlogPost
from app.models.land import Land
from app.models.property import Property
from app.models.user import User
from app.utils.cache import mark_stale

logger = logging.getLogger("brymar.listings")

WORDS_PER_MINUTE = 200


def read_time_minutes(content: str) -> int:
    words = len((content or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


async def unique_slug(db: AsyncSession, title: str, *, exclude_id: str | None = None) -> str:
    """Slugify `title`; append -2, -3, ... until no other post uses it."""
    base = slugify(title) or "post"
    candidate = base
    suffix = 2
    while True:
        stmt = select(BlogPost.id).where(BlogPost.slug == candidate)
        if exclude_id is not None:
            stmt = stmt.where(BlogPost.id != exclude_id)
        if (await db.execute(stmt.limit(1))).scalar_one_or_none() is None:
            return candidate
        candidate = f"{base}-{suffix}"
        suffix += 1


# ── Create ───────────────────────────────────────────────────

async def create_property(db: AsyncSession, owner: User, data: dict) -> Property:
    data = dict(data)
    coords = data.pop("coordinates", None) or {}
    data.setdefault("latitude", coords.get("latitude"))
    data.setdefault("longitude", coords.get("longitude"))

    prop = Property(owner_id=owner.id, **data)
    db.add(prop)
    await db.flush()
    mark_stale(db, "properties:*")
    logger.info(f"Property {prop.id} created by {owner.id}")
    return prop


async def create_land(db: AsyncSession, owner: User, data: dict) -> Land:
    data = dict(data)
    coords = data.pop("coordinates", None) or {}
    data.setdefault("latitude", coords.get("latitude"))
    data.setdefault("longitude", coords.get("longitude"))

    land = Land(owner_id=owner.id, **data)
    db.add(land)
    await db.flush()
    mark_stale(db, "lands:*")
    logger.info(f"Land {land.id} created by {owner.id}")
    return land


async def create_blog_post(db: AsyncSession, author: User, data: dict) -> BlogPost:
    data = dict(data)
    slug = data.pop("slug", None) or data["title"]
    data["slug"] = await unique_slug(db, slug)
    data["read_time"] = read_time_minutes(data.get("content", ""))
    if not data.get("excerpt"):
        data["excerpt"] = (data.get("content") or "")[:200].strip() or None
    if data.get("status") == "published":
        data["published_at"] = datetime.utcnow()

    post = BlogPost(author_id=author.id, **data)
    db.add(post)
    await db.flush()
    mark_stale(db, "blog:*")
    logger.info(f"Blog post {post.id} ({post.slug}) created by {author.id}")
    return post


# ── Update ───────────────────────────────────────────────────

async def apply_updates(db: AsyncSession, record, updates: dict, cache_prefix: str):
    """Set each key of `updates` on `record`, flush, and invalidate caches."""
    updates = dict(updates)
    coords = updates.pop("coordinates", None)
    if coords:
        updates["latitude"] = coords.get("latitude")
        updates["longitude"] = coords.get("longitude")

    if isinstance(record, BlogPost):
        if "slug" in updates and updates["slug"]:
            updates["slug"] = await unique_slug(db, updates["slug"], exclude_id=record.id)
        if "content" in updates and updates["content"]:
            updates["read_time"] = read_time_minutes(updates["content"])
        if updates.get("status") == "published" and record.published_at is None:
            updates["published_at"] = datetime.utcnow()

    for key, value in updates.items():
        setattr(record, key, value)

    await db.flush()
    await db.refresh(record)
    mark_stale(db, f"{cache_prefix}:*")
    return record


def can_modify(user: User, record, manage_permission: str, permissions: list[str]) -> bool:
    """Owners may modify their own records; `*.manage` holders may modify any."""
    owner_id = getattr(record, "owner_id", None) or getattr(record, "author_id", None)
    return owner_id == user.id or manage_permission in permissions
