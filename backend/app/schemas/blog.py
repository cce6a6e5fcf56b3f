"""Pydantic schemas for blog posts."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import BlogCategory, BlogStatus
from app.schemas.validators import validate_no_xss
from app.schemas.wizard import BlogContentStep, ImageMeta


class BlogPostCreate(BlogContentStep):
    """Direct dashboard create; shares the wizard content step's checks."""
    category: BlogCategory = BlogCategory.GENERAL
    slug: str | None = Field(None, pattern=r"^[a-z0-9-]+$", max_length=220)
    tags: list[str] = Field(default_factory=list)
    cover_image: str | None = None
    images: list[ImageMeta] = Field(default_factory=list)
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    status: BlogStatus = BlogStatus.DRAFT


class BlogPostUpdate(BaseModel):
    title: str | None = Field(None, min_length=5, max_length=200)
    content: str | None = Field(None, min_length=50, max_length=10000)
    category: BlogCategory | None = None
    excerpt: str | None = Field(None, max_length=500)
    slug: str | None = Field(None, pattern=r"^[a-z0-9-]+$", max_length=220)
    tags: list[str] | None = None
    cover_image: str | None = None
    images: list[ImageMeta] | None = None
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    status: BlogStatus | None = None

    @field_validator("title", "excerpt")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return validate_no_xss(v)


class BlogPostOut(BaseModel):
    id: str
    title: str
    slug: str
    content: str
    excerpt: str | None
    category: str
    tags: list[str] | None
    cover_image: str | None
    images: list[dict] | None
    seo_title: str | None
    seo_description: str | None
    read_time: int
    status: str
    published_at: datetime | None
    author_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
