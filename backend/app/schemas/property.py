"""Pydantic schemas for Property CRUD operations."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import ListingStatus, PropertyType
from app.schemas.validators import validate_no_xss
from app.schemas.wizard import (
    Address,
    Coordinates,
    ImageMeta,
    PropertyCharacteristic,
    PropertyGeneralStep,
    VideoMeta,
)


class PropertyCreate(PropertyGeneralStep):
    """Direct dashboard create; location and media may be filled in later."""
    currency: str = Field("USD", min_length=3, max_length=3)
    coordinates: Coordinates | None = None
    address: Address | None = None
    images: list[ImageMeta] = Field(default_factory=list, max_length=20)
    videos: list[VideoMeta] = Field(default_factory=list, max_length=5)
    status: ListingStatus = ListingStatus.DRAFT
    language: str = Field("es", pattern=r"^(es|en)$")
    featured: bool = False


class PropertyUpdate(BaseModel):
    title: str | None = Field(None, min_length=10, max_length=100)
    description: str | None = Field(None, min_length=50, max_length=5000)
    price: float | None = Field(None, gt=0, le=999_999_999)
    currency: str | None = Field(None, min_length=3, max_length=3)
    surface: float | None = Field(None, gt=0, le=999_999)
    property_type: PropertyType | None = None
    bedrooms: int | None = Field(None, ge=0, le=50)
    bathrooms: int | None = Field(None, ge=0, le=50)
    characteristics: list[PropertyCharacteristic] | None = None
    coordinates: Coordinates | None = None
    address: Address | None = None
    images: list[ImageMeta] | None = Field(None, max_length=20)
    videos: list[VideoMeta] | None = Field(None, max_length=5)
    status: ListingStatus | None = None
    language: str | None = Field(None, pattern=r"^(es|en)$")
    featured: bool | None = None

    @field_validator("title", "description")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return validate_no_xss(v)


class PropertyOut(BaseModel):
    id: str
    title: str
    description: str
    price: float
    currency: str
    surface: float
    property_type: str
    bedrooms: int | None
    bathrooms: int | None
    characteristics: list[dict] | None
    address: dict | None
    latitude: float | None
    longitude: float | None
    images: list[dict] | None
    videos: list[dict] | None
    status: str
    language: str
    ai_generated: dict | None = None
    featured: bool
    owner_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
