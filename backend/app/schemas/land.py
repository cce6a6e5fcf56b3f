"""Pydantic schemas for Land CRUD operations."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import LandType, ListingStatus
from app.schemas.validators import validate_no_xss
from app.schemas.wizard import (
    Coordinates,
    ImageMeta,
    LandAddress,
    LandCharacteristic,
    LandGeneralStep,
)


class LandCreate(LandGeneralStep):
    currency: str = Field("USD", min_length=3, max_length=3)
    location: str = Field(..., min_length=5, max_length=200)
    coordinates: Coordinates | None = None
    address: LandAddress | None = None
    access_roads: list[str] = Field(default_factory=list)
    nearby_landmarks: list[str] = Field(default_factory=list)
    images: list[ImageMeta] = Field(default_factory=list, max_length=15)
    aerial_images: list[ImageMeta] = Field(default_factory=list)
    document_images: list[ImageMeta] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    status: ListingStatus = ListingStatus.DRAFT
    language: str = Field("es", pattern=r"^(es|en)$")


class LandUpdate(BaseModel):
    name: str | None = Field(None, min_length=10, max_length=100)
    description: str | None = Field(None, min_length=50, max_length=2000)
    price: float | None = Field(None, gt=0, le=999_999_999)
    currency: str | None = Field(None, min_length=3, max_length=3)
    surface: float | None = Field(None, gt=0, le=999_999)
    land_type: LandType | None = None
    zoning: str | None = None
    utilities: list[str] | None = None
    characteristics: list[LandCharacteristic] | None = None
    location: str | None = Field(None, min_length=5, max_length=200)
    coordinates: Coordinates | None = None
    address: LandAddress | None = None
    access_roads: list[str] | None = None
    nearby_landmarks: list[str] | None = None
    images: list[ImageMeta] | None = Field(None, max_length=15)
    aerial_images: list[ImageMeta] | None = None
    document_images: list[ImageMeta] | None = None
    tags: list[str] | None = None
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    status: ListingStatus | None = None
    language: str | None = Field(None, pattern=r"^(es|en)$")

    @field_validator("name", "description")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return validate_no_xss(v)


class LandOut(BaseModel):
    id: str
    name: str
    description: str
    price: float
    currency: str
    surface: float
    land_type: str
    zoning: str | None
    utilities: list[str] | None
    characteristics: list[dict] | None
    location: str | None
    address: dict | None
    latitude: float | None
    longitude: float | None
    access_roads: list[str] | None
    nearby_landmarks: list[str] | None
    images: list[dict] | None
    aerial_images: list[dict] | None
    document_images: list[dict] | None
    tags: list[str] | None
    seo_title: str | None
    seo_description: str | None
    status: str
    language: str
    ai_generated: dict | None = None
    owner_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
