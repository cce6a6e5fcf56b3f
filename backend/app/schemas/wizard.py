"""Pydantic schemas for the listing wizards (property, land, blog).

Each wizard step has one model holding that step's fields with their
full constraints. A step validates by feeding the whole accumulated
form data to its model (other steps' keys are ignored), so the same
models serve per-step validation and final submission.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import BlogCategory, LandType, PropertyType, WizardType
from app.schemas.validators import validate_no_xss

MAX_IMAGE_BYTES = 10 * 1024 * 1024
MAX_VIDEO_BYTES = 100 * 1024 * 1024

# Dominican Republic bounds
DR_LAT_MIN, DR_LAT_MAX = 17.5, 19.9
DR_LNG_MIN, DR_LNG_MAX = -72.0, -68.3


# ── Shared building blocks ──────────────────────────────────

class Coordinates(BaseModel):
    latitude: float = Field(ge=DR_LAT_MIN, le=DR_LAT_MAX)
    longitude: float = Field(ge=DR_LNG_MIN, le=DR_LNG_MAX)


class Address(BaseModel):
    street: str = Field(min_length=5)
    city: str = Field(min_length=2)
    province: str = Field(min_length=2)
    postal_code: str | None = None
    country: str = "Dominican Republic"
    formatted_address: str | None = None


class LandAddress(BaseModel):
    street: str | None = None
    city: str = Field(min_length=2)
    province: str = Field(min_length=2)
    postal_code: str | None = None
    country: str = "Dominican Republic"
    formatted_address: str | None = None


class ImageMeta(BaseModel):
    id: str
    url: str = Field(min_length=1)
    filename: str = Field(min_length=1)
    size: int = Field(gt=0, le=MAX_IMAGE_BYTES)
    content_type: Literal["image/jpeg", "image/jpg", "image/png", "image/webp"]
    width: int | None = None
    height: int | None = None
    display_order: int = Field(0, ge=0)


class VideoMeta(BaseModel):
    id: str
    url: str = Field(min_length=1)
    filename: str = Field(min_length=1)
    size: int = Field(gt=0, le=MAX_VIDEO_BYTES)
    content_type: Literal["video/mp4", "video/webm", "video/ogg"]
    duration: float | None = None
    display_order: int = Field(0, ge=0)


class PropertyCharacteristic(BaseModel):
    id: str
    name: str = Field(min_length=1)
    category: Literal["amenity", "feature", "location"]
    selected: bool = True


class LandCharacteristic(BaseModel):
    id: str
    name: str = Field(min_length=1)
    category: Literal["zoning", "utilities", "access", "features"]
    selected: bool = True


class PropertyAIFlags(BaseModel):
    title: bool = False
    description: bool = False
    tags: bool = False


class LandAIFlags(BaseModel):
    name: bool = False
    description: bool = False
    characteristics: bool = False


# ── Property wizard ─────────────────────────────────────────

class PropertyGeneralStep(BaseModel):
    title: str = Field(min_length=10, max_length=100)
    description: str = Field(min_length=50, max_length=5000)
    price: float = Field(gt=0, le=999_999_999)
    surface: float = Field(gt=0, le=999_999)
    property_type: PropertyType
    bedrooms: int | None = Field(None, ge=0, le=50)
    bathrooms: int | None = Field(None, ge=0, le=50)
    characteristics: list[PropertyCharacteristic] = Field(min_length=1)

    @field_validator("title", "description")
    @classmethod
    def _text(cls, v: str) -> str:
        return validate_no_xss(v)


class PropertyLocationStep(BaseModel):
    coordinates: Coordinates
    address: Address


class PropertyMediaStep(BaseModel):
    images: list[ImageMeta] = Field(min_length=1, max_length=20)
    videos: list[VideoMeta] = Field(default_factory=list, max_length=5)


class PropertyPreviewStep(BaseModel):
    status: Literal["draft", "published"] = "draft"
    language: Literal["es", "en"] = "es"
    ai_generated: PropertyAIFlags = Field(default_factory=PropertyAIFlags)


# ── Land wizard ─────────────────────────────────────────────

class LandGeneralStep(BaseModel):
    name: str = Field(min_length=10, max_length=100)
    description: str = Field(min_length=50, max_length=2000)
    price: float = Field(gt=0, le=999_999_999)
    surface: float = Field(gt=0, le=999_999)
    land_type: LandType
    zoning: str | None = None
    utilities: list[str] = Field(default_factory=list)
    characteristics: list[LandCharacteristic] = Field(min_length=1)

    @field_validator("name", "description")
    @classmethod
    def _text(cls, v: str) -> str:
        return validate_no_xss(v)


class LandLocationStep(BaseModel):
    location: str = Field(min_length=5, max_length=200)
    coordinates: Coordinates | None = None
    address: LandAddress | None = None
    access_roads: list[str] = Field(default_factory=list)
    nearby_landmarks: list[str] = Field(default_factory=list)


class LandMediaStep(BaseModel):
    images: list[ImageMeta] = Field(min_length=1, max_length=15)
    aerial_images: list[ImageMeta] = Field(default_factory=list)
    document_images: list[ImageMeta] = Field(default_factory=list)


class LandPreviewStep(BaseModel):
    status: Literal["draft", "published"] = "draft"
    language: Literal["es", "en"] = "es"
    ai_generated: LandAIFlags = Field(default_factory=LandAIFlags)
    tags: list[str] = Field(default_factory=list)
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)


# ── Blog wizard ─────────────────────────────────────────────

class BlogContentStep(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    content: str = Field(min_length=50, max_length=10000)
    category: BlogCategory
    excerpt: str | None = Field(None, max_length=500)

    @field_validator("title", "excerpt")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return validate_no_xss(v)


class BlogMediaStep(BaseModel):
    cover_image: str | None = None
    images: list[ImageMeta] = Field(default_factory=list)


class BlogSeoStep(BaseModel):
    slug: str | None = Field(None, pattern=r"^[a-z0-9-]+$", max_length=220)
    seo_title: str | None = Field(None, max_length=60)
    seo_description: str | None = Field(None, max_length=160)
    tags: list[str] = Field(default_factory=list)


class BlogPreviewStep(BaseModel):
    status: Literal["draft", "published"] = "draft"


# ── Wizard state / progress ─────────────────────────────────

class WizardStateOut(BaseModel):
    wizard_type: WizardType
    current_step: int
    total_steps: int
    form_data: dict
    is_valid: dict[int, bool]
    is_dirty: bool
    is_loading: bool = False
    errors: dict[str, str]
    completion_percentage: int
    step_progress: dict[int, bool]


class WizardValidateRequest(BaseModel):
    step: int
    form_data: dict = Field(default_factory=dict)


# ── Drafts ──────────────────────────────────────────────────

class DraftSaveRequest(BaseModel):
    draft_id: str | None = None
    form_data: dict = Field(default_factory=dict)
    current_step: int = 1


class DraftSaved(BaseModel):
    draft_id: str
    message: str


class DraftSummary(BaseModel):
    id: str
    wizard_type: WizardType
    title: str | None
    current_step: int
    step_progress: dict[str, bool]
    completion_percentage: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DraftOut(DraftSummary):
    form_data: dict


# ── Submission ──────────────────────────────────────────────

class SubmitRequest(BaseModel):
    form_data: dict = Field(default_factory=dict)
    draft_id: str | None = None
    # Set when editing an existing listing through the wizard
    record_id: str | None = None


class SubmitResponse(BaseModel):
    id: str
    wizard_type: WizardType
    status: str
    message: str
    created: bool = True


class WizardRecordOut(BaseModel):
    """An existing listing laid out as wizard form data, ready to edit."""
    record_id: str
    wizard_type: WizardType
    form_data: dict
    completion_percentage: int
    step_progress: dict[int, bool]


# ── AI copy generation ──────────────────────────────────────

class GenerateRequest(BaseModel):
    field: Literal["title", "description", "tags"]
    form_data: dict = Field(default_factory=dict)


class GenerateResponse(BaseModel):
    field: str
    value: str | list[str] | None
    generated: bool
