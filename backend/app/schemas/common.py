"""Common schemas and enums used across the application."""

import enum
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper.

    Usage:
        response_model=PaginatedResponse[PropertyOut]

    Returns:
        {
            "items": [...],
            "total": 150,
            "limit": 12,
            "offset": 0
        }
    """
    items: list[T]
    total: int
    limit: int
    offset: int


# ── Listing enums ────────────────────────────────────────────

class WizardType(str, enum.Enum):
    PROPERTY = "property"
    LAND = "land"
    BLOG = "blog"


class PropertyType(str, enum.Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    VILLA = "villa"
    COMMERCIAL = "commercial"
    LAND = "land"


class LandType(str, enum.Enum):
    COMMERCIAL = "commercial"
    RESIDENTIAL = "residential"
    AGRICULTURAL = "agricultural"
    BEACHFRONT = "beachfront"


class ListingStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SOLD = "sold"
    RENTED = "rented"
    WITHDRAWN = "withdrawn"
    ARCHIVED = "archived"


class BlogCategory(str, enum.Enum):
    PROPERTY_NEWS = "property-news"
    MARKET_ANALYSIS = "market-analysis"
    INVESTMENT_TIPS = "investment-tips"
    LEGAL_ADVICE = "legal-advice"
    HOME_IMPROVEMENT = "home-improvement"
    GENERAL = "general"


class BlogStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
