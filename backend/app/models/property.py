"""Residential / commercial property listings.

Created either directly from the dashboard or by submitting a
completed property wizard.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    surface: Mapped[float] = mapped_column(Float, nullable=False)  # m²
    property_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer)
    bathrooms: Mapped[int | None] = mapped_column(Integer)

    # JSON array: [{"id": "pool", "name": "Piscina", "category": "amenity", "selected": true}, ...]
    characteristics: Mapped[list | None] = mapped_column(JSON, default=list)

    # Location
    # JSON: {"street", "city", "province", "postal_code", "country", "formatted_address"}
    address: Mapped[dict | None] = mapped_column(JSON, default=None)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)

    # Media - JSON arrays of image/video metadata with public URLs
    images: Mapped[list | None] = mapped_column(JSON, default=list)
    videos: Mapped[list | None] = mapped_column(JSON, default=list)

    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)
    language: Mapped[str] = mapped_column(String(5), default="es")
    ai_generated: Mapped[dict | None] = mapped_column(JSON, default=dict)
    featured: Mapped[bool] = mapped_column(Boolean, default=False)

    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
