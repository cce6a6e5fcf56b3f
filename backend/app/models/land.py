"""Land / lot listings (commercial, residential, agricultural, beachfront)."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Land(Base):
    __tablename__ = "lands"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    surface: Mapped[float] = mapped_column(Float, nullable=False)  # m²
    land_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    zoning: Mapped[str | None] = mapped_column(String(100))
    utilities: Mapped[list | None] = mapped_column(JSON, default=list)
    characteristics: Mapped[list | None] = mapped_column(JSON, default=list)

    # Location
    location: Mapped[str | None] = mapped_column(String(200))
    address: Mapped[dict | None] = mapped_column(JSON, default=None)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    access_roads: Mapped[list | None] = mapped_column(JSON, default=list)
    nearby_landmarks: Mapped[list | None] = mapped_column(JSON, default=list)

    # Media
    images: Mapped[list | None] = mapped_column(JSON, default=list)
    aerial_images: Mapped[list | None] = mapped_column(JSON, default=list)
    document_images: Mapped[list | None] = mapped_column(JSON, default=list)

    # Publishing / SEO
    tags: Mapped[list | None] = mapped_column(JSON, default=list)
    seo_title: Mapped[str | None] = mapped_column(String(60))
    seo_description: Mapped[str | None] = mapped_column(String(160))
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)
    language: Mapped[str] = mapped_column(String(5), default="es")
    ai_generated: Mapped[dict | None] = mapped_column(JSON, default=dict)

    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
