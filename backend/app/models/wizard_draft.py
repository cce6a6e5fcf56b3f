"""Saved, resumable wizard progress.

One row per draft. A user may keep several drafts per wizard type.
The row is deleted once its wizard is submitted successfully.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class WizardDraft(Base):
    __tablename__ = "wizard_drafts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    wizard_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(255))
    # Partial form data exactly as the client sent it (JSON blob)
    form_data: Mapped[dict] = mapped_column(JSON, default=dict)
    current_step: Mapped[int] = mapped_column(Integer, default=1)
    # {"1": true, "2": false, ...} - keys are strings once round-tripped through JSON
    step_progress: Mapped[dict] = mapped_column(JSON, default=dict)
    completion_percentage: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
