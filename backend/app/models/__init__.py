"""Aggregate model imports for Alembic auto-detection."""

from app.models.user import User, UserRole  # noqa: F401
from app.models.property import Property  # noqa: F401
from app.models.land import Land  # noqa: F401
from app.models.blog_post import BlogPost  # noqa: F401
from app.models.wizard_draft import WizardDraft  # noqa: F401
