from pydantic import BaseModel, Field, field_validator

from app.models.user import UserRole
from app.schemas.validators import validate_no_xss, validate_phone, validate_url


# ── Own profile ─────────────────────────────────────────────

class ProfileUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=2, max_length=255)
    phone: str | None = None
    bio: str | None = Field(None, max_length=2000)
    avatar_url: str | None = None
    preferred_language: str | None = Field(None, pattern=r"^(es|en)$")
    preferred_theme: str | None = Field(None, pattern=r"^(light|dark)$")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return validate_phone(v)

    @field_validator("avatar_url")
    @classmethod
    def _avatar(cls, v: str | None) -> str | None:
        return validate_url(v)

    @field_validator("full_name", "bio")
    @classmethod
    def _text(cls, v: str | None) -> str | None:
        return validate_no_xss(v)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)


# ── Admin user management ───────────────────────────────────

class UserAdminUpdate(BaseModel):
    role: UserRole | None = None
    is_active: bool | None = None
    custom_permissions: dict[str, bool] | None = None
