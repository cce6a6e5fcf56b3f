from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.validators import validate_phone


class UserOut(BaseModel):
    id: str
    email: str
    full_name: str
    phone: str | None
    role: str
    is_active: bool
    bio: str | None = None
    avatar_url: str | None = None
    permissions: list[str]
    preferred_language: str = "es"
    preferred_theme: str = "light"

    model_config = {"from_attributes": True}


# ── Registration ────────────────────────────────────────────

class RegisterRequest(BaseModel):
    """Public sign-up. New accounts start with the `user` role."""
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=2, max_length=255)
    phone: str | None = None
    preferred_language: str = Field("es", pattern=r"^(es|en)$")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        return validate_phone(v)


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserOut


# ── Token refresh ────────────────────────────────────────────

class RefreshRequest(BaseModel):
    refresh_token: str
