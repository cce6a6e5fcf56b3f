"""Per-request UI context (language + theme).

Resolved once per request and passed explicitly to the code that needs
it (validators, response builders). Resolution order for the language:

  1. `?lang=` query parameter
  2. the signed-in user's `preferred_language`
  3. the first supported tag in `Accept-Language`
  4. `settings.default_language`
"""

from dataclasses import dataclass

from fastapi import Depends, Request

from app.auth.deps import get_optional_user
from app.config import settings
from app.models.user import User

SUPPORTED_LANGUAGES = ("es", "en")
SUPPORTED_THEMES = ("light", "dark")


@dataclass(frozen=True)
class UIContext:
    language: str = "es"
    theme: str = "light"

    def __post_init__(self):
        if self.language not in SUPPORTED_LANGUAGES:
            object.__setattr__(self, "language", settings.default_language)
        if self.theme not in SUPPORTED_THEMES:
            object.__setattr__(self, "theme", "light")


def _language_from_header(header: str | None) -> str | None:
    if not header:
        return None
    for part in header.split(","):
        tag = part.split(";")[0].strip().lower()
        primary = tag.split("-")[0]
        if primary in SUPPORTED_LANGUAGES:
            return primary
    return None


def resolve_ui_context(
    query_lang: str | None,
    user: User | None,
    accept_language: str | None,
) -> UIContext:
    language = (
        (query_lang if query_lang in SUPPORTED_LANGUAGES else None)
        or (user.preferred_language if user else None)
        or _language_from_header(accept_language)
        or settings.default_language
    )
    theme = user.preferred_theme if user and user.preferred_theme else "light"
    return UIContext(language=language, theme=theme)


async def get_ui_context(
    request: Request,
    user: User | None = Depends(get_optional_user),
) -> UIContext:
    return resolve_ui_context(
        request.query_params.get("lang"),
        user,
        request.headers.get("accept-language"),
    )


def request_language(request: Request) -> str:
    """Language for responses built outside dependency injection (exception handlers)."""
    return resolve_ui_context(
        request.query_params.get("lang"),
        None,
        request.headers.get("accept-language"),
    ).language
