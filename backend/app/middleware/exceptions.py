"""Application exceptions and the handlers that turn them into the
JSON error envelope.

Wizard, draft and database messages are localized through `app.i18n`
using the request's language; unexpected errors never leak details.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.context import request_language
from app.i18n import translate

logger = logging.getLogger(__name__)


class BrymarException(Exception):
    """Base for errors rendered as the JSON error envelope."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Union[dict, list, None] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class BusinessLogicError(BrymarException):
    """The request is well-formed but a domain rule rejects it (422)."""

    def __init__(self, message: str, error_code: str = "BUSINESS_LOGIC_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
        )


class ResourceNotFoundError(BrymarException):
    """A listing, draft or user does not exist (404)."""

    def __init__(self, resource: str, identifier: str, message: str | None = None):
        super().__init__(
            message=message or f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class PermissionDeniedError(BrymarException):
    """Authenticated, but lacking the permission or ownership (403)."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


class WizardValidationError(BrymarException):
    """Wizard data failed step validation; `errors` maps field → message."""

    def __init__(self, message: str, errors: dict[str, str], invalid_steps: list[int]):
        self.errors = errors
        self.invalid_steps = invalid_steps
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="WIZARD_VALIDATION_ERROR",
            details={"errors": errors, "invalid_steps": invalid_steps},
        )


class DraftError(BrymarException):
    """A draft could not be stored or read back."""

    def __init__(self, message: str, error_code: str = "DRAFT_ERROR"):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
        )


class DraftNotFoundError(ResourceNotFoundError):
    def __init__(self, draft_id: str, message: str | None = None):
        super().__init__("Draft", draft_id, message=message)
        self.error_code = "DRAFT_NOT_FOUND"


class ExternalServiceError(BrymarException):
    """Storage / AI / geocoding call failed."""

    def __init__(self, service: str, message: str = "External service unavailable"):
        self.service = service
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="EXTERNAL_SERVICE_ERROR",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Build the `{"error": {"code", "message", "details"?}}` envelope."""
    body: dict = {"code": error_code, "message": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body})


def _where(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def brymar_exception_handler(
    request: Request,
    exc: BrymarException,
) -> JSONResponse:
    logger.warning(f"{exc.error_code} on {_where(request)}: {exc.message}")
    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Route-level HTTPExceptions keep their status, detail and headers."""
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code} on {_where(request)}: {exc.detail}")
    response = create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Request body / query errors, one localized entry per failing field."""
    logger.warning(f"Validation error on {_where(request)}: {len(exc.errors())} field(s)")

    language = request_language(request)
    errors = []
    for error in exc.errors():
        # Custom validators carry their own message
        if error["type"] == "value_error":
            message = error["msg"]
        else:
            message = translate(error["type"], language, **(error.get("ctx") or {}))
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": message,
            "type": error["type"],
        })

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


# Driver message fragment → (error code, i18n key); first match wins
INTEGRITY_KINDS = (
    ("unique", "DUPLICATE_RECORD", "duplicate_record"),
    ("foreign key", "FOREIGN_KEY_VIOLATION", "foreign_key_violation"),
    ("not null", "NULL_VALUE_NOT_ALLOWED", "null_value"),
    ("not-null", "NULL_VALUE_NOT_ALLOWED", "null_value"),
)


def classify_integrity_error(exc: IntegrityError) -> tuple[str, str]:
    driver_message = str(getattr(exc, "orig", None) or exc).lower()
    for fragment, error_code, key in INTEGRITY_KINDS:
        if fragment in driver_message:
            return error_code, key
    return "INTEGRITY_ERROR", "integrity_error"


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Unique, foreign-key and not-null violations become a localized 422."""
    error_code, key = classify_integrity_error(exc)
    logger.error(f"{error_code} on {_where(request)}: {exc.orig!r}")
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message=translate(key, request_language(request)),
        error_code=error_code,
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    logger.error(f"Database unavailable on {_where(request)}: {exc}")
    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message=translate("database_unavailable", request_language(request)),
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Last resort: log the traceback, answer with a generic 500."""
    logger.error(f"Unhandled {type(exc).__name__} on {_where(request)}: {exc}", exc_info=True)
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    handlers = (
        (BrymarException, brymar_exception_handler),
        (HTTPException, http_exception_handler),
        (StarletteHTTPException, http_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (ValidationError, validation_exception_handler),
        (IntegrityError, database_exception_handler),
        (OperationalError, operational_exception_handler),
        (Exception, general_exception_handler),
    )
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, handler)
