"""Reusable Pydantic field validators.

Used by the profile and listing schemas:
- Phone number validation (E.164)
- Media URL validation
- XSS prevention for free-text fields
"""

import re


# Regex patterns
PHONE_REGEX = re.compile(r"^\+?[1-9]\d{1,14}$")  # E.164 format
URL_REGEX = re.compile(
    r"^https?://"  # http:// or https://
    r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,6}\.?|"  # domain
    r"localhost|"  # localhost
    r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"  # IP
    r"(?::\d+)?"  # optional port
    r"(?:/?|[/?]\S+)$",
    re.IGNORECASE,
)

# XSS patterns
XSS_PATTERNS = [
    r"<script[^>]*>.*?</script>",
    r"javascript:",
    r"on\w+\s*=",
    r"<iframe",
]


def validate_phone(value: str | None) -> str | None:
    """Validate phone number (E.164 format). Spaces, dashes and
    parentheses are stripped first; empty means "no phone".
    """
    if not value:
        return None

    value = re.sub(r"[\s\-()]", "", value)

    if not PHONE_REGEX.match(value):
        raise ValueError(
            "Invalid phone number format (use E.164: +18095551234)"
        )

    return value


def validate_url(value: str | None) -> str | None:
    """Validate an absolute http(s) URL; empty means "no URL"."""
    if not value:
        return None

    value = value.strip()

    if not URL_REGEX.match(value):
        raise ValueError("Invalid URL format")

    return value


def validate_no_xss(value: str | None) -> str | None:
    """Reject script tags, inline handlers and javascript: URLs."""
    if value is None:
        return value

    for pattern in XSS_PATTERNS:
        if re.search(pattern, value, re.IGNORECASE | re.DOTALL):
            raise ValueError("Invalid input detected")

    return value
