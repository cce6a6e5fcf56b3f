"""Local media storage for wizard uploads.

Files land in `settings.upload_dir` under a generated name and are
served from `settings.public_media_url`. The content type is taken from
the file's magic bytes, never from the client's claim.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from app.config import settings
from app.middleware.exceptions import BusinessLogicError, ExternalServiceError

logger = logging.getLogger("brymar.storage")

IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

UPLOAD_CHUNK_BYTES = 1024 * 1024


@dataclass
class StoredFile:
    id: str
    url: str
    filename: str
    size: int
    content_type: str


def sniff_image_type(header: bytes) -> str | None:
    """Return the image MIME type from magic bytes, or None if unsupported."""
    if header.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if header.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if header.startswith(b"RIFF") and b"WEBP" in header[:32]:
        return "image/webp"
    return None


async def read_upload(file, limit: int | None = None) -> bytes:
    """Read an upload in chunks, stopping one byte past `limit`.

    The extra byte lets `store_image` tell "exactly at the limit" from
    "too large" without holding an oversized body in memory.
    """
    limit = settings.max_upload_bytes if limit is None else limit
    chunks: list[bytes] = []
    received = 0
    while received <= limit:
        chunk = await file.read(min(UPLOAD_CHUNK_BYTES, limit + 1 - received))
        if not chunk:
            break
        chunks.append(chunk)
        received += len(chunk)
    return b"".join(chunks)


def _sanitize_name(filename: str | None) -> str:
    name = Path(filename or "upload").name.strip()
    return name[:200] or "upload"


def store_image(
    content: bytes,
    filename: str | None,
    folder: str = "images",
    upload_dir: str | None = None,
) -> StoredFile:
    if not content:
        raise BusinessLogicError("Empty file", error_code="EMPTY_UPLOAD")
    if len(content) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise BusinessLogicError(
            f"File too large. Maximum allowed size is {limit_mb:.0f} MB.",
            error_code="FILE_TOO_LARGE",
        )

    content_type = sniff_image_type(content[:64])
    if content_type is None:
        raise BusinessLogicError(
            "Only JPEG, PNG and WebP images are allowed",
            error_code="UNSUPPORTED_MEDIA_TYPE",
        )

    file_id = str(uuid.uuid4())
    stored_name = f"{file_id}.{IMAGE_EXTENSIONS[content_type]}"
    target_dir = Path(upload_dir or settings.upload_dir) / folder
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / stored_name).write_bytes(content)
    except OSError as exc:
        logger.error(f"Failed to store upload {stored_name}: {exc}")
        raise ExternalServiceError("storage", "Could not store the file. Please try again.")

    url = f"{settings.public_media_url.rstrip('/')}/{folder}/{stored_name}"
    logger.info(f"Stored {content_type} upload {stored_name} ({len(content)} bytes)")
    return StoredFile(
        id=file_id,
        url=url,
        filename=_sanitize_name(filename),
        size=len(content),
        content_type=content_type,
    )
