"""Input checks shared by the evidence endpoints."""

from pathlib import PurePosixPath
from urllib.parse import urlparse

from ledger.errors import ValidationError

ALLOWED_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
        "text/markdown",
        "image/png",
        "image/jpeg",
        "image/webp",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def file_extension(filename: str | None) -> str:
    """Extension including the dot, or empty string."""
    if not filename:
        return ""
    return PurePosixPath(filename).suffix


def validate_upload(
    filename: str | None, content_type: str | None, size: int | None, max_bytes: int
) -> str:
    """
    Reject empty, oversized or disallowed files before anything is written.
    Returns the effective MIME type.
    """
    if not filename or not size:
        raise ValidationError("file is required")
    if size > max_bytes:
        raise ValidationError(f"File too large (max {max_bytes // (1024 * 1024)} MB)")
    mime_type = content_type or "application/octet-stream"
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError("File type not allowed")
    return mime_type
