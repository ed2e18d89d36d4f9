"""Hashing helpers for public verification identifiers."""

import hashlib
from datetime import datetime, timezone

PUBLIC_ID_LENGTH = 16


def sha256_hex(value: str) -> str:
    """SHA256 hex digest of a UTF-8 string."""
    return hashlib.sha256(value.encode()).hexdigest()


def derive_public_id(entry_id: str, timestamp: datetime | None = None) -> str:
    """
    Opaque public id: sha256 of "{entry_id}-{iso timestamp}", truncated.
    Not guaranteed unique; callers check for an existing record.
    """
    ts = timestamp or datetime.now(timezone.utc)
    return sha256_hex(f"{entry_id}-{ts.isoformat()}")[:PUBLIC_ID_LENGTH]
