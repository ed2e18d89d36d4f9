"""Supabase Storage client for evidence files."""

import logging
from urllib.parse import quote

import httpx

from ledger.errors import StorageError

logger = logging.getLogger(__name__)


class SupabaseStorage:
    """Uploads objects and issues signed download URLs for one bucket."""

    def __init__(
        self, http: httpx.AsyncClient, *, base_url: str, service_key: str, bucket: str
    ) -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        }

    def _object_url(self, kind: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/{kind}/{self.bucket}/{quote(path)}"

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Store bytes at path. Never overwrites an existing object."""
        headers = {**self._headers, "Content-Type": content_type, "x-upsert": "false"}
        try:
            r = await self._http.post(self._object_url("object", path), headers=headers, content=data)
            r.raise_for_status()
        except httpx.HTTPStatusError as err:
            logger.warning("Storage upload failed (%s): %s", err.response.status_code, err.response.text[:300])
            raise StorageError(f"Upload failed: HTTP {err.response.status_code}") from err
        except httpx.RequestError as err:
            raise StorageError(f"Upload failed: {err}") from err

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        """Return an absolute URL valid for expires_in seconds."""
        try:
            r = await self._http.post(
                self._object_url("object/sign", path),
                headers=self._headers,
                json={"expiresIn": expires_in},
            )
            r.raise_for_status()
            signed = r.json().get("signedURL")
        except httpx.HTTPStatusError as err:
            raise StorageError(f"Failed to create signed URL: HTTP {err.response.status_code}") from err
        except (httpx.RequestError, ValueError) as err:
            raise StorageError(f"Failed to create signed URL: {err}") from err
        if not signed:
            raise StorageError("Failed to create signed URL")
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/storage/v1{signed}"
