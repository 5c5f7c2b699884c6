"""Blob storage over the backend's object storage endpoints."""

from collections.abc import Callable
from urllib.parse import quote

import httpx

from parceldesk.adapters.supabase.errors import raise_for_status, transport_errors
from parceldesk.core.entities.storage import StoredObject

STORAGE_PREFIX = "/storage/v1/object"
DEFAULT_BUCKET = "file"


class SupabaseStorage:
    """IBlobStorage implementation for one storage bucket."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        bucket: str = DEFAULT_BUCKET,
        token_provider: Callable[[], str | None] | None = None,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._bucket = bucket
        self._token_provider = token_provider or (lambda: None)

    @property
    def bucket(self) -> str:
        """Name of the storage bucket."""
        return self._bucket

    async def upload(self, path: str, data: bytes, content_type: str) -> StoredObject:
        """Store ``data`` under ``path``; an existing object is not replaced."""
        headers = self._headers()
        headers["Content-Type"] = content_type
        headers["x-upsert"] = "false"

        with transport_errors():
            response = await self._client.post(
                self._object_path(path), content=data, headers=headers
            )
        raise_for_status(response)
        return StoredObject(
            bucket=self._bucket,
            path=path,
            size=len(data),
            content_type=content_type,
        )

    async def download(self, path: str) -> bytes:
        """Fetch the bytes stored under ``path``."""
        with transport_errors():
            response = await self._client.get(self._object_path(path), headers=self._headers())
        raise_for_status(response)
        return response.content

    def public_url(self, path: str) -> str:
        """Public URL of ``path``."""
        base = str(self._client.base_url).rstrip("/")
        return f"{base}{STORAGE_PREFIX}/public/{self._bucket}/{quote(path)}"

    def _object_path(self, path: str) -> str:
        return f"{STORAGE_PREFIX}/{self._bucket}/{quote(path)}"

    def _headers(self) -> dict[str, str]:
        token = self._token_provider() or self._api_key
        return {"apikey": self._api_key, "Authorization": f"Bearer {token}"}
