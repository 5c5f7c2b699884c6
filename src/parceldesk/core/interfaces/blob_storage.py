"""Blob storage interface."""

from typing import Protocol

from parceldesk.core.entities.storage import StoredObject


class IBlobStorage(Protocol):
    """Contract for file storage attached to records."""

    async def upload(self, path: str, data: bytes, content_type: str) -> StoredObject:
        """Store ``data`` under ``path``."""
        ...

    async def download(self, path: str) -> bytes:
        """Fetch the bytes stored under ``path``.

        Raises:
            NotFoundError: If nothing is stored there.
        """
        ...

    def public_url(self, path: str) -> str:
        """Return the URL at which ``path`` can be fetched."""
        ...
