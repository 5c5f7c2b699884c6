"""Document attachments for packages."""

import logging
import time
from collections.abc import Callable
from typing import Any

from parceldesk.core.errors import ValidationError
from parceldesk.core.interfaces.blob_storage import IBlobStorage
from parceldesk.core.interfaces.data_store import IDataStore
from parceldesk.core.services.invalidation import DOCUMENTS, CacheInvalidator
from parceldesk.core.services.resilience import with_timeout

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
    }
)
UPLOAD_TIMEOUT = 60.0


class DocumentService:
    """Uploads, downloads and links files attached to packages.

    Files are checked before anything is sent: at most 10 MiB, and only
    JPEG, PNG, GIF, WEBP or PDF. A stored file gets a ``documents`` row,
    and the package's cached document list is invalidated.
    """

    def __init__(
        self,
        store: IDataStore,
        storage: IBlobStorage,
        invalidator: CacheInvalidator,
        timeout: float = UPLOAD_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._storage = storage
        self._invalidate = invalidator
        self._timeout = timeout
        self._clock = clock

    @staticmethod
    def validate(file_name: str, size: int, content_type: str) -> None:
        """Reject a file before upload.

        Raises:
            ValidationError: If the name is empty, the file is empty or too
                large, or its type is not allowed.
        """
        if not file_name.strip():
            raise ValidationError("A file name is required.")
        if size <= 0:
            raise ValidationError("The file is empty.")
        if size > MAX_FILE_SIZE:
            raise ValidationError(
                "The file is larger than 10 MB.",
                details={"size": size, "max_size": MAX_FILE_SIZE},
            )
        if content_type not in ALLOWED_TYPES:
            raise ValidationError(
                f"Files of type {content_type!r} are not allowed.",
                details={"content_type": content_type},
            )

    async def upload(
        self,
        package_id: Any,
        file_name: str,
        data: bytes,
        content_type: str,
        uploaded_by: str,
        document_type: str = "other",
    ) -> dict[str, Any]:
        """Store a file and record it against a package.

        Args:
            package_id: Owning package.
            file_name: Original file name.
            data: File contents.
            content_type: MIME type of the contents.
            uploaded_by: Id of the uploading user.
            document_type: Document category column value.

        Returns:
            The inserted ``documents`` row.
        """
        self.validate(file_name, len(data), content_type)

        path = f"packages/{package_id}/{int(self._clock() * 1000)}_{file_name}"
        stored = await with_timeout(
            self._storage.upload(path, data, content_type),
            self._timeout,
            "Uploading the file timed out.",
        )

        row = {
            "package_id": package_id,
            "file_name": file_name,
            "file_path": stored.path,
            "file_type": content_type,
            "file_size": stored.size,
            "document_type": document_type,
            "uploaded_by": uploaded_by,
        }
        rows = await with_timeout(
            self._store.insert(DOCUMENTS, row),
            self._timeout,
            "Saving the document record timed out.",
        )
        await self._invalidate.documents(package_id)
        logger.info("Uploaded %s for package %s", stored.path, package_id)
        return rows[0] if rows else row

    async def download(self, document: dict[str, Any]) -> bytes:
        """Fetch the contents of a document row's file."""
        return await with_timeout(
            self._storage.download(document["file_path"]),
            self._timeout,
            "Downloading the file timed out.",
        )

    def public_url(self, document: dict[str, Any]) -> str:
        """URL of a document row's file."""
        return self._storage.public_url(document["file_path"])
