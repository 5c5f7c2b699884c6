"""Translation of backend HTTP failures into parceldesk errors."""

import contextlib
from collections.abc import Iterator
from typing import Any

import httpx

from parceldesk.core.errors import (
    DataStoreError,
    NetworkError,
    NotFoundError,
    ParcelDeskError,
    PermissionDeniedError,
    RequestTimeoutError,
    ValidationError,
)

NOT_FOUND_CODES = frozenset({"PGRST116", "not_found", "NoSuchKey"})
PERMISSION_CODES = frozenset({"PGRST301", "PGRST302", "42501", "insufficient_privilege"})


@contextlib.contextmanager
def transport_errors() -> Iterator[None]:
    """Re-raise httpx transport failures as RequestTimeoutError or NetworkError."""
    try:
        yield
    except httpx.TimeoutException as e:
        raise RequestTimeoutError(f"Request timed out: {e}") from e
    except httpx.TransportError as e:
        raise NetworkError(f"Network request failed: {e}") from e


def error_payload(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON error body, or return an empty dict."""
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def error_from_response(response: httpx.Response) -> ParcelDeskError:
    """Classify an unsuccessful response.

    Args:
        response: A response with a 4xx or 5xx status.

    Returns:
        The matching parceldesk error (not raised).
    """
    payload = error_payload(response)
    code = str(payload.get("code") or payload.get("error_code") or payload.get("error") or "")
    message = (
        payload.get("message")
        or payload.get("msg")
        or payload.get("error_description")
        or response.text
        or f"HTTP {response.status_code}"
    )
    status = response.status_code
    embedded_status = str(payload.get("statusCode") or "")
    details = {"status": status, "payload": payload}

    if status in (408, 504):
        return RequestTimeoutError(message, code=code or None, details=details)
    if code in NOT_FOUND_CODES or status == 404 or embedded_status == "404":
        return NotFoundError(message, code=code or None, details=details)
    if code in PERMISSION_CODES or status in (401, 403) or embedded_status in ("401", "403"):
        return PermissionDeniedError(message, code=code or None, details=details)
    if code[:2] in ("22", "23") or status == 422:
        return ValidationError(message, code=code or None, details=details)
    if status >= 500:
        return NetworkError(message, code=code or None, details=details)
    return DataStoreError(message, code=code or None, details=details)


def raise_for_status(response: httpx.Response) -> None:
    """Raise the classified error if ``response`` is not a success."""
    if response.is_success:
        return
    raise error_from_response(response)
