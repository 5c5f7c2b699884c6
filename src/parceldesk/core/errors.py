"""Error taxonomy for parceldesk.

Every failure that leaves the data access layer is one of these classes,
so callers can tell "retry won't help" (permission, validation) from
"transient" (timeout, network) from "doesn't exist" (not found).

Exception Hierarchy:
    ParcelDeskError (base)
    ├── RequestTimeoutError - an operation exceeded its time bound
    ├── NetworkError - transport failure, or transient failure after retries
    ├── NotFoundError - entity or profile absent
    ├── PermissionDeniedError - backend access-control rejection
    ├── ValidationError - malformed input caught before a network call
    ├── AuthenticationError - credentials rejected at sign-in
    └── DataStoreError - any other backend rejection
"""

from __future__ import annotations

import re
from typing import Any

_RETRYABLE_MESSAGE = re.compile(r"timeout|timed out|network|fetch|connection", re.IGNORECASE)


class ParcelDeskError(Exception):
    """Base class for all parceldesk errors."""

    default_message = "An unknown error occurred."
    retryable = False

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code!r})"


class RequestTimeoutError(ParcelDeskError, TimeoutError):
    default_message = "The request timed out."
    retryable = True


class NetworkError(ParcelDeskError, ConnectionError):
    default_message = "A network error occurred."
    retryable = True


class NotFoundError(ParcelDeskError):
    default_message = "The requested record was not found."


class PermissionDeniedError(ParcelDeskError):
    default_message = "You do not have permission to perform this action."


class ValidationError(ParcelDeskError):
    default_message = "The supplied data is invalid."


class AuthenticationError(ParcelDeskError):
    default_message = "Invalid email or password."


class DataStoreError(ParcelDeskError):
    default_message = "The data store rejected the request."


def is_retryable(error: BaseException) -> bool:
    """Decide whether a failed attempt is worth repeating.

    Typed errors answer for themselves. Builtin timeout and connection
    errors are transient. Anything else is retried only when its message
    looks like a transport problem (timeout, network, fetch, connection).

    Args:
        error: The exception raised by the attempt.

    Returns:
        True if the operation should be attempted again.
    """
    if isinstance(error, ParcelDeskError):
        return error.retryable
    if isinstance(error, (TimeoutError, ConnectionError)):
        return True
    return bool(_RETRYABLE_MESSAGE.search(str(error)))


def describe_error(error: BaseException | None) -> str:
    """Turn an exception into a message fit to show a user.

    Args:
        error: The exception to describe (may be None).

    Returns:
        A short human-readable message.
    """
    if error is None:
        return ParcelDeskError.default_message
    if isinstance(error, (RequestTimeoutError, TimeoutError)):
        return "The request timed out. Please wait a moment and try again."
    if isinstance(error, (NetworkError, ConnectionError)):
        return "A network error occurred. Please check your internet connection."
    if isinstance(error, NotFoundError):
        return "The requested data could not be found."
    if isinstance(error, PermissionDeniedError):
        return "You do not have permission to access this data."
    if isinstance(error, ParcelDeskError):
        return error.message

    text = str(error)
    if re.search(r"timeout|timed out", text, re.IGNORECASE):
        return "The request timed out. Please wait a moment and try again."
    if re.search(r"network|fetch", text, re.IGNORECASE):
        return "A network error occurred. Please check your internet connection."
    return text or ParcelDeskError.default_message
