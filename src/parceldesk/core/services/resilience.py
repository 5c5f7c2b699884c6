"""Timeout and retry wrappers for remote calls.

Every data fetch composes them in the same order:

    cache.with_cache(key, lambda: with_retry(lambda: with_timeout(op(), ...)), ttl)

Caching wraps retry wraps timeout, so a cache hit never touches the
network and retries only apply to attempts that actually failed
(timeouts included).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from parceldesk.core.entities.fetch_policy import FetchPolicy
from parceldesk.core.errors import RequestTimeoutError, is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 15.0
DEFAULT_TIMEOUT_MESSAGE = "The request timed out."


async def with_timeout(
    operation: Awaitable[T],
    timeout: float = DEFAULT_TIMEOUT,
    message: str = DEFAULT_TIMEOUT_MESSAGE,
    *,
    cancel: bool = True,
) -> T:
    """Wait for an operation, failing once a deadline passes.

    Args:
        operation: The awaitable to wait for.
        timeout: Seconds to wait.
        message: Message carried by the timeout error.
        cancel: If True the operation is cancelled on timeout. If False it
            is abandoned instead: it keeps running in the background and
            its outcome is ignored.

    Returns:
        The operation's result.

    Raises:
        RequestTimeoutError: If ``timeout`` seconds elapse first. Errors raised
            by the operation itself, timeouts included, propagate unchanged.
    """
    task = asyncio.ensure_future(operation)
    waited: Awaitable[T] = task if cancel else asyncio.shield(task)
    try:
        return await asyncio.wait_for(waited, timeout)
    except asyncio.TimeoutError as e:
        # The operation raised its own timeout error before the deadline.
        if task.done() and not task.cancelled() and task.exception() is e:
            raise
        if not cancel:
            task.add_done_callback(_discard_result)
        raise RequestTimeoutError(message, details={"timeout": timeout}) from e


def _discard_result(task: "asyncio.Future[object]") -> None:
    # Retrieve the exception of an abandoned task so asyncio does not warn.
    if not task.cancelled():
        task.exception()


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    retries: int = 2,
    base_delay: float = 1.0,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run an operation, retrying transient failures with linear backoff.

    The operation is attempted at most ``retries + 1`` times. Failures that
    ``is_retryable`` rejects (permission, validation, ...) are re-raised at
    once without waiting. Before attempt ``n + 1`` the call waits
    ``base_delay * n`` seconds.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per
            attempt.
        retries: Extra attempts allowed after the first.
        base_delay: Backoff unit in seconds.
        sleep: Coroutine used to wait between attempts.

    Returns:
        The first successful result.

    Raises:
        Exception: The non-retryable error, or the last error once
            attempts are exhausted.
    """
    if retries < 0:
        raise ValueError("retries must not be negative")

    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt > retries:
                logger.error("All %d attempts failed: %s", attempt, e)
                raise

            delay = base_delay * attempt
            logger.warning("Retry %d/%d after %.2fs: %s", attempt, retries, delay, e)
            await sleep(delay)


async def resilient_call(
    operation: Callable[[], Awaitable[T]],
    policy: FetchPolicy,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run ``operation`` under the retry and timeout of ``policy``.

    Args:
        operation: Zero-argument callable returning a fresh awaitable.
        policy: Timeout, retry count, backoff and timeout message.
        sleep: Coroutine used to wait between attempts.

    Returns:
        The operation's result.
    """
    return await with_retry(
        lambda: with_timeout(operation(), policy.timeout, policy.timeout_message),
        retries=policy.retries,
        base_delay=policy.base_delay,
        sleep=sleep,
    )
