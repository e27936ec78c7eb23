"""Bounded fixed-delay retry for async operations."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, RetryCallState, RetryError, stop_after_attempt, wait_fixed

from ..core.exceptions import RetryExhaustedError
from ..core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ERROR_PREVIEW_CHARS = 200


def _log_failure(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Attempt failed",
        attempt=retry_state.attempt_number,
        error=str(error)[:ERROR_PREVIEW_CHARS],
    )


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay_ms: int = 2000,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    name: Optional[str] = None,
) -> T:
    """Run ``operation`` once plus up to ``max_attempts`` retries.

    Every failure is logged with its attempt number. Retries wait a fixed
    ``delay_ms``. When the last attempt fails a ``RetryExhaustedError`` is
    raised, chained to the final error and carrying the attempt count.
    """
    if max_attempts < 0:
        raise ValueError("max_attempts must be >= 0")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts + 1),
        wait=wait_fixed(delay_ms / 1000),
        after=_log_failure,
        sleep=sleep,
    )

    try:
        async for attempt in retrying:
            with attempt:
                return await operation()
    except RetryError as e:
        last_error = e.last_attempt.exception()
        attempts = e.last_attempt.attempt_number
        logger.error(
            "Operation failed after retries",
            operation=name,
            attempts=attempts,
            error=str(last_error)[:ERROR_PREVIEW_CHARS],
        )
        raise RetryExhaustedError(attempts, last_error) from last_error
