"""Bounded retry for units of work that lost a lock race."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from config.settings import settings
from src.xp_common.errors import ConcurrencyConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    *,
    name: str,
    max_attempts: int | None = None,
    backoff_seconds: float | None = None,
) -> T:
    """Run `operation`, re-running it on ConcurrencyConflictError.

    `operation` must be a complete unit of work (it commits or rolls back
    itself), so a retry starts from clean state. After the last attempt the
    conflict propagates to the caller as a retryable 409.
    """
    attempts = max_attempts if max_attempts is not None else settings.CONFLICT_MAX_ATTEMPTS
    backoff = backoff_seconds if backoff_seconds is not None else settings.CONFLICT_BACKOFF_SECONDS
    attempt = 1
    while True:
        try:
            return await operation()
        except ConcurrencyConflictError:
            if attempt >= attempts:
                logger.warning("%s: giving up after %d conflicting attempts", name, attempt)
                raise
            logger.warning("%s: conflict on attempt %d/%d, retrying", name, attempt, attempts)
            await asyncio.sleep(backoff * attempt)
            attempt += 1
