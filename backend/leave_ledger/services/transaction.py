"""Unit-of-work helper that retries on balance write conflicts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from leave_ledger.config import get_settings
from leave_ledger.exceptions import ConcurrencyConflict

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_retry(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    max_retries: int | None = None,
) -> T:
    """Run ``operation`` and commit, retrying from scratch on ConcurrencyConflict.

    Any failure rolls the whole unit of work back. After ``max_retries``
    retries (default ``concurrency_max_retries``) the conflict is re-raised
    for the caller to surface as a retryable error.
    """
    retries = get_settings().concurrency_max_retries if max_retries is None else max_retries
    attempt = 0
    while True:
        try:
            result = await operation()
            await session.commit()
            return result
        except ConcurrencyConflict:
            await session.rollback()
            attempt += 1
            if attempt > retries:
                logger.warning("Giving up after %d concurrent balance write conflicts", attempt)
                raise
            logger.info("Concurrent balance write detected, retrying (attempt %d of %d)", attempt, retries)
        except Exception:
            await session.rollback()
            raise
