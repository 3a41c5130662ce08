"""
Order Service — Counter allocation retry

The per-day counters (order sequence, queue number) are bumped with a
conditional UPDATE on version_id. Losing that race raises StaleDataError;
allocators wrapped in with_optimistic_retry() re-read and try again after
an exponential, jittered pause.
"""
import asyncio
import functools
import logging
import random

from order_service.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class StaleDataError(Exception):
    """The counter row changed between our read and our conditional update."""


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry number `attempt` (1-based)."""
    ceiling = settings.OPT_LOCK_MAX_DELAY_MS / 1000.0
    delay = min((settings.OPT_LOCK_BASE_DELAY_MS / 1000.0) * (2 ** attempt), ceiling)
    return delay + random.uniform(0, settings.OPT_LOCK_JITTER_MS / 1000.0)


def with_optimistic_retry(max_retries: int | None = None):
    """
    Retry an async counter allocator on StaleDataError, up to
    OPT_LOCK_MAX_RETRIES attempts. The last conflict is re-raised.
    """
    attempts = max_retries or settings.OPT_LOCK_MAX_RETRIES

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except StaleDataError:
                    if attempt >= attempts:
                        logger.error("%s lost the counter race %d times; giving up", func.__name__, attempts)
                        raise
                delay = backoff_delay(attempt)
                logger.warning("%s: counter conflict (attempt %d/%d), retrying in %.3fs",
                               func.__name__, attempt, attempts, delay)
                await asyncio.sleep(delay)
                attempt += 1
        return wrapper
    return decorator
