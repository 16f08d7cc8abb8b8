"""Retry helper for overload failures of the completion service."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from live_scribe.l1_entities.errors import RateLimitedError
from live_scribe.l2_use_cases.utils.cadence import backoff_delays

log = logging.getLogger('lsc.retry')

T = TypeVar('T')

Sleep = Callable[[float], Awaitable[None]]


async def call_with_backoff(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = 3,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await *fn*, retrying only on ``RateLimitedError`` with exponential backoff.

    Any other exception propagates immediately. After the last retry the
    final ``RateLimitedError`` propagates.
    """
    delays = backoff_delays(retries, base_delay)
    attempt = 0
    while True:
        try:
            return await fn()
        except RateLimitedError:
            if attempt >= len(delays):
                raise
            delay = delays[attempt]
            attempt += 1
            log.warning('Rate limited, retry %d/%d in %.1fs', attempt, retries, delay)
            await sleep(delay)
