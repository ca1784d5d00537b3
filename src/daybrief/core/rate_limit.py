"""Minimum-gap throttling for providers with a strict QPS ceiling."""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

# TianAPI free tier allows 3 requests per second; 380ms leaves a margin
TIANAPI_MIN_GAP = 0.38


class RateLimitWatermark:
    """Next time a request to one provider may start.

    Slots are reserved synchronously before any suspension, so concurrent
    callers on one event loop are serialized without a lock. One instance
    per provider, owned by whoever builds the gateway.
    """

    def __init__(
        self,
        min_gap: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.min_gap = min_gap
        self.clock = clock
        self.sleep = sleep
        self.next_allowed = 0.0

    def reserve(self) -> float:
        """Claim the next dispatch slot and return the seconds to wait for it."""
        now = self.clock()
        slot = max(now, self.next_allowed)
        self.next_allowed = slot + self.min_gap
        return slot - now

    def release(self) -> None:
        """Push the watermark to ``min_gap`` after a completed request."""
        self.next_allowed = max(self.next_allowed, self.clock() + self.min_gap)

    async def wait_turn(self) -> None:
        delay = self.reserve()
        if delay > 0:
            logger.debug("Throttling request for %.3fs", delay)
            await self.sleep(delay)


class RateLimitedGateway:
    """Dispatch requests to one provider no closer than the watermark allows."""

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[Any]],
        watermark: RateLimitWatermark,
    ) -> None:
        self.fetch = fetch
        self.watermark = watermark

    async def throttled_fetch(self, url: str) -> Any:
        """Wait for a dispatch slot, then fetch ``url``."""
        await self.watermark.wait_turn()
        try:
            return await self.fetch(url)
        finally:
            self.watermark.release()
