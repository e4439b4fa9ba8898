"""
Politeness delays between listing and page requests.
"""
import asyncio
import random
from typing import Optional


class RateLimiter:
    """
    Randomized per-listing delay and fixed per-page delay, in milliseconds.

    The listing delay is drawn uniformly from [min_listing_ms, max_listing_ms]
    so request spacing has no detectable period.
    """

    def __init__(self, min_listing_ms: int, max_listing_ms: int, page_ms: int,
                 rng: Optional[random.Random] = None):
        if min_listing_ms > max_listing_ms:
            raise ValueError("min_listing_ms must not exceed max_listing_ms")
        self.min_listing_ms = min_listing_ms
        self.max_listing_ms = max_listing_ms
        self.page_ms = page_ms
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings, rng: Optional[random.Random] = None) -> "RateLimiter":
        return cls(settings.min_listing_delay_ms, settings.max_listing_delay_ms,
                   settings.page_delay_ms, rng=rng)

    def listing_delay(self) -> int:
        return self._rng.randint(self.min_listing_ms, self.max_listing_ms)

    def page_delay(self) -> int:
        return self.page_ms


async def sleep_ms(ms: int) -> None:
    await asyncio.sleep(ms / 1000)
