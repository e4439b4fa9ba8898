"""
Navigation policy: one primary attempt, at most one looser fallback attempt.
"""
import logging
from dataclasses import dataclass

from .config import CrawlSettings
from .exceptions import NavigationError
from .rate_limit import sleep_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationStrategy:
    wait_until: str  # domcontentloaded | load | networkidle
    timeout_ms: int
    settle_ms: int = 0


class PageFetcher:
    """
    Bounded-retry navigation shared by search pages and listing pages.

    The primary strategy waits for the network to settle; if it times out or
    errors, the fallback only waits for DOM content with a longer timeout and
    then pauses for a fixed settle delay. A failing fallback raises
    NavigationError and the caller decides whether that is fatal.
    """

    def __init__(self, primary: NavigationStrategy, fallback: NavigationStrategy):
        self.primary = primary
        self.fallback = fallback

    @classmethod
    def for_search_pages(cls, settings: CrawlSettings) -> "PageFetcher":
        return cls(
            NavigationStrategy("networkidle", settings.navigation_timeout_ms, settings.primary_settle_ms),
            NavigationStrategy("domcontentloaded", settings.fallback_timeout_ms, settings.search_fallback_settle_ms),
        )

    @classmethod
    def for_listing_pages(cls, settings: CrawlSettings) -> "PageFetcher":
        return cls(
            NavigationStrategy("networkidle", settings.navigation_timeout_ms, settings.primary_settle_ms),
            NavigationStrategy("domcontentloaded", settings.fallback_timeout_ms, settings.listing_fallback_settle_ms),
        )

    async def _attempt(self, context, url: str, strategy: NavigationStrategy) -> None:
        await context.navigate(url, strategy.wait_until, strategy.timeout_ms)
        if strategy.settle_ms:
            await sleep_ms(strategy.settle_ms)

    async def navigate(self, context, url: str) -> bool:
        """Load url; returns True when the fallback strategy was needed."""
        try:
            await self._attempt(context, url, self.primary)
            return False
        except Exception as e:
            logger.warning("Navigation to %s failed (%s), retrying with %s", url, e, self.fallback.wait_until)

        try:
            await self._attempt(context, url, self.fallback)
        except Exception as e:
            raise NavigationError(url, e) from e
        logger.info("Fallback navigation to %s succeeded", url)
        return True
