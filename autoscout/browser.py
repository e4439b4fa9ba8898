"""
Browser capability consumed by the crawler, and its Playwright implementation.
"""
import logging
from typing import Any, Optional, Protocol

from playwright.async_api import async_playwright

from .config import CrawlSettings

logger = logging.getLogger(__name__)


class PageContext(Protocol):
    """The only browser surface the crawl engine depends on."""

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None: ...

    async def click(self, selector: str) -> None: ...

    async def close(self) -> None: ...


class PlaywrightPageContext:
    """One Chromium browser, context and page owned by a single crawl job."""

    def __init__(self, playwright, browser, context, page):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self._closed = False

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        await self._page.wait_for_selector(selector, timeout=timeout_ms)

    async def click(self, selector: str) -> None:
        await self._page.click(selector)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            await self._playwright.stop()


async def launch_page_context(settings: Optional[CrawlSettings] = None) -> PlaywrightPageContext:
    """Start Chromium and open the single page a crawl job works in."""
    settings = settings or CrawlSettings()

    launch_args = ["--disable-blink-features=AutomationControlled"]
    if settings.headless:
        launch_args += ["--disable-dev-shm-usage", "--no-sandbox", "--disable-gpu"]

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=settings.headless, args=launch_args)
        logger.info(">>> Browser launched (headless=%s)", settings.headless)

        context = await browser.new_context(
            viewport={"width": 1280, "height": 900},
            user_agent=settings.user_agent,
            locale=settings.locale,
        )
        context.set_default_timeout(30_000)
        context.set_default_navigation_timeout(settings.navigation_timeout_ms)

        page = await context.new_page()
    except Exception:
        await playwright.stop()
        raise

    return PlaywrightPageContext(playwright, browser, context, page)
