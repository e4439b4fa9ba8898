"""
Crawl orchestration: page loop, listing loop and the event stream they produce.
"""
import logging
import uuid
from typing import AsyncIterator, Awaitable, Callable, Optional

from .browser import PageContext, launch_page_context
from .collector import ListingCollector
from .config import CrawlSettings
from .detail import DetailExtractor
from .events import (
    CrawlEvent, LogEvent, ProgressEvent, ResultEvent, ErrorEvent, CompleteEvent
)
from .exceptions import NavigationError, JobAlreadyStartedError
from .fetcher import PageFetcher
from .models import CrawlJob, ListingCandidate, VehicleRecord
from .rate_limit import RateLimiter, sleep_ms
from .utils import (
    now_iso, normalize_price, normalize_phone, strip_page_param, with_page_param,
    compile_zero_count_markers, has_zero_count_marker,
)

logger = logging.getLogger(__name__)

ContextFactory = Callable[[], Awaitable[PageContext]]

PAGE_TEXT_SCRIPT = "() => document.body ? document.body.innerText : ''"

# Cookie-consent accept buttons, tried in order on the first page only
CONSENT_SELECTORS = (
    "._consent-accept_1lphq_114",
    'button[class*="consent-accept"]',
    'button[data-cy="consent-layer-accept"]',
)

NAVIGATION_IMPOSSIBLE = "navigation impossible"


def new_job(search_url: str, multi_page: bool, settings: Optional[CrawlSettings] = None,
            job_id: Optional[str] = None) -> CrawlJob:
    """
    Create a CrawlJob for a search URL.

    The page parameter is stripped from the URL; single-page mode is a
    multi-page job limited to page 1.
    """
    settings = settings or CrawlSettings()
    return CrawlJob(
        base_search_url=strip_page_param(search_url),
        max_pages=settings.max_pages if multi_page else 1,
        job_id=job_id or uuid.uuid4().hex,
    )


class CrawlOrchestrator:
    """
    Drives one crawl job and yields its CrawlEvents.

    Cooperative and single-threaded per job: every navigation, evaluation and
    delay is a suspension point, and cancellation is polled before each page
    and each listing. The job's browser context is opened at start and closed
    on every exit path before the terminal event is yielded.
    """

    def __init__(
        self,
        settings: Optional[CrawlSettings] = None,
        context_factory: Optional[ContextFactory] = None,
        rate_limiter: Optional[RateLimiter] = None,
        collector: Optional[ListingCollector] = None,
        extractor: Optional[DetailExtractor] = None,
    ):
        self.settings = settings or CrawlSettings()
        self.settings.validate()
        self.context_factory = context_factory or (lambda: launch_page_context(self.settings))
        self.rate_limiter = rate_limiter or RateLimiter.from_settings(self.settings)
        self.collector = collector or ListingCollector(self.settings.listing_url_patterns)
        self.extractor = extractor or DetailExtractor(
            phone_reveal_settle_ms=self.settings.phone_reveal_settle_ms
        )
        self.search_fetcher = PageFetcher.for_search_pages(self.settings)
        self.listing_fetcher = PageFetcher.for_listing_pages(self.settings)
        self.no_results_patterns = compile_zero_count_markers(self.settings.no_results_markers)

    def start_crawl(self, search_url: str, multi_page: bool, job_id: Optional[str] = None):
        """Create a job and return it with its (not yet started) event stream."""
        job = new_job(search_url, multi_page, self.settings, job_id=job_id)
        return job, self.run(job)

    async def run(self, job: CrawlJob) -> AsyncIterator[CrawlEvent]:
        if job.started:
            raise JobAlreadyStartedError(job.job_id)
        job.started = True

        failure: Optional[BaseException] = None
        pages = None
        try:
            yield self._log("Starting extraction...")
            job.context = await self.context_factory()
            pages = self._crawl_pages(job)
            async for event in pages:
                yield event
        except Exception as e:
            logger.exception("Crawl job %s failed", job.job_id)
            failure = e
        finally:
            # The page loop is finalized before its browser goes away
            if pages is not None:
                await pages.aclose()
            await self._release(job)

        if failure is not None:
            yield self._log(f"ERROR: {failure}")
            yield ErrorEvent(message=f"An error occurred: {failure}")
            return

        if job.cancelled:
            yield self._log("Scraping cancelled by user")
        else:
            yield ProgressEvent(value=100)
        yield self._log(f"=== Scraping complete === Total vehicles extracted: {len(job.collected_vehicles)}")
        yield CompleteEvent()

    async def _release(self, job: CrawlJob) -> None:
        if job.context is None:
            return
        context, job.context = job.context, None
        try:
            await context.close()
            logger.info("Browser closed for job %s", job.job_id)
        except Exception:
            logger.exception("Error closing browser for job %s", job.job_id)

    async def _crawl_pages(self, job: CrawlJob) -> AsyncIterator[CrawlEvent]:
        has_more_results = True
        first_page = job.current_page

        while job.current_page <= job.max_pages and has_more_results and not job.cancelled:
            page_num = job.current_page
            page_url = with_page_param(job.base_search_url, page_num)
            yield self._log(f"=== Processing page {page_num} === URL: {page_url}")

            # A search page that cannot be loaded ends the job
            if await self.search_fetcher.navigate(job.context, page_url):
                yield self._log("Navigation to page successful in alternative mode")

            if await self._has_no_results(job.context):
                yield self._log(f"Page {page_num}: no results found")
                has_more_results = False
                continue

            if page_num == first_page:
                async for event in self._accept_cookies(job.context):
                    yield event

            listings, used_fallback = await self.collector.collect(job.context)
            if used_fallback and listings:
                yield self._log(f"Alternative approach: {len(listings)} listings found")
            if not listings:
                yield self._log(f"Could not find any listings on page {page_num}. Check the URL or page structure.")
                has_more_results = False
                continue
            yield self._log(f"{len(listings)} listings found on page {page_num}")

            for index, listing in enumerate(listings, 1):
                if job.cancelled:
                    break
                yield self._log(f"--- Processing listing {index}/{len(listings)} (page {page_num}) --- {listing.url}")

                vehicle = await self._extract_vehicle(job.context, listing, page_num)
                if vehicle.note:
                    yield self._log(f"Skipping listing {listing.url}: {vehicle.note}")
                elif vehicle.phone:
                    yield self._log(f"Phone number retrieved: {vehicle.phone}")

                job.collected_vehicles.append(vehicle)
                yield ResultEvent(vehicles=tuple(job.collected_vehicles))

                if job.cancelled:
                    break
                wait_ms = self.rate_limiter.listing_delay()
                yield self._log(f"Random wait of {wait_ms / 1000:g} seconds before next listing...")
                await sleep_ms(wait_ms)

            yield ProgressEvent(value=min(100, round(page_num / job.max_pages * 100)))

            if job.cancelled:
                break
            job.current_page += 1
            if job.current_page <= job.max_pages:
                wait_ms = self.rate_limiter.page_delay()
                yield self._log(f"Waiting {wait_ms / 1000:g} seconds before moving to page {job.current_page}...")
                await sleep_ms(wait_ms)

    async def _has_no_results(self, context) -> bool:
        text = await context.evaluate(PAGE_TEXT_SCRIPT)
        return has_zero_count_marker(text, self.no_results_patterns)

    async def _accept_cookies(self, context) -> AsyncIterator[CrawlEvent]:
        yield self._log("Searching for cookie banner...")
        for selector in CONSENT_SELECTORS:
            try:
                await context.wait_for_selector(selector, self.settings.consent_timeout_ms)
                await context.click(selector)
            except Exception:
                continue
            yield self._log(f"Cookies accepted with selector: {selector}")
            return
        yield self._log("No cookie banner found or already accepted")

    async def _extract_vehicle(self, context, listing: ListingCandidate, page_num: int) -> VehicleRecord:
        """Build one record; a listing page that cannot be loaded yields a noted record."""
        vehicle = VehicleRecord(
            url=listing.url,
            page=page_num,
            title=listing.title,
            brand=listing.brand,
            model=listing.model,
            price=listing.price,
            year=listing.year,
            mileage=listing.mileage,
            extracted_at=now_iso(),
        )

        try:
            await self.listing_fetcher.navigate(context, listing.url)
        except NavigationError as e:
            logger.warning("Listing %s skipped: %s", listing.url, e)
            vehicle.note = NAVIGATION_IMPOSSIBLE
            return vehicle

        details = await self.extractor.extract(context)
        for name, value in details.items():
            # Detail values override preview values, empty ones never erase them
            if value:
                setattr(vehicle, name, value)

        vehicle.price = normalize_price(vehicle.price)
        vehicle.phone = normalize_phone(vehicle.phone, self.settings.phone_country_prefix)
        return vehicle

    def _log(self, message: str) -> LogEvent:
        logger.info(message)
        return LogEvent(message=message)
