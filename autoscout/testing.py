"""
Shared test helpers: a scripted in-memory browser page standing in for Playwright.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .cascade import QUERY_SCRIPT, ELEMENT_EXISTS_SCRIPT, CURRENT_URL_SCRIPT
from .collector import LISTING_CARDS_SCRIPT, LINK_FALLBACK_SCRIPT, LISTING_CARD_GROUPS
from .config import CrawlSettings
from .detail import PHONE_BUTTON, PHONE_TEXT, OVERVIEW_ITEM
from .orchestrator import PAGE_TEXT_SCRIPT
from .utils import with_page_param

SEARCH_URL = "https://www.autoscout24.be/fr/lst/bmw?atype=C&sort=standard"
NO_RESULTS_TEXT = "Vehicles\n0 Offers for your search\nSave search"


@dataclass
class FakePage:
    text: str = ""
    elements: Dict[str, List[str]] = field(default_factory=dict)
    cards: Dict[str, List[dict]] = field(default_factory=dict)
    links: List[dict] = field(default_factory=list)
    buttons: Set[str] = field(default_factory=set)
    phone: str = ""


class FakePageContext:
    """Implements the PageContext capability over a dict of FakePages."""

    def __init__(self, pages: Dict[str, FakePage], fail=None, raise_on=()):
        self.pages = pages
        self.fail = fail or {}  # url -> wait_until values that time out
        self.raise_on = set(raise_on)  # selectors whose evaluation throws
        self.url = None
        self.navigations = []
        self.queries = []
        self.clicks = []
        self.close_calls = 0
        self.on_navigate = None

    @property
    def page(self) -> FakePage:
        return self.pages.get(self.url) or FakePage()

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def search_navigations(self):
        return [url for url, _, _ in self.navigations if "/lst/" in url]

    async def navigate(self, url, wait_until, timeout_ms):
        self.navigations.append((url, wait_until, timeout_ms))
        if self.on_navigate is not None:
            self.on_navigate(url)
        if wait_until in self.fail.get(url, ()):
            raise TimeoutError(f"Timeout {timeout_ms}ms exceeded navigating to {url}")
        self.url = url

    async def evaluate(self, script, arg=None):
        page = self.page
        if script == QUERY_SCRIPT:
            selector, _attribute = arg
            self.queries.append(selector)
            values = []
            for part in selector.split(", "):
                if part in self.raise_on:
                    raise RuntimeError(f"Unexpected DOM shape for {part}")
                values.extend(page.elements.get(part, []))
            return values
        if script == LISTING_CARDS_SCRIPT:
            selector, patterns = arg
            self.queries.append(selector)
            return [c for c in page.cards.get(selector, []) if any(p in c["url"] for p in patterns)]
        if script == LINK_FALLBACK_SCRIPT:
            return [row for row in page.links if any(p in row["url"].lower() for p in arg)]
        if script == ELEMENT_EXISTS_SCRIPT:
            return arg in page.buttons
        if script == CURRENT_URL_SCRIPT:
            return self.url
        if script == PAGE_TEXT_SCRIPT:
            return page.text
        raise AssertionError(f"Unexpected script: {script!r}")

    async def wait_for_selector(self, selector, timeout_ms):
        if selector not in self.page.buttons:
            raise TimeoutError(f"Waiting for selector {selector} failed: timeout {timeout_ms}ms exceeded")

    async def click(self, selector):
        page = self.page
        self.clicks.append((self.url, selector))
        if selector not in page.buttons:
            raise RuntimeError(f"No node found for selector: {selector}")
        if selector == PHONE_BUTTON:
            page.elements[PHONE_TEXT] = [page.phone]

    async def close(self):
        self.close_calls += 1


def listing_url(page_num: int, index: int) -> str:
    return f"https://www.autoscout24.be/fr/offres/bmw-320-diesel-{page_num}-{index}"


def detail_page(phone: str = "0498 12 34 56") -> FakePage:
    return FakePage(
        elements={
            "span.PriceInfo_price__XU0aF": ["€ 20 0001, 5"],
            OVERVIEW_ITEM.format(n=1): ["125 000 km"],
            OVERVIEW_ITEM.format(n=2): ["Automatique"],
            OVERVIEW_ITEM.format(n=3): ["04/2018"],
            OVERVIEW_ITEM.format(n=4): ["Diesel"],
            OVERVIEW_ITEM.format(n=5): ["110 kW (150 CH)"],
            "a.LocationWithPin_locationItem__tK1m5": ["1000 Bruxelles"],
            ".image-gallery-center img": ["https://prod.pictures.autoscout24.net/a.jpg"],
        },
        buttons={PHONE_BUTTON} if phone else set(),
        phone=phone,
    )


def build_site(listings_per_page: List[int], search_url: str = SEARCH_URL) -> Dict[str, FakePage]:
    """
    Search pages 1..n with the given listing counts; the page after the last
    one shows the zero-results banner. Every listing has a full detail page.
    """
    pages: Dict[str, FakePage] = {}
    card_selector = LISTING_CARD_GROUPS[0][0]
    for page_num, count in enumerate(listings_per_page, 1):
        cards = []
        for index in range(1, count + 1):
            url = listing_url(page_num, index)
            cards.append({
                "url": url,
                "title": f"BMW 320d Touring {page_num}-{index}",
                "price": "€ 19 500",
                "mileage": "130 000 km",
                "year": "2018",
            })
            pages[url] = detail_page()
        pages[with_page_param(search_url, page_num)] = FakePage(
            text=f"{count} Offers for your search", cards={card_selector: cards},
            buttons={'button[data-cy="consent-layer-accept"]'} if page_num == 1 else set(),
        )
    pages[with_page_param(search_url, len(listings_per_page) + 1)] = FakePage(text=NO_RESULTS_TEXT)
    return pages


def fast_settings(**overrides) -> CrawlSettings:
    values = dict(
        max_pages=20,
        primary_settle_ms=0,
        search_fallback_settle_ms=0,
        listing_fallback_settle_ms=0,
        consent_timeout_ms=0,
        phone_reveal_settle_ms=0,
        min_listing_delay_ms=0,
        max_listing_delay_ms=0,
        page_delay_ms=0,
    )
    values.update(overrides)
    return CrawlSettings(**values)


def run(coro):
    return asyncio.run(coro)


async def _drain(agen):
    return [event async for event in agen]


def collect_events(agen):
    return asyncio.run(_drain(agen))
