"""
Listing collection from a search-results page.
"""
import logging
from typing import Dict, List, Sequence, Tuple

from .models import ListingCandidate, SelectorGroup
from .cascade import resolve
from .utils import clean_text, normalize_price, split_brand_model

logger = logging.getLogger(__name__)


# Listing-card link selectors, newest site design first
LISTING_CARD_GROUPS: Sequence[SelectorGroup] = (
    ("article.cldt-summary-full-item a.cldt-summary-full-item-header",),
    ('article a[data-item-name="detail-page-link"]',),
    ("div.listing-item a.listing-item-link",),
    ('a[href*="/voiture-occasion/detail/"]',),
    ('a[href*="/offres/"]',),
)

# Preview fields read from the card around each matching link
LISTING_CARDS_SCRIPT = """
([selector, patterns]) => Array.from(document.querySelectorAll(selector))
  .filter((link) => link.href && patterns.some((p) => link.href.includes(p)))
  .map((link) => {
    const read = (el) => (el ? (el.innerText || el.textContent || '').trim() : '');
    const titleEl = link.querySelector('h2, .cldt-summary-title, [data-item-name="title"]');
    const article = link.closest('article');
    const pick = (sel) => (article ? article.querySelector(sel) : null);
    return {
      url: link.href,
      title: titleEl ? read(titleEl) : read(link).split('\\n')[0],
      price: read(pick('.cldt-price, [data-item-name="price"], .sc-font-xl, p[data-testid="regular-price"]')),
      mileage: read(pick('[data-type="mileage"], .cldt-stage-primary-keyfact')),
      year: read(pick('[data-type="first-registration"], [data-item-name="registration-date"]')),
    };
  })
"""

# Any visible link whose URL looks like a listing detail page
LINK_FALLBACK_SCRIPT = """
(patterns) => Array.from(document.querySelectorAll('a[href]'))
  .filter((link) => {
    const href = link.href.toLowerCase();
    return patterns.some((p) => href.includes(p)) && !href.includes('#') && link.offsetParent !== null;
  })
  .map((link) => ({ url: link.href, title: (link.innerText || '').trim() || 'Title not found' }))
"""


def to_candidate(row: Dict, infer_brand: bool = True) -> ListingCandidate:
    """Convert a raw card dict from the page into a ListingCandidate."""
    title = clean_text(row.get("title", ""))
    brand, model = split_brand_model(title) if infer_brand else ("", "")
    return ListingCandidate(
        url=row.get("url", ""),
        title=title,
        brand=brand,
        model=model,
        price=normalize_price(row.get("price", "")),
        mileage=clean_text(row.get("mileage", "")),
        year=clean_text(row.get("year", "")),
    )


class ListingCollector:
    """Collects candidate listing URLs plus preview fields from the current page."""

    def __init__(self, url_patterns: Sequence[str], card_groups: Sequence[SelectorGroup] = LISTING_CARD_GROUPS):
        self.url_patterns = list(url_patterns)
        self.card_groups = card_groups

    async def collect(self, context) -> Tuple[List[ListingCandidate], bool]:
        """
        Return the page's listings in document order, deduplicated by URL.

        Card selectors are tried first; when none matches, every visible link
        whose URL contains a listing pattern is used instead. An empty list
        means the page has no recognizable listings. The flag tells whether the
        URL pattern scan was needed.
        """
        used_fallback = False
        result = await resolve(context, self.card_groups, script=LISTING_CARDS_SCRIPT, extra=self.url_patterns)
        rows = list(result.values)

        if not rows:
            logger.info("No listing cards matched; falling back to URL pattern scan")
            rows = await context.evaluate(LINK_FALLBACK_SCRIPT, self.url_patterns) or []
            used_fallback = True
        else:
            logger.debug("Listing cards matched selector group %d", result.matched_group_index)

        candidates: List[ListingCandidate] = []
        seen = set()
        for row in rows:
            candidate = to_candidate(row, infer_brand=not used_fallback)
            if not candidate.url or candidate.url in seen:
                continue
            seen.add(candidate.url)
            candidates.append(candidate)
        return candidates, used_fallback
