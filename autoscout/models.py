"""
Data models for the AutoScout24 listing crawler.
"""
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Tuple, Any

from .cancellation import CancellationToken


@dataclass
class ListingCandidate:
    """A listing link collected from a search-results page, with preview fields."""

    url: str
    title: str = ""
    brand: str = ""
    model: str = ""
    price: str = ""
    mileage: str = ""
    year: str = ""


@dataclass
class VehicleRecord:
    """One extracted vehicle listing. Written once, never updated after collection."""

    url: str
    page: int

    # Listing fields
    title: str = ""
    brand: str = ""
    model: str = ""
    price: str = ""
    year: str = ""
    mileage: str = ""
    fuel_type: str = ""
    transmission: str = ""
    power: str = ""
    location: str = ""
    image_url: str = ""
    phone: str = ""
    seller: str = ""

    # Provenance
    note: str = ""
    extracted_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Ordered alternative CSS selectors for one logical field
SelectorGroup = Tuple[str, ...]


@dataclass(frozen=True)
class CascadeResult:
    """Outcome of a selector cascade: the values of the first matching group."""

    values: Tuple[Any, ...] = ()
    matched_group_index: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.matched_group_index is not None

    @property
    def value(self) -> Any:
        return self.values[0] if self.values else ""


@dataclass
class CrawlJob:
    """
    One scraping run.

    Owned by a single orchestrator run; carries its own cancellation token and
    browser context so independent jobs never share state.
    """

    base_search_url: str
    max_pages: int
    job_id: str = ""
    current_page: int = 1
    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    collected_vehicles: List[VehicleRecord] = field(default_factory=list)
    context: Optional[Any] = None
    started: bool = False

    @property
    def cancelled(self) -> bool:
        return self.cancel_token.is_requested()

    def request_cancel(self) -> None:
        self.cancel_token.request()
