"""
Crawl engine settings and environment overrides.
"""
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Tuple

logger = logging.getLogger(__name__)

ENV_PREFIX = "AUTOSCOUT_"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

# Locale-specific "no results" banners shown past the last results page
NO_RESULTS_MARKERS = (
    "0 Offres pour votre recherche",
    "0 Aanbiedingen voor uw zoekopdracht",
    "0 Offers for your search",
)

LISTING_URL_PATTERNS = (
    "/voiture-occasion/detail/",
    "/offres/",
)


def get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.exception("Invalid %s: %r", name, raw)
        return default


def get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class CrawlSettings:
    """Every tunable of a crawl run. Durations are in milliseconds."""

    max_pages: int = 20

    # Navigation policy
    navigation_timeout_ms: int = 45_000
    fallback_timeout_ms: int = 60_000
    primary_settle_ms: int = 1_500
    search_fallback_settle_ms: int = 5_000
    listing_fallback_settle_ms: int = 3_000

    # Interactive steps
    consent_timeout_ms: int = 2_000
    phone_reveal_settle_ms: int = 500

    # Politeness
    min_listing_delay_ms: int = 3_000
    max_listing_delay_ms: int = 7_000
    page_delay_ms: int = 5_000

    phone_country_prefix: str = "32"

    # Browser
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    locale: str = "fr-BE"

    no_results_markers: Tuple[str, ...] = field(default=NO_RESULTS_MARKERS)
    listing_url_patterns: Tuple[str, ...] = field(default=LISTING_URL_PATTERNS)

    @classmethod
    def from_env(cls, **overrides) -> "CrawlSettings":
        """Build settings from AUTOSCOUT_* variables, e.g. AUTOSCOUT_MAX_PAGES=5."""
        values = {}
        for f in fields(cls):
            env_name = ENV_PREFIX + f.name.upper()
            if f.type is int:
                values[f.name] = get_int_env(env_name, f.default)
            elif f.type is bool:
                values[f.name] = get_bool_env(env_name, f.default)
            elif f.type is str:
                values[f.name] = os.getenv(env_name, f.default)
        values.update(overrides)
        return cls(**values)

    def validate(self) -> None:
        """Reject inconsistent bounds before a job starts."""
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1, got {self.max_pages}")
        for name in (
            "navigation_timeout_ms", "fallback_timeout_ms", "primary_settle_ms",
            "search_fallback_settle_ms", "listing_fallback_settle_ms",
            "consent_timeout_ms", "phone_reveal_settle_ms",
            "min_listing_delay_ms", "max_listing_delay_ms", "page_delay_ms",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.min_listing_delay_ms > self.max_listing_delay_ms:
            raise ValueError(
                f"min_listing_delay_ms ({self.min_listing_delay_ms}) exceeds "
                f"max_listing_delay_ms ({self.max_listing_delay_ms})"
            )
