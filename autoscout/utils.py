"""
Utility functions for text cleaning, field normalization, URLs and logging.
"""
import logging
import re
from datetime import datetime, timezone
from typing import List, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode


# Superscript footnote marker rendered right after some prices, e.g. "20 0001, 5"
PRICE_ARTIFACT_RE = re.compile(r"(\d)\s*1,\s*5$")

PAGE_PARAM = "page"


def init_logger(
    name: str = "autoscout",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[str] = "autoscout.log"
) -> logging.Logger:
    """Initialize logger with console and optional file handlers."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    console_level_num = getattr(logging, console_level.upper(), logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(console_level_num)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:  # Create file handler only if log_file is provided
        file_level_num = getattr(logging, file_level.upper(), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level_num)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def clean_text(s: Optional[str]) -> str:
    """Clean and normalize text by removing extra whitespace."""
    if not s:
        return ""
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def normalize_price(price_text: Optional[str]) -> str:
    """
    Clean a raw price string.

    Collapses whitespace (including non-breaking spaces) and strips the
    trailing "1, 5" footnote artifact, so "20 0001, 5" becomes "20 000".
    """
    s = clean_text((price_text or "").replace("\xa0", " "))
    return PRICE_ARTIFACT_RE.sub(r"\1", s)


def normalize_phone(phone: Optional[str], country_prefix: str = "32") -> str:
    """
    Reduce a phone number to digits in international form without "+".

    A national number starting with "0" gets the country prefix instead of the
    leading zero; a trunk "0" kept after the prefix is dropped.
    """
    if not phone:
        return ""

    cleaned = re.sub(r"\D", "", phone)
    if not country_prefix:
        return cleaned

    n = len(country_prefix)
    if cleaned.startswith(country_prefix) and len(cleaned) > n and cleaned[n] == "0":
        cleaned = country_prefix + cleaned[n + 1:]

    if not cleaned.startswith(country_prefix) and cleaned.startswith("0"):
        cleaned = country_prefix + cleaned[1:]

    return cleaned


def parse_int_value(text: Optional[str]) -> Optional[int]:
    """
    Extract the integer written in a price/mileage/year/power string.

    "€ 20 000,-" -> 20000, "125 000 km" -> 125000, "110 kW (150 PS)" -> 110.
    """
    if not text:
        return None

    s = normalize_price(text)
    m = re.search(r"\d[\d\s.,']*", s)
    if not m:
        return None

    # Keep only the leading digit run; decimal cents after "," are dropped
    chunk = re.split(r",\d{1,2}\b|,-", m.group(0))[0]
    digits = re.sub(r"\D", "", chunk)
    try:
        return int(digits)
    except ValueError:
        return None


def parse_year(text: Optional[str]) -> Optional[int]:
    """Pick the registration year out of strings like "04/2018" or "2018"."""
    if not text:
        return None
    cand = re.findall(r"\b(19[5-9]\d|20[0-4]\d)\b", text)
    return int(cand[0]) if cand else None


def split_brand_model(title: str) -> Tuple[str, str]:
    """Split a listing title into (brand, model); both empty for one-word titles."""
    parts = clean_text(title).split(" ")
    if len(parts) > 1:
        return parts[0], " ".join(parts[1:])
    return "", ""


def compile_zero_count_markers(markers: Sequence[str]) -> List[Pattern]:
    """
    Compile "0 Offers ..." style banners so they only match a count of exactly zero.

    The leading "0" must not continue a number: "10 Offers" or "1.230 Offres"
    are not matches, "Vehicles\\n0 Offers" is.
    """
    return [re.compile(r"(?<![\d.,])" + re.escape(marker)) for marker in markers]


def has_zero_count_marker(text: Optional[str], patterns: Sequence[Pattern]) -> bool:
    """True when the page text shows one of the compiled zero-results banners."""
    if not text:
        return False
    return any(p.search(text) for p in patterns)


def infer_fuel_from_url(url: str) -> str:
    """Guess the fuel type from keywords in a listing URL."""
    u = (url or "").lower()
    if "diesel" in u:
        return "Diesel"
    if "essence" in u:
        return "Essence"
    if "electrique" in u:
        return "Électrique"
    if "hybrid" in u:
        return "Hybride"
    return ""


def strip_page_param(url: str) -> str:
    """Remove the page number query parameter, keeping every other parameter."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != PAGE_PARAM]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def with_page_param(url: str, page: int) -> str:
    """Return the search URL pointing at the given results page."""
    parts = urlsplit(strip_page_param(url))
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.append((PAGE_PARAM, str(page)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
