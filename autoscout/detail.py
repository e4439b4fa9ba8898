"""
Per-vehicle field extraction from a listing detail page.
"""
import logging
import re
from typing import Dict, Sequence

from .cascade import FieldSpec, QUERY_SCRIPT, ELEMENT_EXISTS_SCRIPT
from .rate_limit import sleep_ms
from .utils import clean_text, normalize_price, infer_fuel_from_url

logger = logging.getLogger(__name__)


OVERVIEW_ITEM = ".VehicleOverview_itemContainer__XSLWi:nth-child({n}) > .VehicleOverview_itemText__AI4dA"

PHONE_BUTTON = "button#call-desktop-button"
PHONE_TEXT = "#call-desktop-button > span"


def _is_price(text: str) -> bool:
    return "€" in (text or "")


def _is_mileage(text: str) -> bool:
    return "km" in (text or "") or re.search(r"\d+\s*\d+", text or "") is not None


# Precise selector group first, alternates after it
DETAIL_FIELDS: Sequence[FieldSpec] = (
    FieldSpec(
        "price",
        groups=(
            ("span.PriceInfo_price__XU0aF", 'p[data-testid="regular-price"]'),
            (".sc-font-xl", '[data-item-name="price"]', ".cldt-price"),
        ),
        accept=_is_price,
        clean=normalize_price,
    ),
    FieldSpec(
        "mileage",
        groups=(
            (OVERVIEW_ITEM.format(n=1),),
            ('[data-type="mileage"]', ".cldt-stage-primary-keyfact"),
        ),
        accept=_is_mileage,
    ),
    FieldSpec(
        "transmission",
        groups=((OVERVIEW_ITEM.format(n=2),), ('[data-type="transmission"]',)),
    ),
    FieldSpec(
        "year",
        groups=((OVERVIEW_ITEM.format(n=3),), ('[data-type="first-registration"]',)),
    ),
    FieldSpec(
        "fuel_type",
        groups=((OVERVIEW_ITEM.format(n=4),), ('[data-type="fuel-type"]',)),
        fallback=infer_fuel_from_url,
    ),
    FieldSpec(
        "power",
        groups=((OVERVIEW_ITEM.format(n=5),), ('[data-type="power"]',)),
    ),
    FieldSpec(
        "location",
        groups=(
            ("a.LocationWithPin_locationItem__tK1m5",),
            ('[data-item-name="vendor-location"]', ".cldt-vendor-contact-location"),
        ),
    ),
    FieldSpec(
        "seller",
        groups=(
            ('[data-cy="dealer-name"]',),
            ('[data-item-name="vendor-company-name"]', ".cldt-vendor-contact-name"),
        ),
    ),
    FieldSpec(
        "image_url",
        groups=((".image-gallery-center img",), (".gallery-image", ".cldt-stage img")),
        attribute="src",
    ),
)


class DetailExtractor:
    """Runs every field cascade on the current page, then reveals the phone number."""

    def __init__(self, fields: Sequence[FieldSpec] = DETAIL_FIELDS, phone_reveal_settle_ms: int = 500):
        self.fields = fields
        self.phone_reveal_settle_ms = phone_reveal_settle_ms

    async def extract(self, context) -> Dict[str, str]:
        """
        Return a partial record: field name -> value, empty string on a miss.

        Each field is isolated; a selector that blows up on an unexpected DOM
        only empties that field.
        """
        details: Dict[str, str] = {}
        for spec in self.fields:
            try:
                details[spec.name] = await spec.extract(context)
            except Exception as e:
                logger.debug("Field %s extraction failed: %s", spec.name, e)
                details[spec.name] = ""

        try:
            details["phone"] = await self.reveal_phone(context)
        except Exception as e:
            logger.warning("Error retrieving phone number: %s", e)
            details["phone"] = ""

        return details

    async def reveal_phone(self, context) -> str:
        """Click the "call" button when present and read the number it reveals."""
        exists = await context.evaluate(ELEMENT_EXISTS_SCRIPT, PHONE_BUTTON)
        if not exists:
            return ""

        logger.debug("Phone button found, clicking to reveal number")
        await context.click(PHONE_BUTTON)
        await sleep_ms(self.phone_reveal_settle_ms)

        values = await context.evaluate(QUERY_SCRIPT, [PHONE_TEXT, "text"])
        return clean_text(values[0]) if values else ""
