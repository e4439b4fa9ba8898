from .collector import ListingCollector, LISTING_CARD_GROUPS
from .config import LISTING_URL_PATTERNS
from .testing import FakePage, FakePageContext, run

SEARCH = "https://www.autoscout24.be/fr/lst/bmw?page=1"


def _collect(page: FakePage):
    ctx = FakePageContext({SEARCH: page})
    run(ctx.navigate(SEARCH, "networkidle", 1000))
    return ctx, run(ListingCollector(LISTING_URL_PATTERNS).collect(ctx))


def test_cards_from_first_matching_group():
    page = FakePage(cards={
        LISTING_CARD_GROUPS[1][0]: [
            {"url": "https://x/offres/bmw-1", "title": "BMW 118i Sport Line", "price": "€ 15 9001, 5",
             "mileage": "80 000 km", "year": "05/2019"},
            {"url": "https://x/offres/bmw-2", "title": "Mini", "price": "", "mileage": "", "year": ""},
        ],
        LISTING_CARD_GROUPS[3][0]: [{"url": "https://x/voiture-occasion/detail/other", "title": "Other"}],
    })
    ctx, (listings, used_fallback) = _collect(page)

    assert used_fallback is False
    assert [l.url for l in listings] == ["https://x/offres/bmw-1", "https://x/offres/bmw-2"]
    first = listings[0]
    assert (first.brand, first.model) == ("BMW", "118i Sport Line")
    assert first.price == "€ 15 900"
    assert first.mileage == "80 000 km"
    assert first.year == "05/2019"
    assert (listings[1].brand, listings[1].model) == ("", "")
    # group 3 is never consulted once group 1 matched
    assert ctx.queries == [LISTING_CARD_GROUPS[0][0], LISTING_CARD_GROUPS[1][0]]


def test_links_outside_listing_patterns_are_ignored():
    page = FakePage(cards={LISTING_CARD_GROUPS[0][0]: [
        {"url": "https://x/fr/lst/bmw?page=2", "title": "Next"},
        {"url": "https://x/offres/audi-1", "title": "Audi A3"},
    ]})
    _, (listings, _) = _collect(page)
    assert [l.url for l in listings] == ["https://x/offres/audi-1"]


def test_url_pattern_fallback_when_no_card_matches():
    page = FakePage(links=[
        {"url": "https://x/voiture-occasion/detail/vw-golf-1", "title": "VW Golf"},
        {"url": "https://x/fr/contact", "title": "Contact"},
        {"url": "https://x/voiture-occasion/detail/vw-golf-1", "title": "VW Golf"},
        {"url": "https://x/offres/peugeot-208", "title": "Title not found"},
    ])
    _, (listings, used_fallback) = _collect(page)

    assert used_fallback is True
    assert [l.url for l in listings] == [
        "https://x/voiture-occasion/detail/vw-golf-1",
        "https://x/offres/peugeot-208",
    ]
    assert listings[0].title == "VW Golf"
    assert listings[0].brand == ""


def test_empty_page_yields_no_listings():
    _, (listings, used_fallback) = _collect(FakePage())
    assert listings == []
    assert used_fallback is True
