"""
Tests for selector cascade resolution.
"""
from .cascade import resolve, FieldSpec
from .testing import FakePage, FakePageContext, run
from .utils import infer_fuel_from_url

URL = "https://www.autoscout24.be/fr/offres/bmw-320-diesel-1"


def _context(elements, raise_on=()):
    ctx = FakePageContext({URL: FakePage(elements=elements)}, raise_on=raise_on)
    run(ctx.navigate(URL, "networkidle", 1000))
    return ctx


def test_first_matching_group_wins():
    ctx = _context({".a": ["A value"], ".b": ["B value"]})
    result = run(resolve(ctx, [(".a",), (".b",)]))
    assert result.value == "A value"
    assert result.matched_group_index == 0
    assert ctx.queries == [".a"]


def test_later_group_used_when_earlier_misses():
    ctx = _context({".b": ["B value"], ".c": ["C value"]})
    result = run(resolve(ctx, [(".a",), (".b",), (".c",)]))
    assert result.values == ("B value",)
    assert result.matched_group_index == 1
    # groups after the match are never consulted
    assert ctx.queries == [".a", ".b"]


def test_group_returns_all_its_elements():
    ctx = _context({".b1": ["one"], ".b2": ["two", "three"]})
    result = run(resolve(ctx, [(".a",), (".b1", ".b2")]))
    assert result.values == ("one", "two", "three")
    assert result.matched_group_index == 1


def test_total_miss_is_empty_not_error():
    ctx = _context({})
    result = run(resolve(ctx, [(".a",), (".b",)]))
    assert not result.matched
    assert result.value == ""
    assert result.values == ()


def test_accept_filter_rejects_elements():
    ctx = _context({".a": ["Prix sur demande"], ".b": ["€ 9 990"]})
    result = run(resolve(ctx, [(".a",), (".b",)], accept=lambda v: "€" in v))
    assert result.value == "€ 9 990"
    assert result.matched_group_index == 1


def test_blank_values_do_not_count_as_match():
    ctx = _context({".a": ["", ""], ".b": ["x"]})
    result = run(resolve(ctx, [(".a",), (".b",)]))
    assert result.matched_group_index == 1


def test_field_spec_cleans_value():
    ctx = _context({".loc": ["  1000   Bruxelles \n"]})
    spec = FieldSpec("location", groups=((".loc",),))
    assert run(spec.extract(ctx)) == "1000 Bruxelles"


def test_field_spec_url_fallback():
    ctx = _context({})
    spec = FieldSpec("fuel_type", groups=((".fuel",), ('[data-type="fuel-type"]',)), fallback=infer_fuel_from_url)
    assert run(spec.extract(ctx)) == "Diesel"


def test_field_spec_selector_match_beats_fallback():
    ctx = _context({'[data-type="fuel-type"]': ["Essence"]})
    spec = FieldSpec("fuel_type", groups=((".fuel",), ('[data-type="fuel-type"]',)), fallback=infer_fuel_from_url)
    assert run(spec.extract(ctx)) == "Essence"
