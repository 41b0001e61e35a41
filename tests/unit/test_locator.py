import pytest

from cart_pilot.dom.locator import Locator, normalize_text, parse_locator, resolve_all, resolve_first
from tests.conftest import FakeElement, FakePage


def test_plain_selector_passes_through():
    assert parse_locator("#add-to-cart-button") == Locator(selector="#add-to-cart-button")
    assert parse_locator("").selector == "body"


def test_contains_with_descendant():
    locator = parse_locator('.card:contains("Blue") a')
    assert locator == Locator(selector=".card", text="Blue", within="a")
    assert str(locator) == '.card:contains("Blue") a'


def test_bare_contains_matches_any_element():
    locator = parse_locator(":contains('Add to cart')")
    assert locator.selector == "*"
    assert locator.text == "Add to cart"


def test_normalize_text_collapses_whitespace():
    assert normalize_text("  Blue \n\n  Headphones\t") == "Blue Headphones"


@pytest.mark.asyncio
async def test_text_filter_and_descendant_resolution():
    red_link = FakeElement("Red", selectors={"a"})
    blue_link = FakeElement("Blue", selectors={"a"})
    page = FakePage(
        [
            FakeElement("Red headphones", selectors={".card"}, children=[red_link]),
            FakeElement("Blue headphones", selectors={".card"}, children=[blue_link]),
        ]
    )

    assert await resolve_all(page, '.card:contains("Blue") a') == [blue_link]
    assert await resolve_first(page, '.card:contains("headphones") a') is red_link
    assert await resolve_first(page, '.card:contains("Green")') is None
