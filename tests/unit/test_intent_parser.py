import pytest

from cart_pilot.intent.parser import MIN_CONFIDENCE, IntentParser


@pytest.fixture
def parser() -> IntentParser:
    return IntentParser()


def test_full_clothing_request(parser):
    intent = parser.parse("Add a blue men's shirt size M under $30 to cart")

    assert intent.category == "clothing"
    assert intent.subcategory == "shirt"
    assert intent.color == "blue"
    assert intent.gender == "men's"
    assert intent.size == "M"
    assert intent.max_price == 30
    assert intent.confidence == 30 + 20 + 15 + 15 + 10
    assert parser.is_actionable(intent)


def test_possessive_does_not_read_as_size(parser):
    intent = parser.parse("women's hoodie")
    assert intent.gender == "women's"
    assert intent.size is None


def test_shoe_sizes_for_sports(parser):
    intent = parser.parse("nike running shoes size 10.5")
    assert intent.category == "sports"
    assert intent.size == "10.5"
    assert intent.brand == "nike"


def test_price_phrasings(parser):
    assert parser.parse("lamp 40 or less").max_price == 40
    assert parser.parse("headphones less than $120").max_price == 120
    assert parser.parse("a mug max 15").max_price == 15


def test_keywords_skip_stop_words_and_attributes(parser):
    intent = parser.parse("Find a red ceramic coffee mug for the kitchen")
    assert intent.keywords == ["ceramic", "coffee", "mug", "kitchen"]


def test_confidence_is_capped(parser):
    intent = parser.parse("sony black headphones for kids size l under $50")
    assert intent.confidence <= 100


def test_vague_request_is_not_actionable(parser):
    intent = parser.parse("something nice")
    assert intent.confidence < MIN_CONFIDENCE
    assert not parser.is_actionable(intent)


def test_search_query(parser):
    clothing = parser.parse("blue men's shirt")
    assert parser.generate_search_query(clothing) == "men's blue shirt"

    gadget = parser.parse("sony wireless headphones")
    assert parser.generate_search_query(gadget) == "sony wireless headphones"
