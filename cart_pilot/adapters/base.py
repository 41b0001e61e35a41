from __future__ import annotations

import logging
import re
from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

from cart_pilot.adapters.views import ProductInfo
from cart_pilot.intent.views import ShoppingIntent

logger = logging.getLogger(__name__)

CATEGORY_MATCH_SCORE = 30
WITHIN_BUDGET_SCORE = 25
OVER_BUDGET_PENALTY = -10
KEYWORD_SCORE = 10
GENDER_SCORE = 15
COLOR_SCORE = 20

_WORD_RE = re.compile(r"[a-z]+(?:'s)?")
_GENDER_WORDS = {"men's": 'men', 'mens': 'men', "women's": 'women', 'womens': 'women'}


@runtime_checkable
class SiteAdapter(Protocol):
	"""
	Store-specific steps of the scripted add-to-cart flow.

	Every step reports failure through its return value (an empty list, None
	or False); exceptions are reserved for broken pages and bubble up to
	``ShoppingFlow``.
	"""

	site_name: str

	async def find_products(self, intent: ShoppingIntent) -> list[ProductInfo]: ...

	async def select_best_product(self, products: Sequence[ProductInfo], intent: ShoppingIntent) -> Optional[ProductInfo]: ...

	async def add_to_cart(self, product: ProductInfo) -> bool: ...

	async def verify_cart_addition(self, product: ProductInfo) -> bool: ...

	async def get_product_info(self, product: ProductInfo) -> ProductInfo: ...


@runtime_checkable
class LoginSiteAdapter(SiteAdapter, Protocol):
	"""Adapter for a store that puts its catalogue behind a login form."""

	async def is_login_page(self) -> bool: ...

	async def login(self, username: str, password: str) -> bool: ...


def _words(text: str) -> set[str]:
	return {_GENDER_WORDS.get(word, word) for word in _WORD_RE.findall(text.lower())}


def score_product(
	product: ProductInfo,
	intent: ShoppingIntent,
	category_keywords: Optional[Mapping[str, Sequence[str]]] = None,
) -> int:
	"""
	Relevance of a listed product to a shopping intent.

	Category +30, price within budget +25 (over budget -10), +10 per keyword,
	gender +15, colour +20. Title and description are both searched. When
	``category_keywords`` is given, a category matches through its keyword
	list instead of its name, for stores whose listings carry no category.
	"""
	title = product.name.lower()
	haystack = f'{title} {(product.description or "").lower()}'
	category = (product.category or '').lower()
	score = 0

	if intent.category:
		if category_keywords is not None:
			terms = category_keywords.get(intent.category, ())
			if any(term in haystack for term in terms):
				score += CATEGORY_MATCH_SCORE
		elif intent.category in category or intent.category in title:
			score += CATEGORY_MATCH_SCORE

	price = product.price_value
	if intent.max_price and price is not None:
		score += WITHIN_BUDGET_SCORE if price <= intent.max_price else OVER_BUDGET_PENALTY

	for keyword in intent.keywords:
		if keyword.lower() in haystack:
			score += KEYWORD_SCORE

	if intent.gender:
		gender = _GENDER_WORDS.get(intent.gender.lower(), intent.gender.lower())
		if gender in _words(title):
			score += GENDER_SCORE

	if intent.color and intent.color.lower() in haystack:
		score += COLOR_SCORE

	logger.debug(f'Scored "{product.name}" at {score}')
	return score


def pick_best_product(
	products: Sequence[ProductInfo],
	intent: ShoppingIntent,
	category_keywords: Optional[Mapping[str, Sequence[str]]] = None,
) -> Optional[ProductInfo]:
	"""
	Highest-scoring product that is not already in the cart.

	Ties go to the earlier listing. When nothing scores above zero the first
	available product is returned; None only when every product is in the cart.
	"""
	available = [product for product in products if not product.in_cart]
	if not available:
		logger.warning(f'No available products to add ({len(products)} listed, all already in the cart)')
		return None

	best, best_score = None, 0
	for product in available:
		score = score_product(product, intent, category_keywords)
		if score > best_score:
			best, best_score = product, score
	if best is None:
		best = available[0]
	logger.info(f'Selected product "{best.name}" with score {best_score}')
	return best
