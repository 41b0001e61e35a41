"""
Rule-based shopping intent extraction.

Used by callers that want a quick structured read of a request (for example to
build a site search query) without a model round-trip. Matching is keyword and
regex based; the confidence score says how many attributes were recognised.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

from cart_pilot.intent.views import ShoppingIntent

logger = logging.getLogger(__name__)

# Below this score the request is too vague to act on without a planner
MIN_CONFIDENCE = 30

CATEGORIES: dict[str, list[str]] = {
	'clothing': ['shirt', 't-shirt', 'tshirt', 'pants', 'jeans', 'dress', 'jacket', 'sweater', 'hoodie', 'shorts'],
	'electronics': ['phone', 'laptop', 'computer', 'tablet', 'headphones', 'mouse', 'keyboard', 'monitor', 'tv'],
	'home': ['mug', 'cup', 'plate', 'bowl', 'pillow', 'blanket', 'lamp', 'chair', 'table'],
	'sports': ['shoes', 'sneakers', 'running', 'basketball', 'football', 'tennis', 'gym', 'fitness'],
	'books': ['book', 'novel', 'textbook', 'magazine', 'journal'],
	'beauty': ['makeup', 'skincare', 'perfume', 'shampoo', 'lotion', 'cream'],
}

CLOTHING_SIZES = ['xs', 'extra small', 's', 'small', 'm', 'medium', 'l', 'large', 'xl', 'extra large', 'xxl']
SHOE_SIZES = ['6', '6.5', '7', '7.5', '8', '8.5', '9', '9.5', '10', '10.5', '11', '11.5', '12']

COLORS = ['black', 'white', 'red', 'blue', 'green', 'yellow', 'orange', 'purple', 'pink', 'brown', 'gray', 'grey', 'navy', 'beige']

PRICE_PATTERNS = [
	re.compile(r'under\s*\$?(\d+)', re.IGNORECASE),
	re.compile(r'below\s*\$?(\d+)', re.IGNORECASE),
	re.compile(r'less\s+than\s*\$?(\d+)', re.IGNORECASE),
	re.compile(r'\$?(\d+)\s*or\s+less', re.IGNORECASE),
	re.compile(r'maximum\s*\$?(\d+)', re.IGNORECASE),
	re.compile(r'max\s*\$?(\d+)', re.IGNORECASE),
]

GENDERS = ["men's", 'mens', "women's", 'womens', 'unisex', 'boys', 'girls', 'kids']

BRANDS = ['nike', 'adidas', 'apple', 'samsung', 'sony', 'amazon', 'target', 'walmart']

STOP_WORDS = frozenset(
	['add', 'a', 'an', 'the', 'to', 'cart', 'find', 'get', 'buy', 'purchase', 'under', 'below', 'less', 'than', 'or', 'with', 'for']
)

# Confidence weights per recognised attribute
_WEIGHTS = {'category': 30, 'size': 20, 'color': 15, 'max_price': 15, 'gender': 10, 'brand': 10}


def _term_pattern(term: str) -> re.Pattern[str]:
	# Apostrophes count as word characters so "men's" never yields size "S" and "women's" never matches "men's"
	return re.compile(rf"(?<![\w']){re.escape(term)}(?![\w'])", re.IGNORECASE)


def _first_term(text: str, terms: list[str]) -> Optional[str]:
	for term in terms:
		if _term_pattern(term).search(text):
			return term
	return None


class IntentParser:
	def parse(self, request: str) -> ShoppingIntent:
		text = (request or '').lower()

		category, subcategory = self.extract_category(text)
		size = self.extract_size(text, category)
		color = _first_term(text, COLORS)
		max_price = self.extract_max_price(text)
		gender = _first_term(text, GENDERS)
		brand = _first_term(text, BRANDS)

		intent = ShoppingIntent(
			original_request=request,
			category=category,
			subcategory=subcategory,
			size=size,
			color=color,
			max_price=max_price,
			gender=gender,
			brand=brand,
		)
		intent.keywords = self.extract_keywords(text, intent)
		intent.confidence = self.calculate_confidence(intent)
		logger.debug(f'Parsed intent {intent.model_dump(exclude_defaults=True)}')
		return intent

	def extract_category(self, text: str) -> tuple[Optional[str], Optional[str]]:
		for category, keywords in CATEGORIES.items():
			for keyword in keywords:
				if keyword in text:
					return category, keyword
		return None, None

	def extract_size(self, text: str, category: Optional[str]) -> Optional[str]:
		sizes = SHOE_SIZES if category == 'sports' else CLOTHING_SIZES
		# Longest first so "10.5" wins over "10"
		size = _first_term(text, sorted(sizes, key=len, reverse=True))
		return size.upper() if size else None

	def extract_max_price(self, text: str) -> Optional[int]:
		for pattern in PRICE_PATTERNS:
			match = pattern.search(text)
			if match:
				return int(match.group(1))
		return None

	def extract_keywords(self, text: str, intent: ShoppingIntent) -> list[str]:
		extracted = {value.lower() for value in (intent.color, intent.size, intent.gender, intent.brand) if value}
		extracted |= {re.sub(r'[^\w]', '', value) for value in extracted}

		keywords: list[str] = []
		for raw in text.split():
			word = re.sub(r'[^\w]', '', raw).lower()
			if len(word) <= 2 or word in STOP_WORDS or word in extracted:
				continue
			if word not in keywords:
				keywords.append(word)
		return keywords

	def calculate_confidence(self, intent: ShoppingIntent) -> int:
		score = sum(weight for field, weight in _WEIGHTS.items() if getattr(intent, field))
		return min(score, 100)

	def generate_search_query(self, intent: ShoppingIntent) -> str:
		parts = [value for value in (intent.brand, intent.gender, intent.color) if value]
		if intent.category == 'clothing' and intent.keywords:
			parts.append(intent.keywords[0])
		else:
			parts.extend(intent.keywords[:2])
		return ' '.join(parts).strip()

	def is_actionable(self, intent: ShoppingIntent) -> bool:
		return intent.confidence >= MIN_CONFIDENCE
