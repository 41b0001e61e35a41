from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, Field

from cart_pilot.intent.views import ShoppingIntent

_PRICE_RE = re.compile(r'\$?([\d,]+\.?\d*)')


def extract_price(text: Optional[str]) -> Optional[float]:
	"""First price-looking number in ``text`` (``"$1,299.99"`` -> 1299.99)."""
	if not text:
		return None
	match = _PRICE_RE.search(text)
	if not match:
		return None
	try:
		return float(match.group(1).replace(',', ''))
	except ValueError:
		return None


class ProductInfo(BaseModel):
	"""A product as listed on a store page."""

	name: str = 'Unknown Product'
	price: Optional[str] = None
	image: Optional[str] = None
	category: Optional[str] = None
	description: Optional[str] = None
	url: Optional[str] = None
	# Position in the adapter's listing, used to find the element again
	index: Optional[int] = None
	in_cart: bool = False

	@property
	def price_value(self) -> Optional[float]:
		return extract_price(self.price)


class ShoppingResult(BaseModel):
	"""Outcome of one intent-driven add-to-cart run."""

	success: bool
	message: str
	site: Optional[str] = None
	product: Optional[ProductInfo] = None
	intent: Optional[ShoppingIntent] = None
	requires_login: bool = False
	error: Optional[str] = None
	steps: list[str] = Field(default_factory=list)
