from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ShoppingIntent(BaseModel):
	"""Structured attributes pulled out of a free-text shopping request."""

	original_request: str
	category: Optional[str] = None
	subcategory: Optional[str] = None
	size: Optional[str] = None
	color: Optional[str] = None
	max_price: Optional[int] = None
	gender: Optional[str] = None
	brand: Optional[str] = None
	keywords: list[str] = Field(default_factory=list)
	confidence: int = Field(0, ge=0, le=100)
