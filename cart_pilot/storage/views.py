from __future__ import annotations

import uuid
from typing import Literal, Optional

from pydantic import BaseModel, Field

from cart_pilot.timing import now_utc_iso


class AddedItem(BaseModel):
	"""A product the agent successfully put in a cart."""

	id: str = Field(default_factory=lambda: uuid.uuid4().hex)
	timestamp: str = Field(default_factory=now_utc_iso)
	site: str = 'unknown'
	name: str = 'Unknown Product'
	price: Optional[str] = None
	image: Optional[str] = None
	url: Optional[str] = None
	category: Optional[str] = None
	original_request: Optional[str] = None


class ChatEntry(BaseModel):
	role: Literal['user', 'agent', 'system']
	content: str
	timestamp: str = Field(default_factory=now_utc_iso)


class CredentialRecord(BaseModel):
	username: str
	password: str
	last_used: str = Field(default_factory=now_utc_iso)


class StorageStats(BaseModel):
	used: int
	total: int

	@property
	def percentage(self) -> float:
		if self.total <= 0:
			return 0.0
		return round(self.used / self.total * 100, 2)
