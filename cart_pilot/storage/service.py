from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import anyio

from cart_pilot.config import CONFIG
from cart_pilot.storage.views import AddedItem, ChatEntry, CredentialRecord, StorageStats

logger = logging.getLogger(__name__)

TARGET_WEBSITE = 'target_website'
ADDED_ITEMS = 'added_items'
CHAT_HISTORY = 'chat_history'
CREDENTIALS = 'credentials'

MAX_ADDED_ITEMS = 50
MAX_CHAT_MESSAGES = 100
DEFAULT_QUOTA_BYTES = 10 * 1024 * 1024


class StorageManager:
	"""
	Small JSON-file key-value store for user-facing state.

	Holds the preferred target website, items added to carts, the chat
	transcript shown to the user and per-site credentials. Agent state is
	never persisted here. Every write rewrites the whole file through a
	temporary sibling so a crash cannot leave half-written JSON behind.
	"""

	def __init__(self, path: Optional[Path | str] = None, quota_bytes: int = DEFAULT_QUOTA_BYTES):
		self.path = Path(path).expanduser() if path else CONFIG.CART_PILOT_STORAGE_PATH
		self.quota_bytes = quota_bytes
		self._lock = asyncio.Lock()

	# --- Raw access ---

	async def _load(self) -> dict[str, Any]:
		file = anyio.Path(self.path)
		if not await file.exists():
			return {}
		raw = await file.read_text(encoding='utf-8')
		if not raw.strip():
			return {}
		try:
			data = json.loads(raw)
		except json.JSONDecodeError as e:
			logger.warning(f'⚠️ Storage file {self.path} is not valid JSON, starting empty: {e}')
			return {}
		return data if isinstance(data, dict) else {}

	async def _dump(self, data: dict[str, Any]) -> None:
		file = anyio.Path(self.path)
		await file.parent.mkdir(parents=True, exist_ok=True)
		tmp = anyio.Path(f'{self.path}.tmp')
		await tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding='utf-8')
		await tmp.replace(file)

	async def get(self, key: str) -> Any:
		async with self._lock:
			return (await self._load()).get(key)

	async def set(self, key: str, value: Any) -> None:
		async with self._lock:
			data = await self._load()
			data[key] = value
			await self._dump(data)
		logger.debug(f'Storage: saved {key}')

	# --- Target website ---

	async def get_target_website(self) -> str:
		return (await self.get(TARGET_WEBSITE)) or 'auto'

	async def set_target_website(self, site: str) -> None:
		await self.set(TARGET_WEBSITE, site)

	# --- Added items ---

	async def get_added_items(self) -> list[AddedItem]:
		return [AddedItem.model_validate(item) for item in (await self.get(ADDED_ITEMS)) or []]

	async def add_successful_item(self, **item_data: Any) -> AddedItem:
		item = AddedItem(**{key: value for key, value in item_data.items() if value is not None})
		async with self._lock:
			data = await self._load()
			items = [item.model_dump()] + list(data.get(ADDED_ITEMS) or [])
			data[ADDED_ITEMS] = items[:MAX_ADDED_ITEMS]
			await self._dump(data)
		logger.info(f'🛒 Recorded added item: {item.name}')
		return item

	async def clear_added_items(self) -> None:
		await self.set(ADDED_ITEMS, [])

	# --- Chat history ---

	async def get_chat_history(self) -> list[ChatEntry]:
		return [ChatEntry.model_validate(entry) for entry in (await self.get(CHAT_HISTORY)) or []]

	async def save_chat_history(self, messages: Sequence[ChatEntry]) -> None:
		trimmed = list(messages)[-MAX_CHAT_MESSAGES:]
		await self.set(CHAT_HISTORY, [message.model_dump() for message in trimmed])
		logger.debug(f'Storage: saved chat history with {len(trimmed)} messages')

	async def append_chat(self, *entries: ChatEntry) -> None:
		async with self._lock:
			data = await self._load()
			history = list(data.get(CHAT_HISTORY) or []) + [entry.model_dump() for entry in entries]
			data[CHAT_HISTORY] = history[-MAX_CHAT_MESSAGES:]
			await self._dump(data)

	async def clear_chat_history(self) -> None:
		await self.set(CHAT_HISTORY, [])

	# --- Credentials ---

	async def get_credentials(self) -> dict[str, CredentialRecord]:
		raw = (await self.get(CREDENTIALS)) or {}
		return {hostname: CredentialRecord.model_validate(record) for hostname, record in raw.items()}

	async def get_credentials_for_site(self, hostname: str) -> Optional[CredentialRecord]:
		return (await self.get_credentials()).get(hostname)

	async def save_credentials_for_site(self, hostname: str, username: str, password: str) -> CredentialRecord:
		record = CredentialRecord(username=username, password=password)
		async with self._lock:
			data = await self._load()
			credentials = dict(data.get(CREDENTIALS) or {})
			credentials[hostname] = record.model_dump()
			data[CREDENTIALS] = credentials
			await self._dump(data)
		logger.info(f'🔑 Saved credentials for {hostname}')
		return record

	async def clear_credentials_for_site(self, hostname: str) -> bool:
		async with self._lock:
			data = await self._load()
			credentials = dict(data.get(CREDENTIALS) or {})
			removed = credentials.pop(hostname, None) is not None
			data[CREDENTIALS] = credentials
			await self._dump(data)
		return removed

	async def clear_all_credentials(self) -> None:
		await self.set(CREDENTIALS, {})

	# --- Stats ---

	async def get_storage_stats(self) -> StorageStats:
		file = anyio.Path(self.path)
		used = (await file.stat()).st_size if await file.exists() else 0
		return StorageStats(used=used, total=self.quota_bytes)
