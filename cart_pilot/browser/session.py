from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self

from cart_pilot.browser.scripts import PAGE_TOOLS_JS, TOOLS_PRESENT_JS
from cart_pilot.browser.types import Browser, BrowserContext, Page, Playwright, async_playwright
from cart_pilot.config import CONFIG
from cart_pilot.exceptions import ExecutionContextNotFoundError

logger = logging.getLogger(__name__)


class BrowserProfile(BaseModel):
	"""Launch options for the Chromium instance the agent drives."""

	model_config = ConfigDict(extra='forbid', validate_assignment=True)

	headless: bool = Field(default_factory=lambda: CONFIG.CART_PILOT_HEADLESS)
	user_data_dir: Optional[Path] = Field(
		default=None,
		description='Chromium profile directory; keeps cookies and logins between runs. None launches an incognito context.',
	)
	viewport: Optional[dict[str, int]] = Field(default_factory=lambda: {'width': 1280, 'height': 800})
	channel: Optional[str] = Field(default=None, description='Browser channel, e.g. "chrome" or "msedge".')
	default_timeout_ms: float = Field(30_000, ge=0)

	def launch_kwargs(self) -> dict:
		kwargs: dict = {'headless': self.headless}
		if self.channel:
			kwargs['channel'] = self.channel
		return kwargs

	def context_kwargs(self) -> dict:
		kwargs: dict = {}
		if self.viewport:
			kwargs['viewport'] = self.viewport
		return kwargs


class BrowserSession:
	"""
	Owns the Playwright browser and a registry of pages addressed by integer context ids.

	Every page in the context gets the cart_pilot page helper via an init script,
	so each new document (navigations included) starts with it installed.
	Use as an async context manager, or call start()/stop() explicitly.
	"""

	def __init__(self, browser_profile: Optional[BrowserProfile] = None, browser_context: Optional[BrowserContext] = None):
		self.browser_profile = browser_profile or BrowserProfile()
		self.playwright: Optional[Playwright] = None
		self.browser: Optional[Browser] = None
		self.browser_context: Optional[BrowserContext] = browser_context
		self._owns_browser_context = browser_context is None
		self._pages: dict[int, Page] = {}
		self._next_context_id = 1
		self.active_context_id: Optional[int] = None

	@property
	def initialized(self) -> bool:
		return self.browser_context is not None

	async def start(self) -> Self:
		if self.browser_context is None:
			self.playwright = await async_playwright().start()
			profile = self.browser_profile
			if profile.user_data_dir is not None:
				profile_path = Path(profile.user_data_dir).expanduser()
				profile_path.mkdir(parents=True, exist_ok=True)
				logger.info(f'🌎 Launching Chromium with persistent profile {profile_path}')
				self.browser_context = await self.playwright.chromium.launch_persistent_context(
					str(profile_path), **profile.launch_kwargs(), **profile.context_kwargs()
				)
			else:
				logger.info(f'🌎 Launching Chromium (headless={profile.headless})')
				self.browser = await self.playwright.chromium.launch(**profile.launch_kwargs())
				self.browser_context = await self.browser.new_context(**profile.context_kwargs())

		self.browser_context.set_default_timeout(self.browser_profile.default_timeout_ms)
		await self.browser_context.add_init_script(PAGE_TOOLS_JS)
		for page in self.browser_context.pages:
			self.register_page(page)
		return self

	async def stop(self) -> None:
		self._pages.clear()
		self.active_context_id = None
		if not self._owns_browser_context:
			logger.debug('BrowserSession.stop() on a borrowed context, leaving it open')
			self.browser_context = None
			return
		try:
			if self.browser_context is not None:
				logger.info('🛑 Closing browser context')
				await self.browser_context.close()
			if self.browser is not None:
				await self.browser.close()
		except Exception as e:
			if 'has been closed' not in str(e):
				logger.warning(f'❌ Error closing browser: {type(e).__name__}: {e}')
		finally:
			self.browser_context = None
			self.browser = None
			if self.playwright is not None:
				await self.playwright.stop()
				self.playwright = None

	async def __aenter__(self) -> Self:
		return await self.start()

	async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
		await self.stop()

	# --- Page registry ---

	def register_page(self, page: Page) -> int:
		for context_id, known in self._pages.items():
			if known is page:
				return context_id
		context_id = self._next_context_id
		self._next_context_id += 1
		self._pages[context_id] = page
		page.on('close', lambda _: self._forget(context_id))
		if self.active_context_id is None:
			self.active_context_id = context_id
		return context_id

	def _forget(self, context_id: int) -> None:
		self._pages.pop(context_id, None)
		if self.active_context_id == context_id:
			self.active_context_id = next(iter(self._pages), None)
		logger.debug(f'Page for context {context_id} closed')

	async def new_tab(self, url: Optional[str] = None) -> int:
		if self.browser_context is None:
			raise RuntimeError('BrowserSession is not started')
		page = await self.browser_context.new_page()
		context_id = self.register_page(page)
		self.active_context_id = context_id
		if url:
			await page.goto(url, wait_until='domcontentloaded')
		return context_id

	def get_page(self, context_id: int) -> Page:
		page = self._pages.get(context_id)
		if page is None or page.is_closed():
			raise ExecutionContextNotFoundError(f'No page registered for context {context_id}')
		return page

	@property
	def context_ids(self) -> list[int]:
		return list(self._pages)

	# --- Page helper ---

	async def tools_present(self, page: Page) -> bool:
		return bool(await page.evaluate(TOOLS_PRESENT_JS))

	async def inject_tools(self, page: Page) -> None:
		await page.evaluate(PAGE_TOOLS_JS)
		logger.debug(f'Injected page helper into {page.url}')
