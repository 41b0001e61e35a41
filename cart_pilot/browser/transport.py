"""
Delivery of actions to a page with bounded retry.

A click that submits a form often navigates, which destroys the page's
JavaScript context while the action is in flight. The transport detects that
(or a page that lost the helper), re-injects the helper, waits for the page to
settle and retries, up to a fixed number of attempts inside one overall
timeout. Either way the caller always gets exactly one ActionResult.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from cart_pilot.agent.views import ActionKind, ActionResult
from cart_pilot.browser.session import BrowserSession
from cart_pilot.controller.service import Controller, is_stale_context_error
from cart_pilot.controller.views import ActionRequest
from cart_pilot.exceptions import ExecutionContextNotFoundError, StaleExecutionContextError

logger = logging.getLogger(__name__)


class TransportSettings(BaseModel):
	timeout_seconds: float = Field(10.0, gt=0, description='Overall budget for one delivery, retries included.')
	max_attempts: int = Field(5, ge=1)
	backoff_base_seconds: float = Field(1.0, ge=0.0)
	backoff_cap_seconds: float = Field(5.0, ge=0.0)
	reinject_settle_seconds: float = Field(1.0, ge=0.0, description='Wait after re-injecting the page helper.')


def backoff_delay(attempt: int, base: float = 1.0, cap: float = 5.0) -> float:
	"""Delay before retrying after failed ``attempt`` (1-based): base * 2^(attempt-1), capped."""
	return min(base * (2 ** max(0, attempt - 1)), cap)


@runtime_checkable
class ActionTransport(Protocol):
	async def deliver(self, context_id: int, request: ActionRequest) -> ActionResult: ...


class PageTransport:
	"""ActionTransport backed by a BrowserSession and a Controller."""

	def __init__(
		self,
		session: BrowserSession,
		controller: Optional[Controller] = None,
		settings: Optional[TransportSettings] = None,
	):
		self.session = session
		self.controller = controller or Controller()
		self.settings = settings or TransportSettings()
		# attempts made by the most recent delivery
		self.last_attempts = 0

	async def deliver(self, context_id: int, request: ActionRequest) -> ActionResult:
		self.last_attempts = 0
		try:
			return await asyncio.wait_for(self._deliver_with_retry(context_id, request), self.settings.timeout_seconds)
		except asyncio.TimeoutError:
			seconds = f'{self.settings.timeout_seconds:g}'
			logger.warning(f'⏱️ {request.kind.value} on context {context_id} timed out after {seconds}s')
			return ActionResult.failure(f'Action timeout after {seconds} seconds', selector=request.target)
		except ExecutionContextNotFoundError as e:
			logger.warning(f'❌ {e}')
			return ActionResult.failure(f'Execution context not found: {context_id}')

	async def _deliver_with_retry(self, context_id: int, request: ActionRequest) -> ActionResult:
		last_error: Optional[BaseException] = None
		for attempt in range(1, self.settings.max_attempts + 1):
			self.last_attempts = attempt
			page = self.session.get_page(context_id)
			try:
				if request.kind is not ActionKind.NAVIGATE and not await self.session.tools_present(page):
					raise StaleExecutionContextError('Page helper is not present')
				return await self.controller.execute(page, request)
			except Exception as e:
				if not is_stale_context_error(e):
					raise
				last_error = e
				logger.debug(f'Attempt {attempt}/{self.settings.max_attempts} hit a stale page context: {e}')

			if attempt < self.settings.max_attempts:
				await self._recover(context_id)
				await asyncio.sleep(
					backoff_delay(attempt, self.settings.backoff_base_seconds, self.settings.backoff_cap_seconds)
				)

		logger.warning(f'❌ {request.kind.value} failed after {self.settings.max_attempts} attempts: {last_error}')
		return ActionResult.failure(
			f'Action failed after {self.settings.max_attempts} attempts: {last_error}',
			selector=request.target,
		)

	async def _recover(self, context_id: int) -> None:
		page = self.session.get_page(context_id)
		try:
			await self.session.inject_tools(page)
		except Exception as e:
			if not is_stale_context_error(e):
				raise
			# Still navigating; the init script installs the helper on the next document
			logger.debug(f'Re-injection into context {context_id} deferred: {e}')
		await asyncio.sleep(self.settings.reinject_settle_seconds)
