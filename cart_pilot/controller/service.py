from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional

from pydantic import ValidationError

from cart_pilot.agent.views import ActionKind, ActionResult, PageSummary
from cart_pilot.browser.scripts import APPEND_CHAR_JS, CLEAR_VALUE_JS, CLICK_JS, PAGE_SUMMARY_JS
from cart_pilot.browser.types import Page
from cart_pilot.controller.views import ActionLogEntry, ActionRequest, ControllerSettings
from cart_pilot.dom.locator import normalize_text, resolve_all, resolve_first
from cart_pilot.exceptions import StaleExecutionContextError

logger = logging.getLogger(__name__)

# Substrings Playwright uses when a page's JavaScript context went away mid-call
_STALE_CONTEXT_MARKERS = (
    'execution context was destroyed',
    'cannot find context with specified id',
    'frame was detached',
    'most likely because of a navigation',
    'target page, context or browser has been closed',
    '__cartpilot is not defined',
    "reading 'pagesummary'",
)


def is_stale_context_error(exc: BaseException) -> bool:
    if isinstance(exc, StaleExecutionContextError):
        return True
    msg = str(exc).lower()
    return any(marker in msg for marker in _STALE_CONTEXT_MARKERS)


def _with_scheme(url: str) -> str:
    url = url.strip()
    if '://' in url or url.startswith(('about:', 'data:', 'file:')):
        return url
    return f'https://{url}'


class Controller:
    """
    Executes one primitive action against a page.

    Element-level failures come back as failed ActionResults. Errors caused by a
    stale JavaScript context are re-raised so the transport can re-inject the page
    helper and retry the delivery.
    """

    def __init__(self, settings: Optional[ControllerSettings] = None):
        self.settings = settings or ControllerSettings()
        self.action_log: Deque[ActionLogEntry] = deque(maxlen=self.settings.action_log_size)
        self._handlers: dict[ActionKind, Optional[Callable[[Page, ActionRequest], Awaitable[ActionResult]]]] = {
            ActionKind.NAVIGATE: self._navigate,
            ActionKind.CLICK: self._click,
            ActionKind.TYPE: self._type,
            ActionKind.READ_TEXT: self._read_text,
            # finish is handled by the agent and never reaches a page
            ActionKind.FINISH: None,
        }

    async def execute(self, page: Page, request: ActionRequest) -> ActionResult:
        handler = self._handlers[request.kind]
        if handler is None:
            result = ActionResult.failure(f'Unknown action: {request.kind.value}')
        else:
            try:
                result = await handler(page, request)
            except Exception as e:
                if is_stale_context_error(e):
                    raise
                logger.debug(f'{request.kind.value} on {request.target!r} raised {type(e).__name__}: {e}')
                result = ActionResult.failure(_failure_prefix(request.kind) + str(e), selector=request.target)

        self._log(request, result.success)
        return result

    def get_action_log(self) -> list[ActionLogEntry]:
        return list(self.action_log)

    def _log(self, request: ActionRequest, success: bool) -> None:
        self.action_log.append(
            ActionLogEntry(kind=request.kind, target=request.target, text=request.text, success=success)
        )

    # --- Actions ---

    async def _navigate(self, page: Page, request: ActionRequest) -> ActionResult:
        url = _with_scheme(request.target or '')
        # 'commit' returns as soon as the response starts; the settle delay covers the rest
        await page.goto(url, wait_until='commit')
        await asyncio.sleep(self.settings.navigate_settle_seconds)
        return ActionResult(success=True, message=f'Navigated to: {url}', url=page.url)

    async def _click(self, page: Page, request: ActionRequest) -> ActionResult:
        target = request.target or ''
        element = await resolve_first(page, target)
        if element is None:
            return ActionResult.failure(f'Element not found: {target}', selector=target)

        await element.scroll_into_view_if_needed()
        await asyncio.sleep(self.settings.click_settle_seconds)
        # Read before clicking: the click may navigate and detach the element
        element_text = normalize_text(await element.text_content())[: self.settings.element_text_preview]
        await element.evaluate(CLICK_JS)
        await asyncio.sleep(self.settings.click_settle_seconds)

        return ActionResult(
            success=True,
            message=f'Clicked: {target}',
            selector=target,
            element_text=element_text,
        )

    async def _type(self, page: Page, request: ActionRequest) -> ActionResult:
        target = request.target or ''
        text = request.text or ''
        element = await resolve_first(page, target)
        if element is None:
            return ActionResult.failure(f'Input element not found: {target}', selector=target)

        await element.focus()
        await element.evaluate(CLEAR_VALUE_JS)
        for char in text:
            await element.evaluate(APPEND_CHAR_JS, char)
            await asyncio.sleep(self.settings.type_char_delay_seconds)
        await element.dispatch_event('change')
        await asyncio.sleep(self.settings.type_settle_seconds)

        return ActionResult(success=True, message=f'Typed "{text}" into: {target}', selector=target)

    async def _read_text(self, page: Page, request: ActionRequest) -> ActionResult:
        target = request.target or 'body'
        elements = await resolve_all(page, target)
        if not elements:
            return ActionResult.failure(f'No elements found: {target}', selector=target)

        texts = [normalize_text(await element.text_content()) for element in elements]
        data = '\n\n'.join(text for text in texts if text)[: self.settings.max_text_length]

        return ActionResult(
            success=True,
            message=f'Extracted text from: {target}',
            data=data,
            selector=target,
            url=page.url,
            page_info=await self._page_summary(page),
        )

    async def _page_summary(self, page: Page) -> PageSummary:
        raw: Any = await page.evaluate(PAGE_SUMMARY_JS, self.settings.summary_item_limit)
        try:
            summary = PageSummary.model_validate(raw or {})
        except ValidationError as e:
            logger.debug(f'Ignoring malformed page summary: {e}')
            return PageSummary(url=page.url)
        limit = self.settings.summary_item_limit
        return summary.model_copy(
            update={
                'headings': summary.headings[:limit],
                'buttons': summary.buttons[:limit],
                'links': summary.links[:limit],
                'inputs': summary.inputs[:limit],
            }
        )


def _failure_prefix(kind: ActionKind) -> str:
    return {
        ActionKind.NAVIGATE: 'Failed to navigate: ',
        ActionKind.CLICK: 'Click failed: ',
        ActionKind.TYPE: 'Type failed: ',
        ActionKind.READ_TEXT: 'Text extraction failed: ',
    }.get(kind, '')
