from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from cart_pilot.agent.settings import AgentSettings
from cart_pilot.agent.views import ActionResult
from cart_pilot.browser.scripts import (
    APPEND_CHAR_JS,
    CLEAR_VALUE_JS,
    CLICK_JS,
    PAGE_SUMMARY_JS,
    PAGE_TOOLS_JS,
    TOOLS_PRESENT_JS,
)
from cart_pilot.controller.views import ControllerSettings
from cart_pilot.llm.views import ChatInvokeCompletion, ToolCall


class FakeElement:
    """Element handle double; matches a selector when it is listed in ``selectors``."""

    def __init__(self, text: str = "", selectors=(), children=(), click_error: Optional[Exception] = None):
        self.text = text
        self.selectors = set(selectors)
        self.children = list(children)
        self.click_error = click_error
        self.value = ""
        self.events: list[str] = []
        self.clicks = 0
        self.focused = False
        self.scrolled = False

    async def text_content(self) -> str:
        return self.text

    async def scroll_into_view_if_needed(self) -> None:
        self.scrolled = True

    async def focus(self) -> None:
        self.focused = True

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == CLICK_JS:
            if self.click_error is not None:
                raise self.click_error
            self.clicks += 1
        elif script == CLEAR_VALUE_JS:
            self.value = ""
        elif script == APPEND_CHAR_JS:
            self.value += arg
            self.events.append("input")
        else:
            raise AssertionError(f"unexpected element script: {script[:40]}")

    async def dispatch_event(self, name: str) -> None:
        self.events.append(name)

    async def query_selector_all(self, selector: str) -> list["FakeElement"]:
        return [child for child in self.children if selector in child.selectors]

    async def query_selector(self, selector: str) -> Optional["FakeElement"]:
        matches = await self.query_selector_all(selector)
        return matches[0] if matches else None


class FakePage:
    """Page double with a flat element list and a switchable page helper."""

    def __init__(self, elements=(), url: str = "https://shop.example/", summary: Optional[dict] = None):
        self.elements = list(elements)
        self.url = url
        self.summary = summary or {"title": "Shop", "url": url}
        self.tools_installed = True
        self.injections = 0
        self.visited: list[tuple[str, Optional[str]]] = []
        # Exceptions raised, one per call, by the next query_selector_all calls
        self.query_errors: list[Exception] = []
        self.closed = False

    async def goto(self, url: str, wait_until: Optional[str] = None) -> None:
        self.visited.append((url, wait_until))
        self.url = url

    async def query_selector_all(self, selector: str) -> list[FakeElement]:
        if self.query_errors:
            raise self.query_errors.pop(0)
        return [element for element in self.elements if selector in element.selectors]

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        matches = await self.query_selector_all(selector)
        return matches[0] if matches else None

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == TOOLS_PRESENT_JS:
            return self.tools_installed
        if script == PAGE_TOOLS_JS:
            self.injections += 1
            self.tools_installed = True
            return True
        if script == PAGE_SUMMARY_JS:
            return self.summary
        raise AssertionError(f"unexpected page script: {script[:40]}")

    def is_closed(self) -> bool:
        return self.closed

    def on(self, event: str, callback) -> None:
        pass


def tool_call(action: str, **arguments: Any) -> ChatInvokeCompletion:
    arguments.setdefault("reasoning", f"{action} next")
    return ChatInvokeCompletion(tool_calls=[ToolCall(name="browser_action", arguments={"action": action, **arguments})])


class ScriptedLLM:
    """Chat model double replaying canned replies; an Exception entry is raised instead."""

    model = "scripted"

    def __init__(self, *replies: Any, gate: Optional[asyncio.Event] = None):
        self.replies = list(replies)
        self.calls: list[dict] = []
        self.gate = gate

    @property
    def provider(self) -> str:
        return "scripted"

    async def ainvoke(self, messages, tools=None, tool_choice=None) -> ChatInvokeCompletion:
        self.calls.append({"messages": list(messages), "tools": tools, "tool_choice": tool_choice})
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else tool_call("finish", summary="Nothing left to do")
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeTransport:
    """Transport double: records requests and replays results (success by default)."""

    def __init__(self, *results: ActionResult, gate: Optional[asyncio.Event] = None):
        self.results = list(results)
        self.requests = []
        self.gate = gate

    async def deliver(self, context_id: int, request) -> ActionResult:
        self.requests.append((context_id, request))
        if self.gate is not None:
            await self.gate.wait()
        if self.results:
            return self.results.pop(0)
        return ActionResult(success=True, message=f"{request.kind.value} done")


class RecordingSink:
    def __init__(self):
        self.events = []

    def emit(self, event) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [event.type.value for event in self.events]


@pytest.fixture
def fast_agent_settings() -> AgentSettings:
    return AgentSettings(step_delay_seconds=0.0, submit_settle_seconds=0.0)


@pytest.fixture
def fast_controller_settings() -> ControllerSettings:
    return ControllerSettings(
        navigate_settle_seconds=0.0,
        click_settle_seconds=0.0,
        type_char_delay_seconds=0.0,
        type_settle_seconds=0.0,
    )
