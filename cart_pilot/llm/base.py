from __future__ import annotations

from typing import Protocol, runtime_checkable

from cart_pilot.llm.messages import BaseMessage
from cart_pilot.llm.views import ChatInvokeCompletion, ToolDefinition


@runtime_checkable
class BaseChatModel(Protocol):
    """Minimal chat model contract used by the planner.

    Implementations raise ``LLMException`` on transport/API failure. A response
    without a tool call is not an error: the caller decides how to recover.
    """

    model: str

    @property
    def provider(self) -> str: ...

    async def ainvoke(
        self,
        messages: list[BaseMessage],
        tools: list[ToolDefinition] | None = None,
        tool_choice: str | None = None,
    ) -> ChatInvokeCompletion: ...
