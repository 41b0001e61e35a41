from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class ToolDefinition(BaseModel):
    """A single callable function offered to the model (JSON schema parameters)."""
    name: str
    description: str
    parameters: dict[str, Any]


class ToolCall(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ChatInvokeUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatInvokeCompletion(BaseModel):
    completion: str = ''
    tool_calls: list[ToolCall] = Field(default_factory=list)
    usage: Optional[ChatInvokeUsage] = None

    def first_tool_call(self, name: str) -> Optional[ToolCall]:
        for call in self.tool_calls:
            if call.name == name:
                return call
        return None
