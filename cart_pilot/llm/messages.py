from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel


class _MessageBase(BaseModel):
    content: str
    name: str | None = None

    def text(self, limit: int | None = None) -> str:
        if limit is None or len(self.content) <= limit:
            return self.content
        return self.content[:limit] + '...'


class SystemMessage(_MessageBase):
    role: Literal['system'] = 'system'


class UserMessage(_MessageBase):
    role: Literal['user'] = 'user'


class AssistantMessage(_MessageBase):
    role: Literal['assistant'] = 'assistant'


BaseMessage = Union[SystemMessage, UserMessage, AssistantMessage]
