from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, RateLimitError

from cart_pilot.config import CONFIG
from cart_pilot.exceptions import LLMException
from cart_pilot.llm.messages import BaseMessage
from cart_pilot.llm.openai.serializer import OpenAIMessageSerializer
from cart_pilot.llm.views import ChatInvokeCompletion, ChatInvokeUsage, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)


@dataclass
class ChatOpenAI:
	"""OpenAI chat completions wrapper with function calling."""

	model: str = field(default_factory=lambda: CONFIG.CART_PILOT_MODEL)
	temperature: float = 0.3
	max_tokens: int = 500
	api_key: str | None = None
	base_url: str | None = None
	timeout: float = 60.0
	max_retries: int = 2
	_client: AsyncOpenAI | None = field(default=None, init=False, repr=False)

	@property
	def provider(self) -> str:
		return 'openai'

	def get_client(self) -> AsyncOpenAI:
		if self._client is None:
			api_key = self.api_key or CONFIG.OPENAI_API_KEY
			self._client = AsyncOpenAI(api_key=api_key, base_url=self.base_url, timeout=self.timeout, max_retries=self.max_retries)
		return self._client

	async def ainvoke(
		self,
		messages: list[BaseMessage],
		tools: list[ToolDefinition] | None = None,
		tool_choice: str | None = None,
	) -> ChatInvokeCompletion:
		request: dict[str, Any] = {
			'model': self.model,
			'messages': OpenAIMessageSerializer.serialize_messages(messages),
			'temperature': self.temperature,
			'max_tokens': self.max_tokens,
		}
		if tools:
			request['tools'] = OpenAIMessageSerializer.serialize_tools(tools)
			choice = OpenAIMessageSerializer.serialize_tool_choice(tool_choice)
			if choice is not None:
				request['tool_choice'] = choice

		try:
			response = await self.get_client().chat.completions.create(**request)
		except RateLimitError as e:
			raise LLMException(429, f'Rate limit exceeded: {e}') from e
		except APIConnectionError as e:
			raise LLMException(503, f'Connection to OpenAI failed: {e}') from e
		except APIStatusError as e:
			raise LLMException(e.status_code, e.message) from e

		if not response.choices:
			return ChatInvokeCompletion()

		message = response.choices[0].message
		tool_calls: list[ToolCall] = []
		for call in message.tool_calls or []:
			function = getattr(call, 'function', None)
			if function is None:
				continue
			try:
				arguments = json.loads(function.arguments or '{}')
			except json.JSONDecodeError:
				logger.warning(f'Discarding tool call {function.name!r} with malformed arguments')
				continue
			if isinstance(arguments, dict):
				tool_calls.append(ToolCall(name=function.name, arguments=arguments))

		usage = None
		if response.usage is not None:
			usage = ChatInvokeUsage(
				prompt_tokens=response.usage.prompt_tokens,
				completion_tokens=response.usage.completion_tokens,
				total_tokens=response.usage.total_tokens,
			)

		return ChatInvokeCompletion(completion=message.content or '', tool_calls=tool_calls, usage=usage)
