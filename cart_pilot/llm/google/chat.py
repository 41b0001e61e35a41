from __future__ import annotations

import logging
from dataclasses import dataclass, field

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from cart_pilot.config import CONFIG
from cart_pilot.exceptions import LLMException
from cart_pilot.llm.google.serializer import GoogleMessageSerializer
from cart_pilot.llm.messages import BaseMessage
from cart_pilot.llm.views import ChatInvokeCompletion, ChatInvokeUsage, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)


@dataclass
class ChatGoogle:
	"""Gemini wrapper with function calling through google-genai."""

	model: str = 'gemini-2.0-flash'
	temperature: float = 0.3
	max_output_tokens: int = 500
	api_key: str | None = None
	_client: genai.Client | None = field(default=None, init=False, repr=False)

	@property
	def provider(self) -> str:
		return 'google'

	def get_client(self) -> genai.Client:
		if self._client is None:
			self._client = genai.Client(api_key=self.api_key or CONFIG.GOOGLE_API_KEY)
		return self._client

	async def ainvoke(
		self,
		messages: list[BaseMessage],
		tools: list[ToolDefinition] | None = None,
		tool_choice: str | None = None,
	) -> ChatInvokeCompletion:
		contents, system_instruction = GoogleMessageSerializer.serialize_messages(messages)

		config = types.GenerateContentConfig(
			temperature=self.temperature,
			max_output_tokens=self.max_output_tokens,
			system_instruction=system_instruction,
		)
		if tools:
			config.tools = GoogleMessageSerializer.serialize_tools(tools)
			if tool_choice and tool_choice not in ('auto', 'none'):
				allowed = None if tool_choice == 'required' else [tool_choice]
				config.tool_config = types.ToolConfig(
					function_calling_config=types.FunctionCallingConfig(mode='ANY', allowed_function_names=allowed)
				)
			# The planner inspects raw function calls itself
			config.automatic_function_calling = types.AutomaticFunctionCallingConfig(disable=True)

		try:
			response = await self.get_client().aio.models.generate_content(model=self.model, contents=contents, config=config)
		except genai_errors.APIError as e:
			raise LLMException(getattr(e, 'code', None) or 502, str(e)) from e

		tool_calls = [
			ToolCall(name=call.name, arguments=dict(call.args or {})) for call in (response.function_calls or []) if call.name
		]

		text = ''
		if not tool_calls:
			try:
				text = response.text or ''
			except ValueError:
				text = ''

		usage = None
		if response.usage_metadata is not None:
			usage = ChatInvokeUsage(
				prompt_tokens=response.usage_metadata.prompt_token_count or 0,
				completion_tokens=response.usage_metadata.candidates_token_count or 0,
				total_tokens=response.usage_metadata.total_token_count or 0,
			)

		return ChatInvokeCompletion(completion=text, tool_calls=tool_calls, usage=usage)
