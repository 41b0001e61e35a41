from __future__ import annotations

from typing import Any

from cart_pilot.llm.messages import AssistantMessage, BaseMessage, SystemMessage, UserMessage
from cart_pilot.llm.views import ToolDefinition


class OpenAIMessageSerializer:
	"""Serializer for converting messages and tools to the OpenAI chat completions format."""

	@staticmethod
	def serialize(message: BaseMessage) -> dict[str, Any]:
		if isinstance(message, SystemMessage):
			payload: dict[str, Any] = {'role': 'system', 'content': message.content}
		elif isinstance(message, AssistantMessage):
			payload = {'role': 'assistant', 'content': message.content}
		elif isinstance(message, UserMessage):
			payload = {'role': 'user', 'content': message.content}
		else:
			raise TypeError(f'Unsupported message type: {type(message).__name__}')
		if message.name:
			payload['name'] = message.name
		return payload

	@staticmethod
	def serialize_messages(messages: list[BaseMessage]) -> list[dict[str, Any]]:
		return [OpenAIMessageSerializer.serialize(m) for m in messages]

	@staticmethod
	def serialize_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
		return [
			{
				'type': 'function',
				'function': {
					'name': tool.name,
					'description': tool.description,
					'parameters': tool.parameters,
				},
			}
			for tool in tools
		]

	@staticmethod
	def serialize_tool_choice(tool_choice: str | None) -> Any:
		"""Force a named function, or pass through 'auto' / 'none' / 'required'."""
		if tool_choice is None:
			return None
		if tool_choice in ('auto', 'none', 'required'):
			return tool_choice
		return {'type': 'function', 'function': {'name': tool_choice}}
