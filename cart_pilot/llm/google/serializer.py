from typing import Any

from google.genai.types import Content, FunctionDeclaration, Part, Schema, Tool

from cart_pilot.llm.messages import AssistantMessage, BaseMessage, SystemMessage
from cart_pilot.llm.views import ToolDefinition


class GoogleMessageSerializer:
	"""Serializer for converting messages to Google Gemini format."""

	@staticmethod
	def serialize_messages(messages: list[BaseMessage]) -> tuple[list[Content], str | None]:
		"""
		Convert a transcript to Google format, extracting the system instruction.

		Google handles system instructions separately from the conversation, so:
		1. The first system message becomes the returned system instruction
		2. Later system messages (corrective notes injected mid-task) are sent as
		   user turns prefixed with ``[System note]`` so they keep their position
		3. Assistant messages map to the ``model`` role

		Args:
		    messages: List of messages to convert

		Returns:
		    A tuple of (formatted_messages, system_instruction)
		"""
		formatted_messages: list[Content] = []
		system_instruction: str | None = None

		for message in messages:
			if isinstance(message, SystemMessage):
				if system_instruction is None:
					system_instruction = message.content
					continue
				text = f'[System note] {message.content}'
				role = 'user'
			elif isinstance(message, AssistantMessage):
				text = message.content
				role = 'model'
			else:
				text = message.content
				role = 'user'

			if not text:
				continue
			formatted_messages.append(Content(role=role, parts=[Part.from_text(text=text)]))

		return formatted_messages, system_instruction

	@staticmethod
	def serialize_tools(tools: list[ToolDefinition]) -> list[Tool]:
		declarations = [
			FunctionDeclaration(
				name=tool.name,
				description=tool.description,
				parameters=Schema.model_validate(_gemini_schema(tool.parameters)),
			) for tool in tools
		]
		return [Tool(function_declarations=declarations)]


def _gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
	"""JSON schema -> Gemini Schema dict (upper-case type names, nested properties/items)."""
	converted: dict[str, Any] = {}
	for key, value in schema.items():
		if key == 'type' and isinstance(value, str):
			converted[key] = value.upper()
		elif key == 'properties' and isinstance(value, dict):
			converted[key] = {name: _gemini_schema(prop) for name, prop in value.items()}
		elif key == 'items' and isinstance(value, dict):
			converted[key] = _gemini_schema(value)
		else:
			converted[key] = value
	return converted
