from typing import TYPE_CHECKING

from cart_pilot.llm.base import BaseChatModel
from cart_pilot.llm.messages import AssistantMessage, BaseMessage, SystemMessage, UserMessage
from cart_pilot.llm.views import ChatInvokeCompletion, ToolCall, ToolDefinition

if TYPE_CHECKING:
	from cart_pilot.llm.google.chat import ChatGoogle
	from cart_pilot.llm.openai.chat import ChatOpenAI

# Provider SDKs are imported lazily
_LAZY_IMPORTS = {
	'ChatOpenAI': ('cart_pilot.llm.openai.chat', 'ChatOpenAI'),
	'ChatGoogle': ('cart_pilot.llm.google.chat', 'ChatGoogle'),
}


def __getattr__(name: str):
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		from importlib import import_module

		attr = getattr(import_module(module_path), attr_name)
		globals()[name] = attr
		return attr
	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
	'BaseChatModel',
	'BaseMessage',
	'SystemMessage',
	'UserMessage',
	'AssistantMessage',
	'ChatInvokeCompletion',
	'ToolCall',
	'ToolDefinition',
	'ChatOpenAI',
	'ChatGoogle',
]
