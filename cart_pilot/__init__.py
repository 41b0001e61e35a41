from cart_pilot.config import CONFIG
from cart_pilot.logging_config import setup_logging

if CONFIG.CART_PILOT_SETUP_LOGGING:
	logger = setup_logging()
else:
	import logging

	logger = logging.getLogger('cart_pilot')


# --- Lightweight, lazy re-exports ---
# Avoid importing playwright and the LLM SDKs at package import time.

_LAZY_EXPORTS = {
	# Agent core
	'Agent': ('cart_pilot.agent.service', 'Agent'),
	'AgentSettings': ('cart_pilot.agent.settings', 'AgentSettings'),
	'ActionKind': ('cart_pilot.agent.views', 'ActionKind'),
	'ActionResult': ('cart_pilot.agent.views', 'ActionResult'),
	'Decision': ('cart_pilot.agent.views', 'Decision'),
	'AgentStatus': ('cart_pilot.agent.state', 'AgentStatus'),
	'EventType': ('cart_pilot.agent.events', 'EventType'),
	'ProgressEvent': ('cart_pilot.agent.events', 'ProgressEvent'),
	'QueueEventSink': ('cart_pilot.agent.events', 'QueueEventSink'),
	'CallbackEventSink': ('cart_pilot.agent.events', 'CallbackEventSink'),
	# Browser
	'BrowserProfile': ('cart_pilot.browser.session', 'BrowserProfile'),
	'BrowserSession': ('cart_pilot.browser.session', 'BrowserSession'),
	'PageTransport': ('cart_pilot.browser.transport', 'PageTransport'),
	'Controller': ('cart_pilot.controller.service', 'Controller'),
	# Chat models
	'ChatOpenAI': ('cart_pilot.llm.openai.chat', 'ChatOpenAI'),
	'ChatGoogle': ('cart_pilot.llm.google.chat', 'ChatGoogle'),
	# Collaborators
	'IntentParser': ('cart_pilot.intent.parser', 'IntentParser'),
	'StorageManager': ('cart_pilot.storage.service', 'StorageManager'),
	'ShoppingFlow': ('cart_pilot.adapters.service', 'ShoppingFlow'),
	'SiteAdapter': ('cart_pilot.adapters.base', 'SiteAdapter'),
}


def __getattr__(name: str):
	entry = _LAZY_EXPORTS.get(name)
	if not entry:
		raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
	module_path, attr_name = entry
	from importlib import import_module

	module = import_module(module_path)
	attr = getattr(module, attr_name)
	globals()[name] = attr
	return attr


__all__ = ['setup_logging', *_LAZY_EXPORTS.keys()]
