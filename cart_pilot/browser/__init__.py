from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from cart_pilot.browser.session import BrowserProfile, BrowserSession
	from cart_pilot.browser.transport import ActionTransport, PageTransport, TransportSettings

# Lazy imports: the transport pulls in the controller, which imports browser.scripts
_LAZY_IMPORTS = {
	'BrowserProfile': ('cart_pilot.browser.session', 'BrowserProfile'),
	'BrowserSession': ('cart_pilot.browser.session', 'BrowserSession'),
	'ActionTransport': ('cart_pilot.browser.transport', 'ActionTransport'),
	'PageTransport': ('cart_pilot.browser.transport', 'PageTransport'),
	'TransportSettings': ('cart_pilot.browser.transport', 'TransportSettings'),
}


def __getattr__(name: str):
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		from importlib import import_module

		attr = getattr(import_module(module_path), attr_name)
		globals()[name] = attr
		return attr
	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ['BrowserProfile', 'BrowserSession', 'ActionTransport', 'PageTransport', 'TransportSettings']
