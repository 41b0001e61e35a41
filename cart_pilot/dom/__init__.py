from cart_pilot.dom.locator import Locator, normalize_text, parse_locator, resolve_all, resolve_first

__all__ = ['Locator', 'normalize_text', 'parse_locator', 'resolve_all', 'resolve_first']
