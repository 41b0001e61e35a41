from cart_pilot.intent.parser import MIN_CONFIDENCE, IntentParser
from cart_pilot.intent.views import ShoppingIntent

__all__ = ['IntentParser', 'ShoppingIntent', 'MIN_CONFIDENCE']
