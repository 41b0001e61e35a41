from cart_pilot.llm.google.chat import ChatGoogle

__all__ = ['ChatGoogle']
