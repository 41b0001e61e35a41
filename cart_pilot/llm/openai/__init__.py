from cart_pilot.llm.openai.chat import ChatOpenAI

__all__ = ['ChatOpenAI']
