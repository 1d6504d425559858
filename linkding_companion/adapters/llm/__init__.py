"""Chat-completion adapters."""

from linkding_companion.adapters.llm.openai_client import OpenAIChatClient
from linkding_companion.adapters.llm.protocol import ChatClientProtocol

__all__ = ["ChatClientProtocol", "OpenAIChatClient"]
