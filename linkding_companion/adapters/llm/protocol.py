"""Chat-completion collaborator interface.

Enrichment tasks only need "send one prompt, get text back"; any provider
that can do that fits.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChatClientProtocol(Protocol):
    async def ask(self, prompt: str) -> str:
        """Send a single user prompt and return the assistant's text.

        Raises:
            ChatCompletionError: If the provider fails or returns no text.
        """
        ...

    async def aclose(self) -> None:
        """Release HTTP connections."""
        ...
