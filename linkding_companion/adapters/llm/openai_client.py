"""OpenAI-compatible chat completions client.

Works against api.openai.com and any endpoint speaking the same
``/chat/completions`` dialect (OpenRouter, local gateways).
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from linkding_companion.domain.exceptions import ChatCompletionError

if TYPE_CHECKING:
    from linkding_companion.config.llm import OpenAIConfig

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Single-turn chat client implementing ``ChatClientProtocol``."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4.1-nano",
        base_url: str = "https://api.openai.com/v1",
        timeout_sec: float = 60.0,
        temperature: float = 0.2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            msg = "OpenAI API key is required"
            raise ValueError(msg)
        self._model = model
        self._temperature = temperature
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout_sec,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: OpenAIConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> OpenAIChatClient:
        return cls(
            config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout_sec=config.timeout_sec,
            temperature=config.temperature,
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    async def ask(self, prompt: str) -> str:
        body = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
        }
        started = time.perf_counter()
        try:
            resp = await self._client.post("/chat/completions", json=body)
        except httpx.HTTPError as e:
            msg = f"Chat completion request failed: {e}"
            raise ChatCompletionError(msg, {"model": self._model}) from e

        latency = int((time.perf_counter() - started) * 1000)
        try:
            data = resp.json()
        except ValueError as e:
            msg = f"Failed to parse chat completion response (status {resp.status_code})"
            raise ChatCompletionError(msg, {"status_code": resp.status_code}) from e

        if resp.status_code != 200:
            error_msg = self._extract_error_message(data)
            raise ChatCompletionError(
                error_msg, {"status_code": resp.status_code, "model": self._model}
            )

        content = self._extract_content(data)
        usage = data.get("usage") or {}
        logger.debug(
            "chat_completion_ok",
            extra={
                "model": data.get("model", self._model),
                "latency_ms": latency,
                "tokens_prompt": usage.get("prompt_tokens", 0),
                "tokens_completion": usage.get("completion_tokens", 0),
            },
        )
        return content

    def _extract_error_message(self, data: Any) -> str:
        """Extract error message from API response."""
        if not isinstance(data, dict):
            return "Unknown API error"
        error = data.get("error", {})
        if isinstance(error, dict):
            return error.get("message", "Unknown API error")
        if isinstance(error, str):
            return error
        return "Unknown API error"

    def _extract_content(self, data: Any) -> str:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise ChatCompletionError("No choices in response", {"model": self._model})

        first_choice = choices[0]
        if first_choice.get("finish_reason") == "length":
            logger.warning("chat_completion_truncated", extra={"model": self._model})
        content = (first_choice.get("message") or {}).get("content")
        if not isinstance(content, str):
            raise ChatCompletionError("Empty message content", {"model": self._model})
        return content

    async def aclose(self) -> None:
        await self._client.aclose()
