"""Brave Search web search client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from linkding_companion.domain.exceptions import SearchFailure

if TYPE_CHECKING:
    from linkding_companion.config.integrations import SearchConfig

logger = logging.getLogger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


@dataclass(frozen=True)
class SearchResult:
    """Single web search result."""

    url: str
    title: str
    description: str = ""


@runtime_checkable
class SearchClientProtocol(Protocol):
    async def search(self, query: str) -> list[SearchResult]:
        """Ranked results for ``query``, best first.

        Raises:
            SearchFailure: If the provider cannot answer.
        """
        ...


class BraveSearchClient:
    """Queries the Brave web search API; results come back in Brave's ranking."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout_sec: float = 10.0,
        search_url: str = BRAVE_SEARCH_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._search_url = search_url
        self._timeout = timeout_sec
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: SearchConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> BraveSearchClient | None:
        """Build a client, or ``None`` when no API key is configured."""
        if not config.enabled:
            return None
        return cls(config.brave_api_key, timeout_sec=config.timeout_sec, transport=transport)

    async def search(self, query: str) -> list[SearchResult]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(
                    self._search_url,
                    params={"q": query},
                    headers={
                        "X-Subscription-Token": self._api_key,
                        "Accept": "application/json",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("brave_search_timeout", extra={"query": query})
            raise SearchFailure(f"Search timed out after {self._timeout}s", {"query": query}) from e
        except httpx.HTTPError as e:
            logger.warning("brave_search_http_error", extra={"query": query, "error": str(e)})
            raise SearchFailure(f"Search HTTP error: {e}", {"query": query}) from e
        except ValueError as e:
            raise SearchFailure("Search returned invalid JSON", {"query": query}) from e

        web = data.get("web") if isinstance(data, dict) else None
        items = (web or {}).get("results") or []

        results = []
        for item in items:
            url = item.get("url")
            if not url:
                continue
            results.append(
                SearchResult(
                    url=url,
                    title=item.get("title") or "",
                    description=item.get("description") or "",
                )
            )

        logger.debug("brave_search_ok", extra={"query": query, "results": len(results)})
        return results
