"""Web-search adapters."""

from linkding_companion.adapters.search.brave_client import (
    BraveSearchClient,
    SearchClientProtocol,
    SearchResult,
)

__all__ = ["BraveSearchClient", "SearchClientProtocol", "SearchResult"]
