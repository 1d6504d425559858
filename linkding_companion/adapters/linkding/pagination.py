"""Lazy async iteration over linkding's cursor-linked list endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from linkding_companion.adapters.linkding.models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PageFetcher(Protocol):
    async def fetch_page(self, path_or_url: str, params: dict[str, Any] | None = None) -> Page:
        """Fetch one page of a listing."""


class PaginatedCollection(Generic[T]):
    """Forward-only, single-use iterator over every item of a listing.

    The first page is requested from ``path`` with ``params``; every later
    page is requested from the exact ``next`` URL the server returned. Only
    one page is held in memory at a time.

    Usage:
        async for bookmark in client.list_bookmarks({"q": "python"}):
            ...
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        parse_item: Callable[[dict[str, Any]], T],
    ) -> None:
        self._fetcher = fetcher
        self._path = path
        self._params = dict(params or {})
        self._parse_item = parse_item
        self._first_page: Page | None = None
        self._started = False
        self.total_count: int | None = None
        self.pages_fetched = 0

    async def _fetch(self, path_or_url: str, params: dict[str, Any] | None) -> Page:
        page = await self._fetcher.fetch_page(path_or_url, params)
        self.pages_fetched += 1
        self.total_count = page.count
        logger.debug(
            "linkding_page_fetched",
            extra={
                "path": self._path,
                "page": self.pages_fetched,
                "items": len(page.results),
                "count": page.count,
                "has_next": bool(page.next),
            },
        )
        return page

    async def first_page(self) -> list[T]:
        """Items of the first page only. Does not consume the iterator."""
        if self._first_page is None:
            if self._started:
                msg = "first_page() must be called before iteration starts"
                raise RuntimeError(msg)
            self._first_page = await self._fetch(self._path, self._params)
        return [self._parse_item(item) for item in self._first_page.results]

    def __aiter__(self) -> AsyncIterator[T]:
        if self._started:
            msg = "PaginatedCollection can only be iterated once"
            raise RuntimeError(msg)
        self._started = True
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        page = self._first_page
        if page is None:
            page = await self._fetch(self._path, self._params)
        self._first_page = None

        while True:
            for item in page.results:
                yield self._parse_item(item)
            if not page.next:
                return
            page = await self._fetch(page.next, None)
