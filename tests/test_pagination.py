"""Tests for PaginatedCollection cursor following."""

from __future__ import annotations

import httpx
import pytest

from linkding_companion.adapters.linkding import LinkdingClient
from tests.conftest import LINKDING_HOST, LINKDING_TOKEN, FakeLinkdingServer, make_client


@pytest.mark.asyncio
async def test_three_pages_yield_six_items_with_three_fetches():
    server = FakeLinkdingServer()
    for bookmark_id in range(1, 7):
        server.add(bookmark_id)

    async with make_client(server) as client:
        collection = client.list_bookmarks({"limit": 2})
        assert collection.total_count is None

        ids = [bookmark.id async for bookmark in collection]

    assert ids == [1, 2, 3, 4, 5, 6]
    assert collection.pages_fetched == 3
    assert len(server.requests) == 3
    assert collection.total_count == 6


@pytest.mark.asyncio
async def test_follows_next_url_verbatim():
    requested = []
    pages = {
        "/api/bookmarks/": {
            "count": 3,
            "next": f"{LINKDING_HOST}/api/bookmarks/?cursor=abc&limit=1",
            "results": [{"id": 1, "url": "https://a"}],
        },
        "abc": {
            "count": 3,
            "next": f"{LINKDING_HOST}/api/bookmarks/?cursor=def&limit=1",
            "results": [{"id": 2, "url": "https://b"}],
        },
        "def": {"count": 3, "next": None, "results": [{"id": 3, "url": "https://c"}]},
    }

    def handler(request):
        requested.append(str(request.url))
        key = request.url.params.get("cursor", request.url.path)
        return httpx.Response(200, json=pages[key])

    client = LinkdingClient(LINKDING_HOST, LINKDING_TOKEN, transport=httpx.MockTransport(handler))
    async with client:
        ids = [b.id async for b in client.list_bookmarks({"q": "python"})]

    assert ids == [1, 2, 3]
    assert "q=python" in requested[0]
    assert requested[1] == f"{LINKDING_HOST}/api/bookmarks/?cursor=abc&limit=1"
    assert requested[2] == f"{LINKDING_HOST}/api/bookmarks/?cursor=def&limit=1"


@pytest.mark.asyncio
async def test_cannot_iterate_twice():
    server = FakeLinkdingServer()
    server.add(1)

    async with make_client(server) as client:
        collection = client.list_bookmarks()
        assert [b.id async for b in collection] == [1]

        with pytest.raises(RuntimeError):
            async for _ in collection:
                pass

    assert len(server.requests) == 1


@pytest.mark.asyncio
async def test_empty_listing_ends_immediately():
    server = FakeLinkdingServer()

    async with make_client(server) as client:
        collection = client.list_bookmarks()
        items = [b async for b in collection]

    assert items == []
    assert collection.total_count == 0
    assert collection.pages_fetched == 1


@pytest.mark.asyncio
async def test_first_page_is_reused_by_iteration():
    server = FakeLinkdingServer()
    for bookmark_id in range(1, 4):
        server.add(bookmark_id)

    async with make_client(server) as client:
        collection = client.list_bookmarks({"limit": 2})
        first = await collection.first_page()
        assert [b.id for b in first] == [1, 2]
        assert collection.total_count == 3

        ids = [b.id async for b in collection]

    assert ids == [1, 2, 3]
    assert collection.pages_fetched == 2
