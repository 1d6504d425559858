"""Shared fakes and fixtures.

``FakeLinkdingServer`` answers the linkding REST routes the pipeline uses
from an in-memory store; tests plug it into a real ``LinkdingClient`` via
``httpx.MockTransport`` so request building and error mapping are exercised
too.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

import httpx
import pytest

from linkding_companion.adapters.linkding import LinkdingClient
from linkding_companion.adapters.search import SearchResult
from linkding_companion.config import ContentConfig, PipelineConfig
from linkding_companion.domain.events import Event, EventAction
from linkding_companion.domain.exceptions import ExtractionFailure, SearchFailure
from linkding_companion.pipeline.context import TaskContext

LINKDING_HOST = "http://linkding.test"
LINKDING_TOKEN = "test-token"


def make_bookmark(bookmark_id: int, **overrides: Any) -> dict[str, Any]:
    """A bookmark as linkding serializes it."""
    data: dict[str, Any] = {
        "id": bookmark_id,
        "url": f"https://example.com/articles/{bookmark_id}",
        "title": f"Article {bookmark_id}",
        "description": "",
        "notes": "",
        "web_archive_snapshot_url": "",
        "favicon_url": None,
        "preview_image_url": None,
        "is_archived": False,
        "unread": False,
        "shared": False,
        "tag_names": [],
        "date_added": "2025-01-02T03:04:05.000000Z",
        "date_modified": "2025-01-02T03:04:05.000000Z",
    }
    data.update(overrides)
    return data


def _parse_multipart(request: httpx.Request) -> dict[str, tuple[str | None, bytes]]:
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=", 1)[1].encode()
    parts: dict[str, tuple[str | None, bytes]] = {}
    for chunk in request.content.split(b"--" + boundary):
        if b"\r\n\r\n" not in chunk:
            continue
        head, _, body = chunk.partition(b"\r\n\r\n")
        name = re.search(rb'name="([^"]+)"', head)
        filename = re.search(rb'filename="([^"]+)"', head)
        if name is None:
            continue
        parts[name.group(1).decode()] = (
            filename.group(1).decode() if filename else None,
            body.removesuffix(b"\r\n"),
        )
    return parts


@dataclass
class FakeLinkdingServer:
    """In-memory linkding. Pages are sliced with limit/offset like the real API."""

    bookmarks: dict[int, dict[str, Any]] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    assets: dict[int, list[dict[str, Any]]] = field(default_factory=dict)
    asset_content: dict[int, bytes] = field(default_factory=dict)
    page_size: int = 100
    fail_uploads: bool = False
    requests: list[httpx.Request] = field(default_factory=list)
    _next_asset_id: int = 1

    def add(self, bookmark_id: int, **overrides: Any) -> dict[str, Any]:
        self.bookmarks[bookmark_id] = make_bookmark(bookmark_id, **overrides)
        return self.bookmarks[bookmark_id]

    def add_asset(
        self,
        bookmark_id: int,
        display_name: str,
        content: bytes,
        *,
        asset_type: str = "upload",
    ) -> dict[str, Any]:
        asset_id = self._next_asset_id
        self._next_asset_id += 1
        asset = {
            "id": asset_id,
            "bookmark": bookmark_id,
            "asset_type": asset_type,
            "date_created": (datetime(2025, 1, 1, tzinfo=UTC) + timedelta(minutes=asset_id))
            .isoformat(),
            "content_type": "text/plain",
            "display_name": display_name,
            "file_size": len(content),
            "status": "complete",
        }
        self.assets.setdefault(bookmark_id, []).append(asset)
        self.asset_content[asset_id] = content
        return asset

    def writes(self, method: str = "PUT") -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def _page(self, request: httpx.Request, items: list[dict[str, Any]]) -> httpx.Response:
        limit = int(request.url.params.get("limit", self.page_size))
        offset = int(request.url.params.get("offset", 0))
        results = items[offset : offset + limit]
        next_url = None
        if offset + limit < len(items):
            query = dict(request.url.params)
            query.update({"limit": str(limit), "offset": str(offset + limit)})
            next_url = f"{LINKDING_HOST}{request.url.path}?{urlencode(query)}"
        return httpx.Response(
            200,
            json={"count": len(items), "next": next_url, "previous": None, "results": results},
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("authorization") != f"Token {LINKDING_TOKEN}":
            return httpx.Response(401, json={"detail": "Invalid token."})

        path = request.url.path
        method = request.method

        if path == "/api/bookmarks/" and method == "GET":
            return self._page(request, [self.bookmarks[k] for k in sorted(self.bookmarks)])
        if path == "/api/tags/" and method == "GET":
            tags = [{"id": i + 1, "name": name, "date_added": None} for i, name in enumerate(self.tags)]
            return self._page(request, tags)

        match = re.fullmatch(r"/api/bookmarks/(\d+)/(.*)", path)
        if match is None:
            return httpx.Response(404, json={"detail": "Not found."})
        bookmark_id, rest = int(match.group(1)), match.group(2)
        bookmark = self.bookmarks.get(bookmark_id)
        if bookmark is None:
            return httpx.Response(404, json={"detail": "Not found."})

        if rest == "" and method == "GET":
            return httpx.Response(200, json=bookmark)
        if rest == "" and method == "PUT":
            payload = json.loads(request.content)
            bookmark.update(payload)
            self.tags.extend(tag for tag in payload.get("tag_names", []) if tag not in self.tags)
            return httpx.Response(200, json=bookmark)
        if rest == "assets/" and method == "GET":
            return self._page(request, self.assets.get(bookmark_id, []))
        if rest == "assets/upload/" and method == "POST":
            if self.fail_uploads:
                return httpx.Response(500, text="upload broke")
            filename, content = _parse_multipart(request)["file"]
            return httpx.Response(201, json=self.add_asset(bookmark_id, filename or "", content))

        download = re.fullmatch(r"assets/(\d+)/download/", rest)
        if download and method == "GET":
            content = self.asset_content.get(int(download.group(1)))
            if content is None:
                return httpx.Response(404, json={"detail": "Not found."})
            return httpx.Response(200, content=content)

        return httpx.Response(404, json={"detail": "Not found."})


def make_client(server: FakeLinkdingServer) -> LinkdingClient:
    return LinkdingClient(LINKDING_HOST, LINKDING_TOKEN, transport=server.transport())


class FakeEventLog:
    """List-backed event log. ``created_at`` advances one second per append."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self._clock = datetime(2025, 6, 1, tzinfo=UTC)

    async def append(self, bookmark_id, action, occurred_at, extra) -> Event:
        self._clock += timedelta(seconds=1)
        event = Event.build(
            id=len(self.events) + 1,
            bookmark_id=bookmark_id,
            action=action,
            occurred_at=occurred_at or self._clock,
            extra=extra,
            created_at=self._clock,
        )
        self.events.append(event)
        return event

    async def exists(self, bookmark_id, action, *, since=None) -> bool:
        return any(
            e.bookmark_id == bookmark_id
            and e.action == EventAction(action)
            and (since is None or e.created_at >= since)
            for e in self.events
        )

    async def latest(self, bookmark_id, action) -> Event | None:
        matching = [
            e for e in self.events if e.bookmark_id == bookmark_id and e.action == EventAction(action)
        ]
        return matching[-1] if matching else None

    async def list_for_bookmark(self, bookmark_id) -> list[Event]:
        return [e for e in self.events if e.bookmark_id == bookmark_id]

    def actions(self, bookmark_id: int) -> list[str]:
        return [e.action.value for e in self.events if e.bookmark_id == bookmark_id]


class RecordingDispatcher:
    """Records submissions instead of running them."""

    def __init__(self) -> None:
        self.submitted: list[tuple[str, int | None]] = []
        self.running: set[tuple[str, int | None]] = set()

    async def submit(self, task, bookmark_id=None) -> None:
        self.submitted.append((str(task), bookmark_id))

    def is_pending(self, task, bookmark_id=None) -> bool:
        return (str(task), bookmark_id) in self.running


class FakeChat:
    def __init__(self, *responses: str) -> None:
        self._responses = list(responses)
        self.prompts: list[str] = []

    async def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._responses.pop(0)

    async def aclose(self) -> None:
        return None


class FakeExtractor:
    def __init__(self, text: str | None = "Readable body text.") -> None:
        self.text = text
        self.urls: list[str] = []

    async def extract(self, url: str) -> str:
        self.urls.append(url)
        if self.text is None:
            raise ExtractionFailure("low confidence", {"url": url})
        return self.text


class FakeSearch:
    def __init__(self, results: list[SearchResult] | None = None, *, fail: bool = False) -> None:
        self.results = results or []
        self.fail = fail
        self.queries: list[str] = []

    async def search(self, query: str) -> list[SearchResult]:
        self.queries.append(query)
        if self.fail:
            raise SearchFailure("provider down", {"query": query})
        return self.results


def make_context(
    client: LinkdingClient,
    *,
    events: FakeEventLog | None = None,
    dispatcher: Any = None,
    chat: FakeChat | None = None,
    extractor: FakeExtractor | None = None,
    search: FakeSearch | None = None,
    pipeline: PipelineConfig | None = None,
) -> TaskContext:
    return TaskContext(
        linkding=client,
        events=events or FakeEventLog(),
        dispatcher=dispatcher or RecordingDispatcher(),
        chat=chat or FakeChat(),
        extractor=extractor or FakeExtractor(),
        search=search,
        pipeline=pipeline or PipelineConfig(),
        content=ContentConfig(),
    )


@pytest.fixture
def server() -> FakeLinkdingServer:
    return FakeLinkdingServer()


@pytest.fixture(autouse=True)
def _isolate_linkding_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real linkding credentials out of the tests."""
    for name in ("LINKDING_HOST", "LINKDING_API_KEY", "BRAVE_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
