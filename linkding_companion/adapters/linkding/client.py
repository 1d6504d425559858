"""Linkding API client."""

from __future__ import annotations

import json
import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from linkding_companion import __version__
from linkding_companion.adapters.linkding.exceptions import (
    AuthenticationError,
    LinkdingError,
    NotFoundError,
    UnconfiguredError,
    ValidationError,
)
from linkding_companion.adapters.linkding.models import (
    Bookmark,
    BookmarkAsset,
    Bundle,
    CheckResult,
    Page,
    Tag,
    UserProfile,
)
from linkding_companion.adapters.linkding.pagination import PaginatedCollection

if TYPE_CHECKING:
    from typing import Self

    from linkding_companion.config.integrations import LinkdingConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"linkding-companion/{__version__}"


def _extract_error_message(response: httpx.Response) -> str:
    """Human-readable message for a rejected payload.

    Prefers ``detail``, then ``errors`` (joined when it is a list), then the
    raw body.
    """
    text = response.text
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return text

    if isinstance(data, dict):
        detail = data.get("detail")
        if detail:
            return str(detail)
        errors = data.get("errors")
        if errors:
            if isinstance(errors, list):
                return ", ".join(str(error) for error in errors)
            return str(errors)
    return text


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


class LinkdingClient:
    """Async HTTP client for the linkding REST API.

    Holds one ``httpx.AsyncClient`` for its lifetime; use it as an async
    context manager. Every non-2xx response is raised as a typed
    ``LinkdingError`` subclass. Retrying is left to the caller.
    """

    def __init__(
        self,
        host: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize the client.

        Args:
            host: Base URL of the linkding instance. Falls back to ``LINKDING_HOST``.
            api_key: REST API token. Falls back to ``LINKDING_API_KEY``.
            timeout: Per-request timeout in seconds.
            page_size: Default ``limit`` for list endpoints.
            transport: Optional httpx transport (used by tests).
            user_agent: User-Agent header value.

        Raises:
            UnconfiguredError: If host or API key cannot be resolved.
        """
        if not host or not api_key:
            from linkding_companion.config.settings import load_linkding_config

            try:
                env_config = load_linkding_config()
            except RuntimeError as exc:
                raise UnconfiguredError(str(exc)) from exc
            host = host or env_config.host
            api_key = api_key or env_config.api_key

        if not host:
            msg = "Linkding host is not configured. Set LINKDING_HOST or pass host."
            raise UnconfiguredError(msg)
        if not api_key:
            msg = "Linkding API key is not configured. Set LINKDING_API_KEY or pass api_key."
            raise UnconfiguredError(msg)

        self.host = host.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.page_size = page_size
        self._transport = transport
        self._user_agent = user_agent
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls, config: LinkdingConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> LinkdingClient:
        return cls(
            config.host or None,
            config.api_key or None,
            timeout=config.timeout_sec,
            page_size=config.page_size,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.host,
            headers={
                "Authorization": f"Token {self.api_key}",
                "Accept": "application/json",
                "User-Agent": self._user_agent,
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client."""
        if self._client is None:
            raise LinkdingError("Client not initialized. Use async context manager.")
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        files: dict[str, Any] | None = None,
        raw: bool = False,
    ) -> Any:
        try:
            response = await self.client.request(
                method, path, params=params, json=json_body, files=files
            )
        except httpx.TransportError as exc:
            logger.warning(
                "linkding_transport_error",
                extra={"method": method, "path": path, "error": str(exc)},
            )
            msg = f"{method} {path} failed: {exc.__class__.__name__}: {exc}"
            raise LinkdingError(msg) from exc
        return self._handle_response(response, raw=raw)

    def _handle_response(self, response: httpx.Response, *, raw: bool = False) -> Any:
        """Map a response to its body or a typed error.

        Returns the decoded JSON body, the raw bytes when ``raw`` is set, or
        ``None`` for an empty body.
        """
        status = response.status_code
        if 200 <= status < 300:
            if raw:
                return response.content
            if not response.content:
                return None
            try:
                return response.json()
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                request = response.request
                msg = f"Non-JSON response for {request.method} {request.url.path}"
                raise LinkdingError(msg, status_code=status, body=response.text) from exc

        request = response.request
        where = f"{request.method} {request.url.path}"
        body = _response_body(response)
        logger.debug(
            "linkding_request_failed",
            extra={"status_code": status, "request": where},
        )

        if status == 401:
            raise AuthenticationError(
                f"Authentication failed for {where}", status_code=status, body=body
            )
        if status == 404:
            raise NotFoundError(f"Not found: {where}", status_code=status, body=body)
        if status in (400, 422):
            raise ValidationError(_extract_error_message(response), status_code=status, body=body)
        raise LinkdingError(
            f"Unexpected status {status} for {where}", status_code=status, body=body
        )

    def _paginate(
        self, path: str, params: dict[str, Any] | None, parse_item: Any
    ) -> PaginatedCollection[Any]:
        query = {"limit": self.page_size, **(params or {})}
        return PaginatedCollection(self, path, query, parse_item=parse_item)

    async def fetch_page(self, path_or_url: str, params: dict[str, Any] | None = None) -> Page:
        """Fetch a single listing page from a path or an absolute ``next`` URL."""
        data = await self._request("GET", path_or_url, params=params)
        return Page.model_validate(data or {})

    # Bookmarks

    def list_bookmarks(self, params: dict[str, Any] | None = None) -> PaginatedCollection[Bookmark]:
        return self._paginate("/api/bookmarks/", params, Bookmark.model_validate)

    def list_archived_bookmarks(
        self, params: dict[str, Any] | None = None
    ) -> PaginatedCollection[Bookmark]:
        return self._paginate("/api/bookmarks/archived/", params, Bookmark.model_validate)

    async def get_bookmark(self, bookmark_id: int) -> Bookmark:
        data = await self._request("GET", f"/api/bookmarks/{bookmark_id}/")
        return Bookmark.model_validate(data)

    async def check_bookmark(self, url: str) -> CheckResult:
        """Look up whether ``url`` is bookmarked and fetch its scraped metadata."""
        data = await self._request("GET", "/api/bookmarks/check/", params={"url": url})
        return CheckResult.model_validate(data or {})

    async def create_bookmark(self, data: dict[str, Any]) -> Bookmark:
        created = await self._request("POST", "/api/bookmarks/", json_body=data)
        bookmark = Bookmark.model_validate(created)
        logger.info("linkding_bookmark_created", extra={"bookmark_id": bookmark.id})
        return bookmark

    async def update_bookmark(self, bookmark_id: int, data: dict[str, Any]) -> Bookmark:
        """Replace a bookmark (PUT).

        ``data`` must carry every writable field; build it with
        ``Bookmark.to_update_payload`` so unrelated fields survive.
        """
        updated = await self._request("PUT", f"/api/bookmarks/{bookmark_id}/", json_body=data)
        return Bookmark.model_validate(updated)

    async def patch_bookmark(self, bookmark_id: int, data: dict[str, Any]) -> Bookmark:
        updated = await self._request("PATCH", f"/api/bookmarks/{bookmark_id}/", json_body=data)
        return Bookmark.model_validate(updated)

    async def archive_bookmark(self, bookmark_id: int) -> None:
        await self._request("POST", f"/api/bookmarks/{bookmark_id}/archive/")

    async def unarchive_bookmark(self, bookmark_id: int) -> None:
        await self._request("POST", f"/api/bookmarks/{bookmark_id}/unarchive/")

    async def delete_bookmark(self, bookmark_id: int) -> None:
        await self._request("DELETE", f"/api/bookmarks/{bookmark_id}/")
        logger.info("linkding_bookmark_deleted", extra={"bookmark_id": bookmark_id})

    # Assets

    def list_bookmark_assets(
        self, bookmark_id: int, params: dict[str, Any] | None = None
    ) -> PaginatedCollection[BookmarkAsset]:
        return self._paginate(
            f"/api/bookmarks/{bookmark_id}/assets/", params, BookmarkAsset.model_validate
        )

    async def get_bookmark_asset(self, bookmark_id: int, asset_id: int) -> BookmarkAsset:
        data = await self._request("GET", f"/api/bookmarks/{bookmark_id}/assets/{asset_id}/")
        return BookmarkAsset.model_validate(data)

    async def download_bookmark_asset(self, bookmark_id: int, asset_id: int) -> bytes:
        return await self._request(
            "GET", f"/api/bookmarks/{bookmark_id}/assets/{asset_id}/download/", raw=True
        )

    async def upload_bookmark_asset(
        self, bookmark_id: int, filename: str, content: bytes | str
    ) -> BookmarkAsset:
        """Upload ``content`` as a file asset named ``filename``.

        The multipart body has one part named ``file``; its content type is
        guessed from the filename extension.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        data = await self._request(
            "POST",
            f"/api/bookmarks/{bookmark_id}/assets/upload/",
            files={"file": (filename, content, content_type)},
        )
        asset = BookmarkAsset.model_validate(data)
        logger.info(
            "linkding_asset_uploaded",
            extra={
                "bookmark_id": bookmark_id,
                "asset_id": asset.id,
                "display_name": filename,
                "size": len(content),
            },
        )
        return asset

    async def upload_bookmark_asset_file(self, bookmark_id: int, path: str | Path) -> BookmarkAsset:
        file_path = Path(path)
        return await self.upload_bookmark_asset(bookmark_id, file_path.name, file_path.read_bytes())

    async def delete_bookmark_asset(self, bookmark_id: int, asset_id: int) -> None:
        await self._request("DELETE", f"/api/bookmarks/{bookmark_id}/assets/{asset_id}/")

    # Tags

    def list_tags(self, params: dict[str, Any] | None = None) -> PaginatedCollection[Tag]:
        return self._paginate("/api/tags/", params, Tag.model_validate)

    async def get_tag(self, tag_id: int) -> Tag:
        data = await self._request("GET", f"/api/tags/{tag_id}/")
        return Tag.model_validate(data)

    async def create_tag(self, data: dict[str, Any]) -> Tag:
        created = await self._request("POST", "/api/tags/", json_body=data)
        return Tag.model_validate(created)

    # Bundles

    def list_bundles(self, params: dict[str, Any] | None = None) -> PaginatedCollection[Bundle]:
        return self._paginate("/api/bundles/", params, Bundle.model_validate)

    async def get_bundle(self, bundle_id: int) -> Bundle:
        data = await self._request("GET", f"/api/bundles/{bundle_id}/")
        return Bundle.model_validate(data)

    async def create_bundle(self, data: dict[str, Any]) -> Bundle:
        created = await self._request("POST", "/api/bundles/", json_body=data)
        return Bundle.model_validate(created)

    async def update_bundle(self, bundle_id: int, data: dict[str, Any]) -> Bundle:
        updated = await self._request("PUT", f"/api/bundles/{bundle_id}/", json_body=data)
        return Bundle.model_validate(updated)

    async def patch_bundle(self, bundle_id: int, data: dict[str, Any]) -> Bundle:
        updated = await self._request("PATCH", f"/api/bundles/{bundle_id}/", json_body=data)
        return Bundle.model_validate(updated)

    async def delete_bundle(self, bundle_id: int) -> None:
        await self._request("DELETE", f"/api/bundles/{bundle_id}/")

    # User

    async def get_user_profile(self) -> UserProfile:
        data = await self._request("GET", "/api/user/profile/")
        return UserProfile.model_validate(data or {})
