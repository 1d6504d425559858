"""Pydantic models for the linkding REST API."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Fields accepted by PUT /api/bookmarks/{id}/. Everything else is server-managed.
WRITABLE_BOOKMARK_FIELDS: tuple[str, ...] = (
    "url",
    "title",
    "description",
    "notes",
    "tag_names",
    "is_archived",
    "unread",
    "shared",
)


def merge_tags(existing: list[str], new: list[str]) -> list[str]:
    """Union of two tag lists, keeping the order of first appearance."""
    merged: list[str] = []
    for tag in [*existing, *new]:
        if tag and tag not in merged:
            merged.append(tag)
    return merged


class Bookmark(BaseModel):
    """A bookmark as returned by linkding.

    Unknown server fields are kept so a merge-then-write round trip never
    loses data the client does not model.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    url: str
    title: str = ""
    description: str = ""
    notes: str = ""
    tag_names: list[str] = Field(default_factory=list)
    is_archived: bool = False
    unread: bool = False
    shared: bool = False
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("date_added", "created_at")
    )
    modified_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("date_modified", "modified_at")
    )

    def to_update_payload(self, **changes: Any) -> dict[str, Any]:
        """Full writable field set with ``changes`` applied on top.

        Every update goes through this so a task's delta never drops
        unrelated fields on the server.
        """
        unknown = set(changes) - set(WRITABLE_BOOKMARK_FIELDS)
        if unknown:
            msg = f"Not writable bookmark fields: {sorted(unknown)}"
            raise ValueError(msg)
        payload = self.model_dump(mode="json", include=set(WRITABLE_BOOKMARK_FIELDS))
        payload.update(changes)
        return payload

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe copy of everything the server sent, for event payloads."""
        return self.model_dump(mode="json")


class BookmarkAsset(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    bookmark: int | None = None
    asset_type: str = "upload"
    content_type: str | None = None
    display_name: str = ""
    file_size: int | None = None
    status: str | None = None
    date_created: datetime | None = None


class Tag(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    name: str
    date_added: datetime | None = None


class Bundle(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    name: str
    search: str = ""
    any_tags: str = ""
    all_tags: str = ""
    excluded_tags: str = ""
    order: int | None = None


class UserProfile(BaseModel):
    """Profile settings; linkding adds fields across releases so all are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class CheckResult(BaseModel):
    """Response of GET /api/bookmarks/check/?url=..."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    bookmark: Bookmark | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    auto_tags: list[str] = Field(default_factory=list)


class Page(BaseModel):
    """One page of a cursor-linked listing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    count: int | None = None
    next: str | None = None
    previous: str | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)
