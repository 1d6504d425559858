"""Linkding REST API adapter."""

from linkding_companion.adapters.linkding.client import LinkdingClient
from linkding_companion.adapters.linkding.exceptions import (
    AuthenticationError,
    LinkdingError,
    NotFoundError,
    UnconfiguredError,
    ValidationError,
)
from linkding_companion.adapters.linkding.models import Bookmark, BookmarkAsset, Page, Tag
from linkding_companion.adapters.linkding.pagination import PaginatedCollection

__all__ = [
    "AuthenticationError",
    "Bookmark",
    "BookmarkAsset",
    "LinkdingClient",
    "LinkdingError",
    "NotFoundError",
    "Page",
    "PaginatedCollection",
    "Tag",
    "UnconfiguredError",
    "ValidationError",
]
