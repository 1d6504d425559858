"""Exceptions raised by the linkding API client, one per response class."""

from __future__ import annotations

from typing import Any


class LinkdingError(Exception):
    """Base exception for linkding client errors.

    ``status_code`` is ``None`` when the request never got a response
    (connection failure, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class UnconfiguredError(LinkdingError):
    """Host or API key could not be resolved; raised before any request is made."""


class AuthenticationError(LinkdingError):
    """401: the API key was rejected."""


class NotFoundError(LinkdingError):
    """404: the bookmark, asset, tag or bundle does not exist."""


class ValidationError(LinkdingError):
    """400/422: the server rejected the payload."""
