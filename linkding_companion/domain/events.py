"""Typed enrichment events.

An event records that an enrichment action happened for a bookmark. The
``extra`` payload is a variant keyed by the action, so every action has
exactly one payload shape.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError


class EventAction(StrEnum):
    BOOKMARK_CREATED = "bookmark_created"
    TAGGED = "tagged"
    READABILITY_EXTRACTED = "readability_extracted"
    SEARCHED = "searched"
    SUMMARIZED = "summarized"


class _Extra(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BookmarkCreatedExtra(_Extra):
    snapshot: dict[str, Any] = Field(default_factory=dict)


class TaggedExtra(_Extra):
    tags: list[str]


class ReadabilityExtractedExtra(_Extra):
    url: str
    content_length: int


class SearchedExtra(_Extra):
    query: str
    original_url: str


class SummarizedExtra(_Extra):
    url: str
    original_description: str = ""
    summary_length: int


EventExtra: TypeAlias = (
    BookmarkCreatedExtra
    | TaggedExtra
    | ReadabilityExtractedExtra
    | SearchedExtra
    | SummarizedExtra
)

EXTRA_MODELS: dict[EventAction, type[_Extra]] = {
    EventAction.BOOKMARK_CREATED: BookmarkCreatedExtra,
    EventAction.TAGGED: TaggedExtra,
    EventAction.READABILITY_EXTRACTED: ReadabilityExtractedExtra,
    EventAction.SEARCHED: SearchedExtra,
    EventAction.SUMMARIZED: SummarizedExtra,
}


def parse_extra(action: EventAction | str, extra: EventExtra | dict[str, Any] | None) -> EventExtra:
    """Validate ``extra`` against the payload model of ``action``.

    Raises:
        ValueError: If the action is unknown or the payload has the wrong shape.
    """
    action = EventAction(action)
    model = EXTRA_MODELS[action]
    if isinstance(extra, model):
        return extra
    if isinstance(extra, _Extra):
        msg = f"{type(extra).__name__} is not a valid payload for {action.value}"
        raise ValueError(msg)
    try:
        return model.model_validate(extra or {})  # type: ignore[return-value]
    except PydanticValidationError as exc:
        msg = f"Invalid payload for {action.value}: {exc}"
        raise ValueError(msg) from exc


class Event(BaseModel):
    """An appended event, as read back from the log."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    bookmark_id: int
    action: EventAction
    occurred_at: datetime
    extra: EventExtra
    created_at: datetime | None = None

    @classmethod
    def build(
        cls,
        *,
        bookmark_id: int,
        action: EventAction | str,
        occurred_at: datetime,
        extra: EventExtra | dict[str, Any] | None,
        id: int | None = None,  # noqa: A002
        created_at: datetime | None = None,
    ) -> Event:
        action = EventAction(action)
        return cls(
            id=id,
            bookmark_id=bookmark_id,
            action=action,
            occurred_at=occurred_at,
            extra=parse_extra(action, extra),
            created_at=created_at,
        )
