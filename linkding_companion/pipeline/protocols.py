"""Interfaces the pipeline depends on, kept free of storage and queue details."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from linkding_companion.domain.events import Event, EventAction, EventExtra
    from linkding_companion.pipeline.graph import TaskName


class EventLog(Protocol):
    """Append-only record of enrichment actions per bookmark."""

    async def append(
        self,
        bookmark_id: int,
        action: EventAction | str,
        occurred_at: datetime | None,
        extra: EventExtra | dict[str, Any] | None,
    ) -> Event:
        """Insert unconditionally; callers check ``exists`` first."""
        ...

    async def exists(
        self, bookmark_id: int, action: EventAction | str, *, since: datetime | None = None
    ) -> bool:
        """Whether ``action`` was recorded for the bookmark (at or after ``since``)."""
        ...

    async def latest(self, bookmark_id: int, action: EventAction | str) -> Event | None: ...


class TaskDispatcher(Protocol):
    """At-least-once job runner. ``submit`` enqueues and returns immediately."""

    async def submit(self, task: TaskName | str, bookmark_id: int | None = None) -> None: ...

    def is_pending(self, task: TaskName | str, bookmark_id: int | None = None) -> bool:
        """Whether a matching job is queued or running."""
        ...
