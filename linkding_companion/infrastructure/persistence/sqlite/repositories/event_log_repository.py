"""SQLite implementation of the enrichment event log.

The log is append-only: there is no update or delete. Guards in the
pipeline read it through ``exists`` and ``latest``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import peewee

from linkding_companion.core.time_utils import ensure_aware, utc_now
from linkding_companion.db.models import Event as EventRow
from linkding_companion.domain.events import Event, EventAction, EventExtra, parse_extra
from linkding_companion.infrastructure.persistence.sqlite.base import SqliteBaseRepository


def _row_to_event(row: EventRow) -> Event:
    return Event.build(
        id=row.id,
        bookmark_id=row.bookmark_id,
        action=row.action,
        occurred_at=ensure_aware(row.occurred_at),
        extra=row.extra,
        created_at=ensure_aware(row.created_at),
    )


class SqliteEventLogRepository(SqliteBaseRepository):
    """Event log backed by the ``events`` table."""

    async def async_append(
        self,
        bookmark_id: int,
        action: EventAction | str,
        occurred_at: datetime | None,
        extra: EventExtra | dict[str, Any] | None,
    ) -> Event:
        """Insert an event unconditionally.

        Raises:
            ValueError: If ``extra`` does not match the payload shape of ``action``.
        """
        action = EventAction(action)
        payload = parse_extra(action, extra)
        occurred = ensure_aware(occurred_at) or utc_now()

        def _insert() -> EventRow:
            return EventRow.create(
                bookmark_id=bookmark_id,
                action=action.value,
                occurred_at=occurred,
                extra=payload.model_dump(mode="json"),
            )

        row = await self._write(_insert, operation_name="append_event")
        return _row_to_event(row)

    async def async_exists(
        self,
        bookmark_id: int,
        action: EventAction | str,
        *,
        since: datetime | None = None,
    ) -> bool:
        """Whether ``action`` was recorded for the bookmark, optionally at or after ``since``."""
        action = EventAction(action)

        def _query() -> bool:
            query = EventRow.select(EventRow.id).where(
                (EventRow.bookmark_id == bookmark_id) & (EventRow.action == action.value)
            )
            if since is not None:
                query = query.where(EventRow.created_at >= since)
            return query.exists()

        return await self._read(_query, operation_name="event_exists")

    async def async_latest(self, bookmark_id: int, action: EventAction | str) -> Event | None:
        action = EventAction(action)

        def _query() -> EventRow | None:
            return (
                EventRow.select()
                .where((EventRow.bookmark_id == bookmark_id) & (EventRow.action == action.value))
                .order_by(EventRow.created_at.desc(), EventRow.id.desc())
                .first()
            )

        row = await self._read(_query, operation_name="latest_event")
        return _row_to_event(row) if row is not None else None

    async def async_list_for_bookmark(self, bookmark_id: int) -> list[Event]:
        def _query() -> list[EventRow]:
            return list(
                EventRow.select()
                .where(EventRow.bookmark_id == bookmark_id)
                .order_by(EventRow.created_at, EventRow.id)
            )

        rows = await self._read(_query, operation_name="list_events_for_bookmark")
        return [_row_to_event(row) for row in rows]

    async def async_stats(self) -> dict[str, Any]:
        """Event counts by action, distinct bookmarks and the last recorded time."""

        def _query() -> dict[str, Any]:
            by_action = {
                str(row["action"]): int(row["cnt"])
                for row in EventRow.select(
                    EventRow.action, peewee.fn.COUNT(EventRow.id).alias("cnt")
                )
                .group_by(EventRow.action)
                .dicts()
            }
            bookmarks = (
                EventRow.select(peewee.fn.COUNT(peewee.fn.DISTINCT(EventRow.bookmark_id))).scalar()
                or 0
            )
            last = (
                EventRow.select(EventRow.created_at)
                .order_by(EventRow.created_at.desc(), EventRow.id.desc())
                .first()
            )
            return {
                "total": sum(by_action.values()),
                "by_action": {action.value: by_action.get(action.value, 0) for action in EventAction},
                "bookmarks": int(bookmarks),
                "last_recorded_at": ensure_aware(last.created_at) if last else None,
            }

        return await self._read(_query, operation_name="event_stats")

    # EventLog protocol
    append = async_append
    exists = async_exists
    latest = async_latest
    list_for_bookmark = async_list_for_bookmark
    stats = async_stats
