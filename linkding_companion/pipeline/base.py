"""Guards shared by the enrichment tasks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from linkding_companion.domain.events import EventAction

if TYPE_CHECKING:
    from datetime import datetime

    from linkding_companion.adapters.linkding.models import Bookmark
    from linkding_companion.pipeline.context import TaskContext
    from linkding_companion.pipeline.graph import TaskName
    from linkding_companion.pipeline.protocols import EventLog

logger = logging.getLogger(__name__)


async def identity_since(events: EventLog, bookmark_id: int) -> datetime | None:
    """When the bookmark last changed identity (a saved search was resolved).

    Events recorded before that moment describe a different page.
    """
    searched = await events.latest(bookmark_id, EventAction.SEARCHED)
    if searched is None:
        return None
    return searched.created_at


async def already_done(events: EventLog, bookmark_id: int, action: EventAction) -> bool:
    """Whether ``action`` is recorded for the bookmark's current identity."""
    if action in (EventAction.SEARCHED, EventAction.BOOKMARK_CREATED):
        return await events.exists(bookmark_id, action)
    since = await identity_since(events, bookmark_id)
    return await events.exists(bookmark_id, action, since=since)


async def load_active_bookmark(
    ctx: TaskContext, bookmark_id: int, task: TaskName, action: EventAction
) -> Bookmark | None:
    """Fetch the bookmark, or ``None`` when it is archived or ``action`` is already recorded."""
    bookmark = await ctx.linkding.get_bookmark(bookmark_id)
    if bookmark.is_archived:
        logger.info(
            "task_skipped_archived", extra={"task": task.value, "bookmark_id": bookmark_id}
        )
        return None
    if await already_done(ctx.events, bookmark_id, action):
        logger.info(
            "task_skipped_already_done",
            extra={"task": task.value, "bookmark_id": bookmark_id, "action": action.value},
        )
        return None
    return bookmark
