"""Walk the bookmark listing and start the pipeline for every bookmark not seen before."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from linkding_companion.core.time_utils import utc_now
from linkding_companion.domain.events import BookmarkCreatedExtra, EventAction
from linkding_companion.pipeline.graph import FIRST_WAVE
from linkding_companion.pipeline.results import SweepResult

if TYPE_CHECKING:
    from linkding_companion.pipeline.context import TaskContext

logger = logging.getLogger(__name__)


async def run_sync_sweep(
    ctx: TaskContext, *, limit: int | None = None, correlation_id: str | None = None
) -> SweepResult:
    """Submit the first-wave tasks for unseen bookmarks and record them as seen.

    Tasks are submitted before ``bookmark_created`` is appended: a crash in
    between means the bookmark is picked up again on the next sweep, and the
    task guards absorb the duplicate submission.

    Args:
        ctx: Task collaborators.
        limit: Stop after this many new bookmarks (``None`` for no limit).
        correlation_id: Carried into log records.
    """
    started = time.perf_counter()
    result = SweepResult()
    bookmarks = ctx.linkding.list_bookmarks()

    logger.info("sync_sweep_started", extra={"cid": correlation_id, "limit": limit})

    async for bookmark in bookmarks:
        result.scanned += 1
        if await ctx.events.exists(bookmark.id, EventAction.BOOKMARK_CREATED):
            result.skipped_seen += 1
            continue
        if bookmark.is_archived:
            result.skipped_archived += 1
            continue

        for task in FIRST_WAVE:
            await ctx.dispatcher.submit(task, bookmark.id)

        await ctx.events.append(
            bookmark.id,
            EventAction.BOOKMARK_CREATED,
            bookmark.created_at or utc_now(),
            BookmarkCreatedExtra(snapshot=bookmark.snapshot()),
        )
        result.submitted += 1
        logger.debug(
            "sync_sweep_bookmark_submitted",
            extra={"cid": correlation_id, "bookmark_id": bookmark.id, "url": bookmark.url},
        )

        if limit is not None and result.submitted >= limit:
            result.limit_reached = True
            break

    result.total_count = bookmarks.total_count
    result.duration_seconds = time.perf_counter() - started
    logger.info("sync_sweep_complete", extra={"cid": correlation_id, **result.to_dict()})
    return result
