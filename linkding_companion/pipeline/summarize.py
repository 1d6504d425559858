"""Write a short model-generated summary into the bookmark's description."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from linkding_companion.core.time_utils import utc_now
from linkding_companion.domain.events import EventAction, SummarizedExtra
from linkding_companion.pipeline.base import already_done, load_active_bookmark
from linkding_companion.pipeline.graph import TaskName
from linkding_companion.pipeline.prompts import build_summary_prompt
from linkding_companion.pipeline.readability import CONTENT_ASSET_NAME
from linkding_companion.pipeline.results import TaskOutcome

if TYPE_CHECKING:
    from linkding_companion.adapters.linkding.models import BookmarkAsset
    from linkding_companion.pipeline.context import TaskContext

logger = logging.getLogger(__name__)


async def find_content_asset(ctx: TaskContext, bookmark_id: int) -> BookmarkAsset | None:
    """Most recent uploaded ``content.txt`` asset of the bookmark."""
    candidates = [
        asset
        async for asset in ctx.linkding.list_bookmark_assets(bookmark_id)
        if asset.asset_type == "upload" and asset.display_name == CONTENT_ASSET_NAME
    ]
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda asset: (asset.date_created is not None, asset.date_created, asset.id),
    )


async def run_summarize(ctx: TaskContext, bookmark_id: int) -> TaskOutcome:
    bookmark = await load_active_bookmark(
        ctx, bookmark_id, TaskName.SUMMARIZE, EventAction.SUMMARIZED
    )
    if bookmark is None:
        return TaskOutcome.SKIPPED

    # Only text extracted for the bookmark's current URL is summarized.
    if not await already_done(ctx.events, bookmark_id, EventAction.READABILITY_EXTRACTED):
        logger.info("summarize_waiting_for_extraction", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.SKIPPED

    asset = await find_content_asset(ctx, bookmark_id)
    if asset is None:
        logger.info("summarize_no_content_asset", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.SKIPPED

    raw = await ctx.linkding.download_bookmark_asset(bookmark_id, asset.id)
    content = raw.decode("utf-8", errors="replace").strip()
    if not content:
        logger.info("summarize_empty_content", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.NO_OP

    response = await ctx.chat.ask(build_summary_prompt(content, ctx.content.summary_max_chars))
    summary = response.strip()
    if not summary:
        logger.info("summarize_empty_summary", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.NO_OP

    await ctx.linkding.update_bookmark(bookmark_id, bookmark.to_update_payload(description=summary))
    await ctx.events.append(
        bookmark_id,
        EventAction.SUMMARIZED,
        utc_now(),
        SummarizedExtra(
            url=bookmark.url,
            original_description=bookmark.description,
            summary_length=len(summary),
        ),
    )
    logger.info(
        "summarize_complete",
        extra={"bookmark_id": bookmark_id, "asset_id": asset.id, "summary_length": len(summary)},
    )
    return TaskOutcome.COMPLETED
