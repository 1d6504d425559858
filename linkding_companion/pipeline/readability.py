"""Extract the page's readable text into the bookmark's notes and a content.txt asset."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from linkding_companion.adapters.linkding.exceptions import LinkdingError
from linkding_companion.core.time_utils import utc_now
from linkding_companion.core.url_utils import has_scheme_and_host
from linkding_companion.domain.events import EventAction, ReadabilityExtractedExtra
from linkding_companion.domain.exceptions import ExtractionFailure
from linkding_companion.pipeline.base import load_active_bookmark
from linkding_companion.pipeline.graph import TaskName
from linkding_companion.pipeline.results import TaskOutcome

if TYPE_CHECKING:
    from linkding_companion.pipeline.context import TaskContext

logger = logging.getLogger(__name__)

CONTENT_ASSET_NAME = "content.txt"
NOTES_SEPARATOR = "\n\n---\n\n"
CONTENT_HEADING = "Content:\n\n"


def append_content_to_notes(notes: str, content: str) -> str:
    separator = NOTES_SEPARATOR if notes else ""
    return f"{notes}{separator}{CONTENT_HEADING}{content}"


async def run_readability(ctx: TaskContext, bookmark_id: int) -> TaskOutcome:
    bookmark = await load_active_bookmark(
        ctx, bookmark_id, TaskName.READABILITY, EventAction.READABILITY_EXTRACTED
    )
    if bookmark is None:
        return TaskOutcome.SKIPPED

    if not has_scheme_and_host(bookmark.url):
        logger.warning(
            "readability_invalid_url", extra={"bookmark_id": bookmark_id, "url": bookmark.url}
        )
        return TaskOutcome.SKIPPED

    try:
        content = await ctx.extractor.extract(bookmark.url)
    except ExtractionFailure as exc:
        logger.info(
            "readability_extraction_failed",
            extra={"bookmark_id": bookmark_id, "url": bookmark.url, "error": exc.message},
        )
        return TaskOutcome.NO_OP

    payload = bookmark.to_update_payload(notes=append_content_to_notes(bookmark.notes, content))
    await ctx.linkding.update_bookmark(bookmark_id, payload)

    try:
        await ctx.linkding.upload_bookmark_asset(bookmark_id, CONTENT_ASSET_NAME, content)
    except LinkdingError as exc:
        logger.warning(
            "readability_asset_upload_failed",
            extra={
                "bookmark_id": bookmark_id,
                "status_code": exc.status_code,
                "error": exc.message,
            },
        )

    await ctx.events.append(
        bookmark_id,
        EventAction.READABILITY_EXTRACTED,
        utc_now(),
        ReadabilityExtractedExtra(url=bookmark.url, content_length=len(content)),
    )
    logger.info(
        "readability_complete",
        extra={"bookmark_id": bookmark_id, "content_length": len(content)},
    )
    return TaskOutcome.COMPLETED
