"""Resolve a saved-search bookmark into the top result it points at.

A bookmark like ``https://duckduckgo.com/?q=rust+ownership`` becomes the
first web result for "rust ownership"; the original URL is kept in the
notes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from linkding_companion.adapters.linkding.models import merge_tags
from linkding_companion.core.time_utils import utc_now
from linkding_companion.core.url_utils import extract_search_query
from linkding_companion.domain.events import EventAction, SearchedExtra
from linkding_companion.domain.exceptions import SearchFailure
from linkding_companion.pipeline.base import load_active_bookmark
from linkding_companion.pipeline.graph import TaskName
from linkding_companion.pipeline.results import TaskOutcome

if TYPE_CHECKING:
    from datetime import datetime

    from linkding_companion.pipeline.context import TaskContext

logger = logging.getLogger(__name__)

FROM_SEARCH_TAG = "from-search"


def search_note(notes: str, original_url: str, searched_at: datetime) -> str:
    return f"{notes}\n\nLast searched: {searched_at.isoformat()}\nOriginal search URL: {original_url}"


async def run_search(ctx: TaskContext, bookmark_id: int) -> TaskOutcome:
    if ctx.search is None:
        logger.debug("search_disabled", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.NO_OP

    bookmark = await load_active_bookmark(ctx, bookmark_id, TaskName.SEARCH, EventAction.SEARCHED)
    if bookmark is None:
        return TaskOutcome.SKIPPED

    query = extract_search_query(bookmark.url)
    if query is None:
        logger.debug("search_no_query", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.SKIPPED

    try:
        results = await ctx.search.search(query)
    except SearchFailure as exc:
        logger.warning(
            "search_failed",
            extra={"bookmark_id": bookmark_id, "query": query, "error": exc.message},
        )
        return TaskOutcome.NO_OP
    if not results:
        logger.info("search_no_results", extra={"bookmark_id": bookmark_id, "query": query})
        return TaskOutcome.NO_OP

    top = results[0]
    payload = bookmark.to_update_payload(
        url=top.url,
        title=top.title,
        description=top.description,
        notes=search_note(bookmark.notes, bookmark.url, utc_now()),
        tag_names=merge_tags(bookmark.tag_names, [FROM_SEARCH_TAG]),
    )
    await ctx.linkding.update_bookmark(bookmark_id, payload)
    await ctx.events.append(
        bookmark_id,
        EventAction.SEARCHED,
        utc_now(),
        SearchedExtra(query=query, original_url=bookmark.url),
    )
    logger.info(
        "search_complete",
        extra={"bookmark_id": bookmark_id, "query": query, "url": top.url},
    )
    return TaskOutcome.COMPLETED
