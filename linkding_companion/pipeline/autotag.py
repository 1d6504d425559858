"""Propose new tags for a bookmark with the chat model."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from linkding_companion.adapters.linkding.models import merge_tags
from linkding_companion.core.logging_utils import truncate_log_content
from linkding_companion.domain.events import EventAction, TaggedExtra
from linkding_companion.domain.exceptions import ParsingError
from linkding_companion.pipeline.base import load_active_bookmark
from linkding_companion.pipeline.graph import TaskName
from linkding_companion.pipeline.prompts import build_autotag_prompt
from linkding_companion.pipeline.results import TaskOutcome

if TYPE_CHECKING:
    from linkding_companion.pipeline.context import TaskContext

logger = logging.getLogger(__name__)


def parse_tag_list(response: str) -> list[str]:
    """Parse the model's answer as a JSON array of strings.

    Raises:
        ParsingError: For anything that is not exactly that.
    """
    details = {"response": truncate_log_content(str(response))}
    try:
        data = json.loads(response)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ParsingError("Tag response is not valid JSON", details) from exc
    if not isinstance(data, list) or not all(isinstance(tag, str) for tag in data):
        raise ParsingError("Tag response is not a JSON array of strings", details)
    return [tag.strip() for tag in data if tag.strip()]


async def fetch_tag_names(ctx: TaskContext) -> list[str]:
    return [tag.name async for tag in ctx.linkding.list_tags()]


async def run_autotag(ctx: TaskContext, bookmark_id: int) -> TaskOutcome:
    bookmark = await load_active_bookmark(ctx, bookmark_id, TaskName.AUTOTAG, EventAction.TAGGED)
    if bookmark is None:
        return TaskOutcome.SKIPPED

    existing_tags = await fetch_tag_names(ctx)
    response = await ctx.chat.ask(build_autotag_prompt(bookmark, existing_tags))
    proposed = parse_tag_list(response)

    if not proposed:
        logger.info("autotag_no_new_tags", extra={"bookmark_id": bookmark_id})
        return TaskOutcome.NO_OP

    payload = bookmark.to_update_payload(tag_names=merge_tags(bookmark.tag_names, proposed))
    await ctx.linkding.update_bookmark(bookmark_id, payload)
    await ctx.events.append(
        bookmark_id,
        EventAction.TAGGED,
        bookmark.created_at,
        TaggedExtra(tags=proposed),
    )
    logger.info("autotag_complete", extra={"bookmark_id": bookmark_id, "tags": proposed})
    return TaskOutcome.COMPLETED
