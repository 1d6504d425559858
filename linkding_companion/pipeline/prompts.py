"""Prompt templates for the chat-completion tasks."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkding_companion.adapters.linkding.models import Bookmark

AUTOTAG_PROMPT = """You are a content analyst that tags bookmarks for clustering.
Please tag the bookmark with the appropriate tags.
Only add tags that are not already present and cannot be approximated by existing tags.

<bookmark>
{bookmark}
</bookmark>

The available tags are:

<tags>
{tags}
</tags>

Return the tags as a JSON array of strings with no other formatting. The response MUST be valid JSON.
"""

SUMMARY_PROMPT = """You are a content summarizer. Please provide a concise summary of the following content.
The summary should be 2-3 sentences that capture the main points and purpose of the content.
Focus on what would be most useful in a bookmark description.

Content:
{content}

Return only the summary text with no additional formatting or explanation.
"""


def build_autotag_prompt(bookmark: Bookmark, existing_tags: list[str]) -> str:
    fields = {
        "url": bookmark.url,
        "title": bookmark.title,
        "description": bookmark.description,
        "notes": bookmark.notes,
        "tag_names": bookmark.tag_names,
    }
    return AUTOTAG_PROMPT.format(
        bookmark=json.dumps(fields, ensure_ascii=False, indent=2),
        tags="\n".join(existing_tags),
    )


def truncate_content(content: str, max_chars: int) -> str:
    if len(content) <= max_chars:
        return content
    return content[: max_chars - 3].rstrip() + "..."


def build_summary_prompt(content: str, max_chars: int = 4000) -> str:
    return SUMMARY_PROMPT.format(content=truncate_content(content, max_chars))
