"""Tests for the summarize task."""

from __future__ import annotations

import json
import unittest

from linkding_companion.domain.events import EventAction, SummarizedExtra
from linkding_companion.pipeline.prompts import build_summary_prompt, truncate_content
from linkding_companion.pipeline.results import TaskOutcome
from linkding_companion.pipeline.summarize import run_summarize
from tests.conftest import FakeChat, FakeEventLog, FakeLinkdingServer, make_client, make_context


class TestSummaryPrompt(unittest.TestCase):
    def test_content_is_truncated(self):
        prompt = build_summary_prompt("x" * 5000, 4000)
        assert "x" * 3997 + "..." in prompt
        assert "x" * 4001 not in prompt

    def test_short_content_is_untouched(self):
        assert truncate_content("short", 4000) == "short"


class TestRunSummarize(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = FakeLinkdingServer()
        self.server.add(1, description="old description", notes="n")
        self.events = FakeEventLog()
        self.client = await self.enterAsyncContext(make_client(self.server))

    def _ctx(self, chat):
        return make_context(self.client, events=self.events, chat=chat)

    async def _extracted(self, content_length=4):
        await self.events.append(
            1,
            EventAction.READABILITY_EXTRACTED,
            None,
            {"url": "https://example.com/articles/1", "content_length": content_length},
        )

    async def test_summary_replaces_description(self):
        self.server.add_asset(1, "content.txt", b"Long article body.")
        await self._extracted()
        chat = FakeChat("  A short summary.  ")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.COMPLETED
        assert "Long article body." in chat.prompts[0]
        put = json.loads(self.server.writes("PUT")[0].content)
        assert put["description"] == "A short summary."
        assert put["notes"] == "n"
        assert self.events.events[-1].extra == SummarizedExtra(
            url="https://example.com/articles/1",
            original_description="old description",
            summary_length=len("A short summary."),
        )

    async def test_without_extraction_does_not_read_assets(self):
        self.server.add_asset(1, "content.txt", b"body")
        chat = FakeChat("unused")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.SKIPPED
        assert chat.prompts == []
        assert self.events.events == []

    async def test_content_extracted_before_search_is_not_summarized(self):
        self.server.add_asset(1, "content.txt", b"SEARCH RESULTS PAGE TEXT")
        await self._extracted()
        await self.events.append(
            1,
            EventAction.SEARCHED,
            None,
            {"query": "q", "original_url": "https://duckduckgo.com/?q=q"},
        )
        chat = FakeChat("unused")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.SKIPPED
        assert chat.prompts == []
        assert self.server.writes("PUT") == []

    async def test_content_extracted_after_search_is_summarized(self):
        self.server.add_asset(1, "content.txt", b"SEARCH RESULTS PAGE TEXT")
        await self._extracted()
        await self.events.append(
            1,
            EventAction.SEARCHED,
            None,
            {"query": "q", "original_url": "https://duckduckgo.com/?q=q"},
        )
        self.server.add_asset(1, "content.txt", b"Destination article.")
        await self._extracted()
        chat = FakeChat("Summary.")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.COMPLETED
        assert "Destination article." in chat.prompts[0]
        assert "SEARCH RESULTS PAGE TEXT" not in chat.prompts[0]

    async def test_without_content_asset_does_not_call_chat(self):
        self.server.add_asset(1, "page.html", b"<html></html>")
        await self._extracted()
        chat = FakeChat("unused")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.SKIPPED
        assert chat.prompts == []
        assert [e.action for e in self.events.events] == [EventAction.READABILITY_EXTRACTED]

    async def test_only_uploaded_content_txt_counts(self):
        self.server.add_asset(1, "content.txt", b"snapshot", asset_type="snapshot")
        await self._extracted()
        chat = FakeChat("unused")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.SKIPPED
        assert chat.prompts == []

    async def test_most_recent_content_asset_wins(self):
        self.server.add_asset(1, "content.txt", b"old page")
        self.server.add_asset(1, "content.txt", b"new page")
        await self._extracted()
        chat = FakeChat("Summary.")

        await run_summarize(self._ctx(chat), 1)

        assert "new page" in chat.prompts[0]
        assert "old page" not in chat.prompts[0]

    async def test_empty_summary_is_a_no_op(self):
        self.server.add_asset(1, "content.txt", b"body")
        await self._extracted()

        outcome = await run_summarize(self._ctx(FakeChat("   ")), 1)

        assert outcome is TaskOutcome.NO_OP
        assert self.server.writes("PUT") == []
        assert [e.action for e in self.events.events] == [EventAction.READABILITY_EXTRACTED]

    async def test_already_summarized_is_skipped(self):
        self.server.add_asset(1, "content.txt", b"body")
        await self._extracted()
        await self.events.append(
            1, EventAction.SUMMARIZED, None, {"url": "u", "summary_length": 1}
        )
        chat = FakeChat("unused")

        outcome = await run_summarize(self._ctx(chat), 1)

        assert outcome is TaskOutcome.SKIPPED
        assert chat.prompts == []
