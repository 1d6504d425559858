"""Tests for the readability task."""

from __future__ import annotations

import json
import unittest

from linkding_companion.domain.events import EventAction, ReadabilityExtractedExtra
from linkding_companion.pipeline.readability import append_content_to_notes, run_readability
from linkding_companion.pipeline.results import TaskOutcome
from tests.conftest import FakeEventLog, FakeExtractor, FakeLinkdingServer, make_client, make_context


class TestAppendContentToNotes(unittest.TestCase):
    def test_empty_notes_get_heading_only(self):
        assert append_content_to_notes("", "Body") == "Content:\n\nBody"

    def test_existing_notes_get_separator(self):
        assert append_content_to_notes("mine", "Body") == "mine\n\n---\n\nContent:\n\nBody"


class TestRunReadability(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = FakeLinkdingServer()
        self.server.add(1, notes="my note", tag_names=["a"])
        self.events = FakeEventLog()
        self.client = await self.enterAsyncContext(make_client(self.server))

    def _ctx(self, extractor):
        return make_context(self.client, events=self.events, extractor=extractor)

    async def test_content_goes_to_notes_asset_and_event(self):
        extractor = FakeExtractor("Readable body text.")

        outcome = await run_readability(self._ctx(extractor), 1)

        assert outcome is TaskOutcome.COMPLETED
        assert extractor.urls == ["https://example.com/articles/1"]
        put = json.loads(self.server.writes("PUT")[0].content)
        assert put["notes"] == "my note\n\n---\n\nContent:\n\nReadable body text."
        assert put["tag_names"] == ["a"]
        asset = self.server.assets[1][0]
        assert asset["display_name"] == "content.txt"
        assert self.server.asset_content[asset["id"]] == b"Readable body text."
        assert self.events.events[0].extra == ReadabilityExtractedExtra(
            url="https://example.com/articles/1", content_length=len("Readable body text.")
        )

    async def test_invalid_url_aborts_before_extraction(self):
        self.server.add(2, url="not a url")
        extractor = FakeExtractor()

        outcome = await run_readability(self._ctx(extractor), 2)

        assert outcome is TaskOutcome.SKIPPED
        assert extractor.urls == []
        assert self.events.events == []

    async def test_extraction_failure_is_soft(self):
        outcome = await run_readability(self._ctx(FakeExtractor(None)), 1)

        assert outcome is TaskOutcome.NO_OP
        assert self.server.writes("PUT") == []
        assert self.events.events == []

    async def test_upload_failure_still_records_event(self):
        self.server.fail_uploads = True

        outcome = await run_readability(self._ctx(FakeExtractor("Body")), 1)

        assert outcome is TaskOutcome.COMPLETED
        assert len(self.server.writes("PUT")) == 1
        assert self.server.assets == {}
        assert self.events.actions(1) == ["readability_extracted"]

    async def test_already_extracted_is_skipped(self):
        await self.events.append(
            1, EventAction.READABILITY_EXTRACTED, None, {"url": "u", "content_length": 1}
        )
        extractor = FakeExtractor()

        outcome = await run_readability(self._ctx(extractor), 1)

        assert outcome is TaskOutcome.SKIPPED
        assert extractor.urls == []

    async def test_archived_bookmark_is_skipped(self):
        self.server.add(3, is_archived=True)
        extractor = FakeExtractor()

        outcome = await run_readability(self._ctx(extractor), 3)

        assert outcome is TaskOutcome.SKIPPED
        assert extractor.urls == []
