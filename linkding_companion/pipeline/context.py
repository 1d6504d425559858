from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from linkding_companion.config.async_jobs import PipelineConfig
from linkding_companion.config.integrations import ContentConfig

if TYPE_CHECKING:
    from linkding_companion.adapters.content.extractor import ContentExtractorProtocol
    from linkding_companion.adapters.linkding.client import LinkdingClient
    from linkding_companion.adapters.llm.protocol import ChatClientProtocol
    from linkding_companion.adapters.search.brave_client import SearchClientProtocol
    from linkding_companion.pipeline.protocols import EventLog, TaskDispatcher


@dataclass
class TaskContext:
    """Collaborators handed to every task.

    Built once at process start. ``search`` is ``None`` when web search is
    not configured, which turns the search task into a no-op.
    """

    linkding: LinkdingClient
    events: EventLog
    dispatcher: TaskDispatcher
    chat: ChatClientProtocol
    extractor: ContentExtractorProtocol
    search: SearchClientProtocol | None = None
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
