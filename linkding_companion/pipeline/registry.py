"""Task name to coroutine lookup used by the dispatcher."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from linkding_companion.domain.exceptions import UnknownTaskError
from linkding_companion.pipeline.autotag import run_autotag
from linkding_companion.pipeline.graph import TaskName
from linkding_companion.pipeline.readability import run_readability
from linkding_companion.pipeline.results import TaskOutcome
from linkding_companion.pipeline.search import run_search
from linkding_companion.pipeline.summarize import run_summarize
from linkding_companion.pipeline.sync_sweep import run_sync_sweep

if TYPE_CHECKING:
    from linkding_companion.pipeline.context import TaskContext

TaskRunner = Callable[["TaskContext", int], Awaitable[TaskOutcome]]

TASKS: dict[TaskName, TaskRunner] = {
    TaskName.AUTOTAG: run_autotag,
    TaskName.READABILITY: run_readability,
    TaskName.SUMMARIZE: run_summarize,
    TaskName.SEARCH: run_search,
}


async def run_task(
    ctx: TaskContext,
    task: TaskName | str,
    bookmark_id: int | None = None,
    *,
    correlation_id: str | None = None,
) -> TaskOutcome:
    """Run one job. ``sync`` takes no bookmark id; every other task requires one."""
    try:
        name = TaskName(task)
    except ValueError as exc:
        raise UnknownTaskError(f"Unknown task: {task}", {"task": str(task)}) from exc

    if name is TaskName.SYNC:
        await run_sync_sweep(ctx, correlation_id=correlation_id)
        return TaskOutcome.COMPLETED

    if bookmark_id is None:
        raise UnknownTaskError(f"Task {name.value} requires a bookmark id", {"task": name.value})
    return await TASKS[name](ctx, bookmark_id)
