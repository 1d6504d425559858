"""Which task runs after which.

Follow-ups are declared here as data; tasks never submit each other. The
dispatcher looks up ``follow_ups_for`` after every task returns.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from linkding_companion.config.async_jobs import PipelineConfig
from linkding_companion.pipeline.results import TaskOutcome


class TaskName(StrEnum):
    SYNC = "sync"
    AUTOTAG = "autotag"
    READABILITY = "readability"
    SUMMARIZE = "summarize"
    SEARCH = "search"


BOOKMARK_TASKS: tuple[TaskName, ...] = (
    TaskName.AUTOTAG,
    TaskName.READABILITY,
    TaskName.SUMMARIZE,
    TaskName.SEARCH,
)

# Submitted by the sweep for every newly seen bookmark.
FIRST_WAVE: tuple[TaskName, ...] = (TaskName.AUTOTAG, TaskName.READABILITY)


def _always(_: PipelineConfig) -> bool:
    return True


@dataclass(frozen=True)
class FollowUp:
    task: TaskName
    on: frozenset[TaskOutcome]
    enabled: Callable[[PipelineConfig], bool] = _always


FOLLOW_UPS: dict[TaskName, tuple[FollowUp, ...]] = {
    TaskName.READABILITY: (
        FollowUp(TaskName.SUMMARIZE, frozenset({TaskOutcome.COMPLETED})),
        # Search does not wait on autotag succeeding.
        FollowUp(TaskName.SEARCH, frozenset(TaskOutcome)),
    ),
    TaskName.AUTOTAG: (
        FollowUp(TaskName.SEARCH, frozenset({TaskOutcome.COMPLETED, TaskOutcome.NO_OP})),
    ),
    TaskName.SEARCH: (
        FollowUp(TaskName.AUTOTAG, frozenset({TaskOutcome.COMPLETED})),
        FollowUp(TaskName.READABILITY, frozenset({TaskOutcome.COMPLETED})),
        FollowUp(
            TaskName.SUMMARIZE,
            frozenset({TaskOutcome.COMPLETED}),
            lambda cfg: cfg.search_resubmits_summarize,
        ),
    ),
}


def follow_ups_for(
    task: TaskName | str, outcome: TaskOutcome, config: PipelineConfig
) -> list[TaskName]:
    return [
        follow_up.task
        for follow_up in FOLLOW_UPS.get(TaskName(task), ())
        if outcome in follow_up.on and follow_up.enabled(config)
    ]
