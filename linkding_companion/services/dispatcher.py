"""In-process job dispatcher.

Jobs are ``(task, bookmark_id)`` pairs run as asyncio tasks with bounded
concurrency. A failing job is retried with exponential backoff and jitter;
after the last attempt the failure is logged and counted. When a job
returns, the follow-ups declared in ``pipeline.graph`` are submitted.
Jobs with the same task and bookmark never overlap.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from linkding_companion.adapters.linkding.exceptions import (
    AuthenticationError,
    NotFoundError,
    UnconfiguredError,
    ValidationError,
)
from linkding_companion.config.async_jobs import DispatcherConfig, PipelineConfig
from linkding_companion.core.logging_utils import generate_correlation_id
from linkding_companion.domain.exceptions import UnknownTaskError
from linkding_companion.pipeline.graph import TaskName, follow_ups_for
from linkding_companion.pipeline.registry import run_task

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from linkding_companion.pipeline.context import TaskContext
    from linkding_companion.pipeline.results import TaskOutcome

logger = logging.getLogger(__name__)

# Retrying cannot change the answer for these.
NON_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    UnknownTaskError,
    UnconfiguredError,
    AuthenticationError,
    NotFoundError,
    ValidationError,
)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int
    base_delay_ms: int
    max_delay_ms: int
    jitter_ratio: float

    @classmethod
    def from_config(cls, config: DispatcherConfig) -> RetryPolicy:
        return cls(
            attempts=config.retry_attempts,
            base_delay_ms=config.retry_base_delay_ms,
            max_delay_ms=config.retry_max_delay_ms,
            jitter_ratio=config.retry_jitter_ratio,
        )

    def delay_ms(self, attempt: int) -> int:
        """Backoff before retrying after ``attempt`` (1-based) failed."""
        delay_ms = min(self.max_delay_ms, int(self.base_delay_ms * (2 ** (attempt - 1))))
        jitter = int(delay_ms * self.jitter_ratio)
        return max(0, delay_ms + random.randint(-jitter, jitter))


@dataclass(frozen=True)
class Job:
    task: TaskName
    bookmark_id: int | None
    correlation_id: str


class AsyncioTaskDispatcher:
    """At-least-once dispatcher running jobs on the current event loop.

    Call ``bind`` with the task context before submitting; the context in
    turn references this dispatcher so tasks and the sweep can submit jobs.
    """

    def __init__(
        self,
        config: DispatcherConfig | None = None,
        pipeline: PipelineConfig | None = None,
        *,
        runner: Callable[..., Awaitable[TaskOutcome]] = run_task,
    ) -> None:
        config = config or DispatcherConfig()
        self._pipeline = pipeline or PipelineConfig()
        self._retry = RetryPolicy.from_config(config)
        self._semaphore = asyncio.Semaphore(config.max_concurrency)
        self._runner = runner
        self._context: TaskContext | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self.outcomes: Counter[str] = Counter()
        self.failed: Counter[str] = Counter()
        # Submitted but not yet finished, per (task, bookmark_id).
        self._inflight: Counter[tuple[TaskName, int | None]] = Counter()
        self._key_locks: dict[tuple[TaskName, int | None], asyncio.Lock] = {}

    def bind(self, context: TaskContext) -> None:
        self._context = context

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def submit(self, task: TaskName | str, bookmark_id: int | None = None) -> None:
        """Schedule a job and return without waiting for it."""
        if self._context is None:
            msg = "Dispatcher is not bound to a task context"
            raise RuntimeError(msg)
        job = Job(TaskName(task), bookmark_id, generate_correlation_id())
        logger.debug(
            "dispatcher_job_submitted",
            extra={"cid": job.correlation_id, "task": job.task.value, "bookmark_id": bookmark_id},
        )
        self._inflight[(job.task, bookmark_id)] += 1
        handle = asyncio.create_task(self._run_job(job), name=f"{job.task.value}:{bookmark_id}")
        self._tasks.add(handle)
        handle.add_done_callback(self._tasks.discard)

    def is_pending(self, task: TaskName | str, bookmark_id: int | None = None) -> bool:
        """Whether a job for ``(task, bookmark_id)`` is queued or running."""
        return self._inflight[(TaskName(task), bookmark_id)] > 0

    async def drain(self) -> None:
        """Wait until every submitted job, follow-ups included, has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def stats(self) -> dict[str, Any]:
        return {
            "pending": self.pending,
            "outcomes": dict(self.outcomes),
            "failed": dict(self.failed),
        }

    async def _run_job(self, job: Job) -> None:
        key = (job.task, job.bookmark_id)
        try:
            # One identical job at a time; later ones wait their turn.
            async with self._key_locks.setdefault(key, asyncio.Lock()):
                await self._run_and_follow_up(job)
        finally:
            self._inflight[key] -= 1
            if self._inflight[key] <= 0:
                del self._inflight[key]
                self._key_locks.pop(key, None)

    async def _run_and_follow_up(self, job: Job) -> None:
        try:
            outcome = await self._run_with_backoff(job)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.failed[job.task.value] += 1
            logger.error(
                "dispatcher_job_failed",
                exc_info=True,
                extra={
                    "cid": job.correlation_id,
                    "task": job.task.value,
                    "bookmark_id": job.bookmark_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return

        self.outcomes[outcome.value] += 1
        logger.info(
            "dispatcher_job_finished",
            extra={
                "cid": job.correlation_id,
                "task": job.task.value,
                "bookmark_id": job.bookmark_id,
                "outcome": outcome.value,
            },
        )
        for follow_up in follow_ups_for(job.task, outcome, self._pipeline):
            await self.submit(follow_up, job.bookmark_id)

    async def _run_with_backoff(self, job: Job) -> TaskOutcome:
        last_error: Exception | None = None
        for attempt in range(1, self._retry.attempts + 1):
            try:
                async with self._semaphore:
                    return await self._runner(
                        self._context,
                        job.task,
                        job.bookmark_id,
                        correlation_id=job.correlation_id,
                    )
            except NON_RETRYABLE_ERRORS:
                raise
            except Exception as exc:
                last_error = exc
                if attempt >= self._retry.attempts:
                    break

                delay_ms = self._retry.delay_ms(attempt)
                logger.warning(
                    "dispatcher_retry",
                    extra={
                        "cid": job.correlation_id,
                        "task": job.task.value,
                        "bookmark_id": job.bookmark_id,
                        "attempt": attempt,
                        "delay_ms": delay_ms,
                        "error": str(exc),
                    },
                )
                await asyncio.sleep(delay_ms / 1000)

        if last_error:
            raise last_error
        raise RuntimeError("Retry loop exited without result or error")
