"""Periodic submission of the sync sweep."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from linkding_companion.pipeline.graph import TaskName

if TYPE_CHECKING:
    from datetime import datetime

    from linkding_companion.config.async_jobs import PipelineConfig
    from linkding_companion.pipeline.protocols import TaskDispatcher

logger = logging.getLogger(__name__)

SYNC_JOB_ID = "linkding_sync"


class SchedulerService:
    """Submits a ``sync`` job every ``SYNC_INTERVAL_MINUTES``."""

    def __init__(self, cfg: PipelineConfig, dispatcher: TaskDispatcher) -> None:
        self.cfg = cfg
        self.dispatcher = dispatcher
        self._scheduler: AsyncIOScheduler | None = None
        self._started = False

    async def start(self, *, run_immediately: bool = True) -> None:
        """Start the scheduler; optionally submit one sweep right away."""
        if self._started:
            logger.warning("scheduler_already_started")
            return

        self._scheduler = AsyncIOScheduler()

        if self.cfg.sync_enabled:
            self._scheduler.add_job(
                self._submit_sync,
                trigger=IntervalTrigger(minutes=self.cfg.sync_interval_minutes),
                id=SYNC_JOB_ID,
                name="Linkding Sync Sweep",
                replace_existing=True,
                max_instances=1,
            )
            logger.info(
                "scheduler_sync_job_added",
                extra={"job_id": SYNC_JOB_ID, "interval_minutes": self.cfg.sync_interval_minutes},
            )
        else:
            logger.info("scheduler_sync_job_skipped", extra={"sync_enabled": False})

        self._scheduler.start()
        self._started = True
        logger.info("scheduler_started")

        if run_immediately and self.cfg.sync_enabled:
            await self._submit_sync()

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if self._scheduler and self._started:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            self._started = False
            logger.info("scheduler_stopped")

    async def _submit_sync(self) -> None:
        # A slow sweep can outlast the interval; the dispatcher still holds it.
        if self.dispatcher.is_pending(TaskName.SYNC):
            logger.info("scheduled_sync_skipped_in_flight")
            return
        logger.info("scheduled_sync_submitting")
        await self.dispatcher.submit(TaskName.SYNC)

    def get_next_run_time(self, job_id: str = SYNC_JOB_ID) -> datetime | None:
        """Next scheduled run time, or ``None`` if the job or scheduler is not running."""
        if not self._scheduler or not self._started:
            return None
        job = self._scheduler.get_job(job_id)
        return job.next_run_time if job else None

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._started and self._scheduler is not None
