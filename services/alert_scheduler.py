"""
Alert Scheduler - the two recurring expiry jobs.

Uses a private schedule.Scheduler polled from an asyncio task, so several
schedulers can coexist (tests) and start()/stop() control the lifecycle.
Each trigger spawns its own task: the two jobs and on-demand requests may
overlap. Stopping only prevents future runs; a job already running is left
to finish.
"""

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Dict, Optional, Set

import schedule

from app.config import Settings
from domain.schemas.alert_schemas import JobReport
from services.expiry_notifier import ExpiryNotifier, SOON_WINDOW_JOB, TODAY_EXACT_JOB

logger = logging.getLogger("freshalert.scheduler")

JobFn = Callable[[], Awaitable[JobReport]]


class AlertScheduler:
    def __init__(self, notifier: ExpiryNotifier, settings: Settings):
        self.notifier = notifier
        self.settings = settings
        self._scheduler = schedule.Scheduler()
        self._poll_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def jobs(self) -> Dict[str, JobFn]:
        return {
            SOON_WINDOW_JOB: self.notifier.run_soon_window_job,
            TODAY_EXACT_JOB: self.notifier.run_today_exact_job,
        }

    def start(self) -> None:
        """Register both daily jobs and begin polling. Must be called inside a running loop."""
        if self.running:
            return

        self._scheduler.clear()
        s = self.settings
        self._scheduler.every().day.at(s.soon_job_time, s.soon_job_timezone).do(
            self._trigger, SOON_WINDOW_JOB
        ).tag(SOON_WINDOW_JOB)
        logger.info(
            "[Schedule] Expiring-soon alerts: %s (%s)",
            s.soon_job_time,
            s.soon_job_timezone or "host timezone",
        )
        self._scheduler.every().day.at(s.today_job_time, s.today_job_timezone).do(
            self._trigger, TODAY_EXACT_JOB
        ).tag(TODAY_EXACT_JOB)
        logger.info(
            "[Schedule] Expiring-today alerts: %s (%s)", s.today_job_time, s.today_job_timezone
        )

        self._poll_task = asyncio.get_running_loop().create_task(self._poll())
        logger.info("[Scheduler] Next run: %s", self._scheduler.next_run)

    async def stop(self) -> None:
        """Stop triggering jobs. In-flight job runs are not cancelled."""
        self._scheduler.clear()
        pending = [t for t in self._inflight if not t.done()]
        if pending:
            logger.warning(
                "[Scheduler] Stopping with %d job run(s) still in flight; they are not awaited",
                len(pending),
            )
        task, self._poll_task = self._poll_task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        logger.info("[Scheduler] Stopped")

    async def _poll(self) -> None:
        while True:
            self._scheduler.run_pending()
            await asyncio.sleep(self.settings.scheduler_poll_interval_sec)

    def _trigger(self, name: str) -> None:
        task = asyncio.get_running_loop().create_task(self.run_job(name))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def run_job(self, name: str) -> Optional[JobReport]:
        """
        Run one job now. Errors are logged and swallowed so that a failing
        run never takes the scheduler down; the next trigger retries.
        """
        job = self.jobs[name]
        try:
            return await job()
        except Exception:
            logger.exception("[Scheduler] %s job failed", name)
            return None

    async def run_soon_window_job(self) -> Optional[JobReport]:
        return await self.run_job(SOON_WINDOW_JOB)

    async def run_today_exact_job(self) -> Optional[JobReport]:
        return await self.run_job(TODAY_EXACT_JOB)

    def next_runs(self) -> Dict[str, Optional[str]]:
        """Next trigger time per job, for the health endpoint"""
        result: Dict[str, Optional[str]] = {name: None for name in self.jobs}
        for job in self._scheduler.get_jobs():
            for tag in job.tags:
                if tag in result and job.next_run is not None:
                    result[tag] = job.next_run.isoformat()
        return result
