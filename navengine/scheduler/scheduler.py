"""
SCHEDULER BOOTSTRAP

Owns the single APScheduler instance that drives the valuation engine.
Scheduler is orchestration-only and contains no business logic: jobs are the
service's own coroutines.
"""

import logging
from typing import Awaitable, Callable, Optional

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

_logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]

TICK_JOB_ID = "simulation_tick_job"
RATE_JOB_ID = "exchange_rate_poll_job"
MICRO_JOB_ID = "micro_tick_job"


class ValuationScheduler:
    """
    One ticking owner per process. Each job runs with max_instances=1 and
    coalescing, so a slow tick is never overlapped by the next one.
    """

    def __init__(
        self,
        tick_job: Job,
        tick_seconds: int,
        rate_job: Optional[Job] = None,
        rate_seconds: int = 300,
        micro_job: Optional[Job] = None,
        micro_seconds: int = 0,
        timezone: str = "UTC",
    ):
        if tick_seconds <= 0:
            raise ValueError("Tick interval must be positive")
        self._tick_job = tick_job
        self._tick_seconds = tick_seconds
        self._rate_job = rate_job
        self._rate_seconds = rate_seconds
        self._micro_job = micro_job
        self._micro_seconds = micro_seconds
        self._timezone = pytz.timezone(timezone)
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def _add_interval_job(self, scheduler: AsyncIOScheduler, job: Job, seconds: int, job_id: str) -> None:
        scheduler.add_job(
            job,
            trigger=IntervalTrigger(seconds=seconds, timezone=self._timezone),
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    def start(self) -> AsyncIOScheduler:
        """
        Register all jobs and start. Must be called from a running event loop.
        """
        if self._scheduler is not None:
            return self._scheduler

        scheduler = AsyncIOScheduler(timezone=self._timezone)

        # ------------------------------------------------------------
        # SIMULATION TICK
        # ------------------------------------------------------------
        self._add_interval_job(scheduler, self._tick_job, self._tick_seconds, TICK_JOB_ID)

        # ------------------------------------------------------------
        # EXCHANGE RATE POLL
        # ------------------------------------------------------------
        if self._rate_job is not None and self._rate_seconds > 0:
            self._add_interval_job(scheduler, self._rate_job, self._rate_seconds, RATE_JOB_ID)

        # ------------------------------------------------------------
        # MICRO TICK (display-only movement between ticks)
        # ------------------------------------------------------------
        if self._micro_job is not None and self._micro_seconds > 0:
            self._add_interval_job(scheduler, self._micro_job, self._micro_seconds, MICRO_JOB_ID)

        scheduler.start()
        self._scheduler = scheduler
        _logger.info(
            "✅ Valuation scheduler started (tick=%ss, rate=%ss, micro=%ss)",
            self._tick_seconds,
            self._rate_seconds if self._rate_job else 0,
            self._micro_seconds if self._micro_job else 0,
        )
        return scheduler

    def job_ids(self) -> list:
        if self._scheduler is None:
            return []
        return [job.id for job in self._scheduler.get_jobs()]

    def shutdown(self) -> None:
        """
        Shutdown the scheduler safely.
        """
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            _logger.info("🛑 Valuation scheduler shut down")
