"""Background job scheduler.

Two periodic jobs keep alerts current without a caller asking:

- ``risk-analysis`` runs the analysis cycle for every known learner
- ``alert-sweep`` drops expired alerts from the alert history

The task bodies live in ``learnguard.jobs.tasks`` as plain coroutines, so an
external cron can run them instead of this scheduler.
"""

import logging
from functools import lru_cache
from typing import Any, Callable

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from learnguard.shared.config import Settings, get_settings
from learnguard.shared.feature_flags import FeatureFlagManager, FeatureFlags, get_feature_flags

logger = logging.getLogger(__name__)

RISK_ANALYSIS_JOB_ID = "risk-analysis"
ALERT_SWEEP_JOB_ID = "alert-sweep"

# A run that starts late by more than this is skipped rather than queued
MISFIRE_GRACE_SECONDS = 5 * 60


def build_trigger(
    *,
    hours: float | None = None,
    minutes: float | None = None,
    seconds: float | None = None,
    cron: str | None = None,
) -> BaseTrigger:
    """Turn an interval or crontab expression into an APScheduler trigger.

    Raises:
        ValueError: If neither a cron expression nor an interval is given
    """
    if cron:
        return CronTrigger.from_crontab(cron, timezone="UTC")
    if hours or minutes or seconds:
        return IntervalTrigger(hours=hours or 0, minutes=minutes or 0, seconds=seconds or 0)
    raise ValueError("Must specify cron, hours, minutes, or seconds")


class JobScheduler:
    """Owns the AsyncIOScheduler that runs the periodic analysis jobs.

    Usage:
        scheduler = JobScheduler()
        scheduler.schedule_all_default_jobs()
        scheduler.start()  # inside a running event loop
    """

    def __init__(
        self,
        settings: Settings | None = None,
        flags: FeatureFlagManager | None = None,
    ) -> None:
        self._scheduler: AsyncIOScheduler | None = None
        self._is_running = False
        self._settings = settings or get_settings()
        self._flags = flags or get_feature_flags()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        """The underlying APScheduler instance, created on first use."""
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(
                jobstores={"default": MemoryJobStore()},
                executors={"default": AsyncIOExecutor()},
                job_defaults={
                    "coalesce": True,
                    # An analysis run never overlaps itself
                    "max_instances": 1,
                    "misfire_grace_time": MISFIRE_GRACE_SECONDS,
                },
                timezone="UTC",
            )
        return self._scheduler

    @property
    def is_running(self) -> bool:
        return self._is_running and self._scheduler is not None

    def start(self) -> None:
        """Start running scheduled jobs.

        Does nothing unless FF_ENABLE_BACKGROUND_JOBS is on, or when already
        started.
        """
        if not self._flags.is_enabled(FeatureFlags.ENABLE_BACKGROUND_JOBS):
            logger.info("Background jobs disabled by feature flag")
            return

        if self._is_running:
            logger.warning("Scheduler already running")
            return

        self.scheduler.start()
        self._is_running = True
        logger.info(f"Background job scheduler started with {len(self.scheduler.get_jobs())} jobs")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the scheduler; ``wait`` lets in-flight analysis runs finish."""
        if not self.is_running:
            return

        self._scheduler.shutdown(wait=wait)
        self._is_running = False
        logger.info("Background job scheduler stopped")

    def add_job(
        self,
        func: Callable,
        *,
        hours: float | None = None,
        minutes: float | None = None,
        seconds: float | None = None,
        cron: str | None = None,
        job_id: str | None = None,
        replace_existing: bool = True,
        **kwargs: Any,
    ) -> str:
        """Schedule ``func`` on an interval or crontab.

        Args:
            func: Coroutine function to run
            hours: Interval in hours
            minutes: Interval in minutes
            seconds: Interval in seconds
            cron: Crontab expression (e.g. "*/10 * * * *"), takes precedence
            job_id: Job identifier (defaults to the function's dotted name)
            replace_existing: Replace a job with the same id
            **kwargs: Keyword arguments for ``func``

        Returns:
            The job id

        Raises:
            ValueError: If no schedule is given
        """
        trigger = build_trigger(hours=hours, minutes=minutes, seconds=seconds, cron=cron)
        job_id = job_id or f"{func.__module__}.{func.__name__}"

        job = self.scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            replace_existing=replace_existing,
            kwargs=kwargs,
        )

        logger.info(f"Scheduled job '{job_id}' with trigger: {trigger}")
        return job.id

    def remove_job(self, job_id: str) -> bool:
        """Unschedule a job; False when no job has that id."""
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning(f"Job '{job_id}' not found")
            return False
        logger.info(f"Removed job '{job_id}'")
        return True

    def get_jobs(self) -> list[dict[str, Any]]:
        """Id, name, trigger and next run time of each scheduled job."""
        jobs = []
        for job in self.scheduler.get_jobs():
            # Jobs added before start() have no next run time yet
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
                "trigger": str(job.trigger),
            })
        return jobs

    def schedule_risk_analysis(
        self,
        interval_minutes: int | None = None,
        job_id: str = RISK_ANALYSIS_JOB_ID,
    ) -> str:
        """Run the analysis cycle for all learners every ``interval_minutes``.

        Defaults to ``Settings.analysis_interval_minutes``.
        """
        from learnguard.jobs.tasks import run_risk_analysis

        return self.add_job(
            run_risk_analysis,
            minutes=interval_minutes or self._settings.analysis_interval_minutes,
            job_id=job_id,
        )

    def schedule_alert_sweep(
        self,
        interval_minutes: int | None = None,
        job_id: str = ALERT_SWEEP_JOB_ID,
    ) -> str:
        from learnguard.jobs.tasks import run_alert_sweep

        return self.add_job(
            run_alert_sweep,
            minutes=interval_minutes or self._settings.alert_sweep_interval_minutes,
            job_id=job_id,
        )

    def schedule_all_default_jobs(self) -> list[str]:
        job_ids = [
            self.schedule_risk_analysis(),
            self.schedule_alert_sweep(),
        ]
        logger.info(f"Scheduled {len(job_ids)} default background jobs")
        return job_ids


@lru_cache(maxsize=1)
def get_scheduler() -> JobScheduler:
    """Get the process-wide scheduler instance."""
    return JobScheduler()


def reset_scheduler() -> None:
    """Shut down and forget the process-wide scheduler (for testing)."""
    if get_scheduler.cache_info().currsize:
        get_scheduler().shutdown(wait=False)
    get_scheduler.cache_clear()
