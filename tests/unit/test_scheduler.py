"""Unit tests for the background job scheduler."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from learnguard.jobs.scheduler import (
    ALERT_SWEEP_JOB_ID,
    RISK_ANALYSIS_JOB_ID,
    JobScheduler,
    build_trigger,
    get_scheduler,
    reset_scheduler,
)
from learnguard.jobs.tasks import run_alert_sweep, run_risk_analysis
from learnguard.shared.config import Settings
from learnguard.shared.feature_flags import FeatureFlags, get_feature_flags


@pytest.fixture(autouse=True)
def fresh_scheduler():
    reset_scheduler()
    yield
    reset_scheduler()


@pytest.fixture
def jobs_enabled():
    """Process flags with background jobs switched on."""
    flags = get_feature_flags()
    flags.enable(FeatureFlags.ENABLE_BACKGROUND_JOBS)
    return flags


@pytest.fixture
def scheduler(jobs_enabled):
    return JobScheduler(settings=Settings(), flags=jobs_enabled)


class TestBuildTrigger:
    """Tests for build_trigger."""

    def test_interval(self):
        trigger = build_trigger(minutes=10)

        assert isinstance(trigger, IntervalTrigger)
        assert trigger.interval.total_seconds() == 600

    def test_combined_interval(self):
        assert build_trigger(hours=1, seconds=30).interval.total_seconds() == 3630

    def test_cron_takes_precedence(self):
        assert isinstance(build_trigger(minutes=10, cron="*/5 * * * *"), CronTrigger)

    def test_requires_schedule(self):
        with pytest.raises(ValueError, match="Must specify"):
            build_trigger()


class TestLifecycle:
    """Tests for start and shutdown."""

    def test_new_scheduler_is_stopped(self, scheduler):
        assert scheduler.is_running is False

    def test_start(self, scheduler):
        with patch.object(scheduler.scheduler, "start") as apscheduler_start:
            scheduler.start()
            scheduler.start()

        apscheduler_start.assert_called_once()
        assert scheduler.is_running

    def test_flag_off_keeps_scheduler_stopped(self):
        flags = get_feature_flags()
        flags.disable(FeatureFlags.ENABLE_BACKGROUND_JOBS)
        scheduler = JobScheduler(flags=flags)

        with patch.object(scheduler.scheduler, "start") as apscheduler_start:
            scheduler.start()

        apscheduler_start.assert_not_called()
        assert not scheduler.is_running

    def test_shutdown_waits_by_default(self, scheduler):
        with patch.object(scheduler.scheduler, "start"):
            scheduler.start()

        with patch.object(scheduler.scheduler, "shutdown") as apscheduler_shutdown:
            scheduler.shutdown()

        apscheduler_shutdown.assert_called_once_with(wait=True)
        assert not scheduler.is_running

    def test_shutdown_of_idle_scheduler_is_noop(self, scheduler):
        scheduler.shutdown()
        assert scheduler._scheduler is None

    def test_process_wide_instance(self):
        assert get_scheduler() is get_scheduler()

    def test_reset_replaces_instance(self):
        first = get_scheduler()
        reset_scheduler()
        assert get_scheduler() is not first


class TestJobs:
    """Tests for registering and listing jobs."""

    def test_default_jobs_use_settings(self, jobs_enabled):
        settings = Settings(analysis_interval_minutes=15, alert_sweep_interval_minutes=45)
        scheduler = JobScheduler(settings=settings, flags=jobs_enabled)

        assert scheduler.schedule_all_default_jobs() == [RISK_ANALYSIS_JOB_ID, ALERT_SWEEP_JOB_ID]

        analysis = scheduler.scheduler.get_job(RISK_ANALYSIS_JOB_ID)
        sweep = scheduler.scheduler.get_job(ALERT_SWEEP_JOB_ID)
        assert analysis.func is run_risk_analysis
        assert analysis.trigger.interval.total_seconds() == 15 * 60
        assert sweep.func is run_alert_sweep
        assert sweep.trigger.interval.total_seconds() == 45 * 60

    def test_explicit_interval_overrides_settings(self, scheduler):
        scheduler.schedule_alert_sweep(interval_minutes=5)

        sweep = scheduler.scheduler.get_job(ALERT_SWEEP_JOB_ID)
        assert sweep.trigger.interval.total_seconds() == 300

    def test_job_id_defaults_to_dotted_name(self, scheduler):
        async def nightly_report():
            pass

        job_id = scheduler.add_job(nightly_report, cron="0 3 * * *")
        assert job_id.endswith("nightly_report")

    def test_listing_before_start(self, scheduler):
        scheduler.schedule_all_default_jobs()

        jobs = {job["id"]: job for job in scheduler.get_jobs()}

        assert set(jobs) == {RISK_ANALYSIS_JOB_ID, ALERT_SWEEP_JOB_ID}
        assert jobs[RISK_ANALYSIS_JOB_ID]["next_run"] is None
        assert jobs[RISK_ANALYSIS_JOB_ID]["trigger"].startswith("interval")

    def test_listing_formats_next_run(self, scheduler):
        job = MagicMock(id=RISK_ANALYSIS_JOB_ID, trigger="interval[0:10:00]")
        job.name = "run_risk_analysis"
        job.next_run_time = datetime(2026, 3, 1, 12, 10, tzinfo=timezone.utc)

        with patch.object(scheduler.scheduler, "get_jobs", return_value=[job]):
            jobs = scheduler.get_jobs()

        assert jobs == [{
            "id": RISK_ANALYSIS_JOB_ID,
            "name": "run_risk_analysis",
            "next_run": "2026-03-01T12:10:00+00:00",
            "trigger": "interval[0:10:00]",
        }]

    def test_remove_job(self, scheduler):
        scheduler.schedule_alert_sweep()

        assert scheduler.remove_job(ALERT_SWEEP_JOB_ID) is True
        assert scheduler.get_jobs() == []

    def test_remove_unknown_job(self, scheduler):
        with patch.object(scheduler.scheduler, "remove_job", side_effect=JobLookupError("gone")):
            assert scheduler.remove_job("gone") is False
