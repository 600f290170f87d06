"""Background jobs package.

This package provides scheduled task execution for LearnGuard: the periodic
risk analysis cycle and the expired-alert sweep.
"""

from learnguard.jobs.scheduler import JobScheduler, get_scheduler, reset_scheduler
from learnguard.jobs.tasks import run_alert_sweep, run_risk_analysis

__all__ = [
    "JobScheduler",
    "get_scheduler",
    "reset_scheduler",
    "run_alert_sweep",
    "run_risk_analysis",
]
