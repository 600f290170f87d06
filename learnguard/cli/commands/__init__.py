"""CLI Commands - Command group modules."""

from learnguard.cli.commands.insights import insights_app
from learnguard.cli.commands.jobs import jobs_app

__all__ = [
    "insights_app",
    "jobs_app",
]
