"""CLI UI Components - Rich tables and panels for insights."""

from learnguard.cli.ui.display import (
    display_alerts,
    display_path,
    display_profile,
    display_report,
    display_risks,
)

__all__ = [
    "display_alerts",
    "display_path",
    "display_profile",
    "display_report",
    "display_risks",
]
