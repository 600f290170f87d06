"""Insight Commands - Risks, profile, path and report for a stats snapshot file.

Each command reads a JSON snapshot in the aggregator's nested shape, records
it into an in-memory provider and runs the services against it.
"""

import asyncio
import json
from datetime import timedelta
from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

import typer
from rich.console import Console

from learnguard.cli.ui.display import (
    display_alerts,
    display_path,
    display_profile,
    display_report,
    display_risks,
)
from learnguard.modules.stats import InMemoryStatsProvider, TimeRange, load_snapshot
from learnguard.shared.datetime_utils import utc_now
from learnguard.shared.service_registry import ServiceRegistry

insights_app = typer.Typer(help="Learning risk and path commands")
console = Console()

StatsFile = typer.Argument(
    ...,
    exists=True,
    dir_okay=False,
    readable=True,
    help="JSON file with the learner's stats snapshot",
)
UserIdOption = typer.Option(None, "--user-id", "-u", help="Learner id (random if omitted)")
JsonOption = typer.Option(False, "--json", help="Print raw JSON instead of tables")


def run_async(coro):
    """Helper to run async functions in sync context."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _registry_for(stats_file: Path, user_id: UUID) -> ServiceRegistry:
    """Build an isolated registry holding the file's snapshot for ``user_id``."""
    try:
        snapshot = load_snapshot(stats_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read stats file:[/red] {e}")
        raise typer.Exit(1)

    now = utc_now()
    provider = InMemoryStatsProvider(clock=lambda: now)
    # Recorded just before "now" so it falls inside report windows ending now
    provider.record(user_id, snapshot, recorded_at=now - timedelta(minutes=1))
    return ServiceRegistry(provider, clock=lambda: now)


def _print_json(data: object) -> None:
    console.print_json(json.dumps(data))


@insights_app.command("risks")
def risks(
    stats_file: Path = StatsFile,
    user_id: Optional[UUID] = UserIdOption,
    as_json: bool = JsonOption,
) -> None:
    """Detect learning risks and the strategy for each."""
    user_id = user_id or uuid4()
    service = _registry_for(stats_file, user_id).intervention

    detected = run_async(service.analyze_learning_risks(user_id))
    strategies = run_async(service.generate_intervention_strategies(detected))

    if as_json:
        _print_json({
            "risks": [r.to_dict() for r in detected],
            "strategies": [s.to_dict() for s in strategies],
        })
        return
    display_risks(detected, strategies)


@insights_app.command("profile")
def profile(
    stats_file: Path = StatsFile,
    user_id: Optional[UUID] = UserIdOption,
    as_json: bool = JsonOption,
) -> None:
    """Derive the learner's profile."""
    user_id = user_id or uuid4()
    service = _registry_for(stats_file, user_id).pathing

    result = run_async(service.analyze_learning_profile(user_id))
    if as_json:
        _print_json(result.to_dict())
        return
    display_profile(result)


@insights_app.command("path")
def path(
    stats_file: Path = StatsFile,
    user_id: Optional[UUID] = UserIdOption,
    as_json: bool = JsonOption,
) -> None:
    """Generate an optimized learning path."""
    user_id = user_id or uuid4()
    service = _registry_for(stats_file, user_id).pathing

    result = run_async(service.generate_optimized_path(user_id))
    if as_json:
        _print_json(result.to_dict())
        return
    display_path(result)


@insights_app.command("report")
def report(
    stats_file: Path = StatsFile,
    user_id: Optional[UUID] = UserIdOption,
    days: Optional[int] = typer.Option(None, "--days", "-d", min=1, help="Window length in days"),
    as_json: bool = JsonOption,
) -> None:
    """Generate an analytics report for the last N days."""
    user_id = user_id or uuid4()
    registry = _registry_for(stats_file, user_id)
    service = registry.analytics

    time_range = (
        TimeRange.last_days(days, registry.clock()) if days else service.default_time_range()
    )
    result = run_async(service.generate_advanced_report(user_id, time_range))
    if as_json:
        _print_json(result.to_dict())
        return
    display_report(result)


@insights_app.command("alerts")
def alerts(
    stats_file: Path = StatsFile,
    user_id: Optional[UUID] = UserIdOption,
    as_json: bool = JsonOption,
) -> None:
    """Run a full analysis cycle and show the alerts it raised."""
    user_id = user_id or uuid4()
    service = _registry_for(stats_file, user_id).intervention

    summary = run_async(service.run_analysis_cycle(user_id))
    raised = run_async(service.visible_alerts(user_id))
    if as_json:
        _print_json({"summary": summary, "alerts": [a.to_dict() for a in raised]})
        return
    display_alerts(raised)
    if summary["auto_executed"]:
        console.print(f"\n[cyan]Started {summary['auto_executed']} intervention(s) automatically[/cyan]")
