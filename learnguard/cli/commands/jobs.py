"""Jobs Commands - Inspect the background schedule and run tasks once."""

import asyncio
from datetime import timedelta
from pathlib import Path
from typing import List
from uuid import uuid4

import typer
from rich.console import Console
from rich.table import Table

from learnguard.jobs.scheduler import JobScheduler
from learnguard.jobs.tasks import run_alert_sweep, run_risk_analysis
from learnguard.modules.stats import InMemoryStatsProvider, load_snapshot
from learnguard.shared.datetime_utils import utc_now
from learnguard.shared.service_registry import ServiceRegistry

jobs_app = typer.Typer(help="Background job commands")
console = Console()


@jobs_app.command("list")
def list_jobs() -> None:
    """Show the default background jobs and their triggers."""
    scheduler = JobScheduler()
    scheduler.schedule_all_default_jobs()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Job", min_width=16)
    table.add_column("Trigger", min_width=30)

    for job in scheduler.get_jobs():
        table.add_row(job["id"], job["trigger"])

    console.print(table)


@jobs_app.command("analyze")
def analyze(
    stats_files: List[Path] = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="One stats snapshot JSON file per learner",
    ),
) -> None:
    """Run the risk analysis task once over a set of learners, then sweep alerts."""
    now = utc_now()
    provider = InMemoryStatsProvider(clock=lambda: now)
    for stats_file in stats_files:
        try:
            snapshot = load_snapshot(stats_file)
        except (OSError, ValueError) as e:
            console.print(f"[red]Skipping {stats_file}:[/red] {e}")
            continue
        provider.record(uuid4(), snapshot, recorded_at=now - timedelta(minutes=1))

    registry = ServiceRegistry(provider, clock=lambda: now)

    async def _run() -> tuple[dict, dict]:
        analysis = await run_risk_analysis(registry)
        sweep = await run_alert_sweep(registry)
        return analysis, sweep

    analysis, sweep = asyncio.run(_run())

    console.print(f"[bold]Learners analyzed:[/bold] {analysis['users_analyzed']}")
    console.print(f"[bold]Risks detected:[/bold] {analysis['risks_detected']}")
    console.print(f"[bold]Alerts created:[/bold] {analysis['alerts_created']}")
    console.print(f"[bold]Interventions started:[/bold] {analysis['interventions_started']}")
    console.print(f"[dim]Expired alerts removed: {sweep['alerts_removed']}[/dim]")

    errors = analysis["errors"] + sweep["errors"]
    for error in errors:
        console.print(f"[red]Error:[/red] {error}")
    if errors:
        raise typer.Exit(1)
