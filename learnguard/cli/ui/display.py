"""Display Utilities - Rich output formatting."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from learnguard.modules.analytics.interface import AnalyticsReport
from learnguard.modules.intervention.interface import InterventionStrategy, PredictiveAlert
from learnguard.modules.pathing.interface import LearningProfile, OptimizedLearningPath
from learnguard.modules.risk.interface import LearningRisk

console = Console()

SEVERITY_STYLES = {
    "low": "green",
    "medium": "yellow",
    "high": "red",
    "critical": "bold red",
}


def _truncate(text: str, width: int = 48) -> str:
    return text[:width] + "..." if len(text) > width else text


def display_risks(risks: list[LearningRisk], strategies: list[InterventionStrategy]) -> None:
    """Display detected risks with the strategy chosen for each."""
    if not risks:
        console.print("[green]No learning risks detected.[/green]")
        return

    by_risk = {s.target_risk: s for s in strategies}

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Risk", min_width=20)
    table.add_column("Severity", width=10)
    table.add_column("Probability", justify="right", width=11)
    table.add_column("Impact in", justify="right", width=10)
    table.add_column("Strategy", min_width=24)

    for risk in risks:
        style = SEVERITY_STYLES.get(risk.severity.value, "white")
        strategy = by_risk.get(risk.risk_type)
        table.add_row(
            risk.risk_type.value.replace("_", " ").title(),
            f"[{style}]{risk.severity.value}[/{style}]",
            f"{risk.probability:.0%}",
            f"{risk.time_to_impact_hours:g}h",
            strategy.name if strategy else "[dim]-[/dim]",
        )

    console.print(table)


def display_profile(profile: LearningProfile) -> None:
    """Display a learning profile's scores and preferences."""
    console.print(Panel.fit(
        f"[bold cyan]Learning Profile[/bold cyan]\n"
        f"Style: {profile.learning_style.value} | "
        f"Difficulty: {profile.difficulty_preference.value} | "
        f"Pace: {profile.pace_preference.value}",
        border_style="cyan",
    ))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score", min_width=20)
    table.add_column("Value", justify="right", width=8)

    for name, value in profile.scores.items():
        color = "green" if value >= 70 else "yellow" if value >= 40 else "red"
        table.add_row(name.replace("_", " ").title(), f"[{color}]{value:.0f}[/{color}]")

    console.print(table)

    if profile.weak_areas:
        console.print(f"\n[yellow]Weak areas:[/yellow] {', '.join(profile.weak_areas)}")
    if profile.strong_areas:
        console.print(f"[green]Strong areas:[/green] {', '.join(profile.strong_areas)}")
    if profile.preferred_topics:
        console.print(f"[dim]Preferred topics: {', '.join(profile.preferred_topics)}[/dim]")


def display_path(path: OptimizedLearningPath) -> None:
    """Display an optimized learning path."""
    console.print(Panel.fit(
        f"[bold cyan]Learning Path[/bold cyan]\n"
        f"Phase: {path.current_phase.value} | "
        f"Valid until: {path.valid_until:%Y-%m-%d %H:%M} UTC",
        border_style="cyan",
    ))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Priority", width=8)
    table.add_column("Recommendation", min_width=30)
    table.add_column("Time", justify="right", width=8)

    for i, rec in enumerate(path.recommendations, 1):
        table.add_row(
            str(i),
            rec.priority.value,
            _truncate(rec.title),
            f"{rec.estimated_minutes} min",
        )

    console.print(table)

    if path.next_milestones:
        console.print("\n[bold]Next milestones:[/bold]")
        for milestone in path.next_milestones:
            console.print(f"  - {milestone.milestone} [dim](~{milestone.estimated_days} days)[/dim]")

    for adjustment in path.adaptive_adjustments:
        console.print(f"\n[yellow]Adjustment:[/yellow] {adjustment.adjustment}")


def display_report(report: AnalyticsReport) -> None:
    """Display an analytics report."""
    console.print(Panel.fit(
        f"[bold cyan]Analytics Report[/bold cyan]\n"
        f"{report.time_range.start:%Y-%m-%d} to {report.time_range.end:%Y-%m-%d}",
        border_style="cyan",
    ))

    trends = Table(title="Trends", show_header=True, header_style="bold magenta")
    trends.add_column("Metric", min_width=20)
    trends.add_column("Value", justify="right")
    trends.add_column("Baseline", justify="right")
    trends.add_column("Change", justify="right")
    trends.add_column("Trend")
    for trend in report.trends:
        trends.add_row(
            trend.metric,
            f"{trend.value:g}",
            f"{trend.baseline:g}",
            f"{trend.change_percent:+.1f}%",
            trend.trend.value,
        )
    console.print(trends)

    if report.patterns:
        console.print("\n[bold]Patterns:[/bold]")
        for pattern in report.patterns:
            console.print(f"  - {pattern.name} [dim]({pattern.impact.value})[/dim]")

    for prediction in report.predictions:
        console.print(
            f"\n[bold]Prediction:[/bold] {prediction.target_metric} "
            f"-> {prediction.predicted_value:g} over {prediction.timeframe} "
            f"[dim](confidence {prediction.confidence:g})[/dim]"
        )

    if report.insights:
        console.print("\n[bold]Insights:[/bold]")
        for insight in report.insights:
            console.print(f"  - {insight.insight}")

    if report.risks:
        console.print("\n[bold]Risks:[/bold]")
        for risk in report.risks:
            style = SEVERITY_STYLES.get(risk.severity.value, "white")
            console.print(
                f"  - [{style}]{risk.risk_type.value}[/{style}] "
                f"[dim](p={risk.probability:g})[/dim]: {risk.mitigation[0] if risk.mitigation else ''}"
            )


def display_alerts(alerts: list[PredictiveAlert]) -> None:
    """Display predictive alerts, most urgent first."""
    if not alerts:
        console.print("[green]No alerts.[/green]")
        return

    for alert in sorted(alerts, key=lambda a: a.urgency, reverse=True):
        style = SEVERITY_STYLES.get(alert.risk.severity.value, "white")
        action = "action required" if alert.user_action_required else "informational"
        console.print(Panel(
            f"{alert.message}\n\n"
            f"[dim]Urgency {alert.urgency:.0%} | {action} | "
            f"expires {alert.expires_at:%Y-%m-%d %H:%M} UTC[/dim]",
            title=f"[{style}]{alert.title}[/{style}]",
            border_style=style,
        ))
