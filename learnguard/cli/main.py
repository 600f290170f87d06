"""CLI Entry Point - Main command interface.

This module provides the main entry point for the LearnGuard CLI application.
It sets up command groups and a few top-level commands.
"""

import logging

import typer
from rich.console import Console
from rich.panel import Panel

from learnguard import __version__

# Main application
app = typer.Typer(
    name="learnguard",
    help="LearnGuard - learning risk prediction and path optimization",
    no_args_is_help=True,
    pretty_exceptions_enable=True,
)
console = Console()


# =============================================================================
# Import and register command groups
# =============================================================================

from learnguard.cli.commands.insights import insights_app
from learnguard.cli.commands.jobs import jobs_app

app.add_typer(insights_app, name="insights", help="Risks, profile, path and reports")
app.add_typer(jobs_app, name="jobs", help="Background jobs")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (defaults to API_HOST)"),
    port: int = typer.Option(None, "--port", "-p", help="Port (defaults to API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the API server."""
    import uvicorn

    from learnguard.shared.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "learnguard.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("config")
def config() -> None:
    """View configuration and feature flags."""
    from learnguard.shared.config import get_settings
    from learnguard.shared.feature_flags import get_feature_flags

    console.print(Panel.fit(
        "[bold]Configuration[/bold]",
        border_style="cyan",
    ))

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        console.print("\n[yellow]Check your .env file and environment variables.[/yellow]")
        raise typer.Exit(1)

    console.print("\n[bold]Environment:[/bold]")
    console.print(f"  Mode: {settings.environment}")
    console.print(f"  Log level: {settings.log_level}")

    console.print("\n[bold]Analysis:[/bold]")
    console.print(f"  Analysis interval: {settings.analysis_interval_minutes} min")
    console.print(f"  Alert sweep interval: {settings.alert_sweep_interval_minutes} min")
    console.print(f"  Report window: {settings.report_window_days} days")
    console.print(f"  Path cache TTL: {settings.path_cache_ttl_hours:g} h")
    console.print(f"  Alert history limit: {settings.alert_history_limit}")

    console.print("\n[bold]Feature flags:[/bold]")
    for name, (enabled, source) in get_feature_flags().describe().items():
        state = "[green]on[/green]" if enabled else "[dim]off[/dim]"
        console.print(f"  {name}: {state} [dim]({source.value})[/dim]")


@app.command("version")
def version() -> None:
    """Show version information."""
    console.print(Panel.fit(
        "[bold]LearnGuard CLI[/bold]\n"
        f"Version: {__version__}\n"
        "Learning risk prediction and path optimization",
        border_style="cyan",
    ))


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """LearnGuard - learning risk prediction and path optimization.

    Use 'learnguard --help' to see all available commands.

    Quick start:
      learnguard insights risks stats.json   - Detect learning risks
      learnguard insights path stats.json    - Generate a learning path
      learnguard serve                       - Run the API
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
