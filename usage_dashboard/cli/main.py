"""
CLI interface for the usage dashboard.

Provides command-line access to the sync job and the dashboard view.
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from usage_dashboard.config.loader import DashboardConfig, load_dashboard_config
from usage_dashboard.core.sync import SyncResult, SyncStatus, run_sync
from usage_dashboard.dashboard.client import DashboardState, ViewStatus, load_state
from usage_dashboard.dashboard.render import render_dashboard
from usage_dashboard.dashboard.summary import TREND_MEASURES
from usage_dashboard.demo.seed_demo_data import write_demo_sessions

app = typer.Typer()
console = Console()

# Skipping because logs are absent is not a failure
EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to a YAML configuration file"
)


def _load_config(config_path: Optional[str]) -> DashboardConfig:
    try:
        return load_dashboard_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Usage Dashboard CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Usage Dashboard - Use --help to see available commands")


@app.command()
def status(config_path: Optional[str] = CONFIG_OPTION):
    """Show the resolved configuration and what exists on disk."""
    config = _load_config(config_path)

    table = Table(title="Usage Dashboard")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Sessions directory", str(config.sessions_dir))
    table.add_row("Output document", str(config.output_path))
    table.add_row("Dashboard source", config.dashboard_source)
    table.add_row("Top models", str(config.top_models))
    console.print(table)

    if config.sessions_dir.is_dir():
        console.print("[green]✓[/] Session logs available")
    else:
        console.print("[yellow]![/] Session log directory not found")
    if config.output_path.exists():
        console.print("[green]✓[/] Metrics document published")
    else:
        console.print("[yellow]![/] No metrics document yet")


@app.command()
def sync(config_path: Optional[str] = CONFIG_OPTION):
    """
    Aggregate session logs into the metrics document.

    If the session directory is missing, the existing document is left
    untouched so the dashboard keeps its last published data.
    """
    config = _load_config(config_path)
    try:
        result = run_sync(config)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    _display_sync_result(result)
    sys.exit(EXIT_CODE_PASS)


def _display_sync_result(result: SyncResult):
    """Display the outcome of a sync run."""
    if result.status == SyncStatus.SKIPPED_NO_SOURCE:
        console.print(
            "[yellow]No local session logs found in this environment; "
            f"keeping existing {result.output_path}[/]"
        )
        return

    totals = result.payload.totals
    console.print(f"[green]✓[/] Wrote {result.output_path}")
    console.print(f"Files read: {result.files_read}")
    console.print(f"API calls: {totals.calls:,}")
    console.print(f"Estimated cost: ${totals.cost:,.2f}")


@app.command()
def show(
    config_path: Optional[str] = CONFIG_OPTION,
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="URL or path of the metrics document"
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        "-n",
        help="Number of model rows to show"
    ),
    measure: str = typer.Option(
        "cost",
        "--measure",
        "-m",
        help="Trend measure: cost or calls"
    ),
    interactive: bool = typer.Option(
        False,
        "--interactive",
        "-i",
        help="Keep the dashboard open and refresh on request"
    )
):
    """
    Render the usage dashboard.

    The document is fetched fresh on every load; remote sources get a
    cache-busting query parameter.
    """
    config = _load_config(config_path)
    if measure not in TREND_MEASURES:
        console.print(f"[red]Error:[/] measure must be one of: {list(TREND_MEASURES)}")
        sys.exit(EXIT_CODE_FAIL)
    limit = top if top is not None else config.top_models
    if limit <= 0:
        console.print("[red]Error:[/] --top must be > 0")
        sys.exit(EXIT_CODE_FAIL)
    target = source or config.dashboard_source

    state = _refresh(target, config, measure, limit)
    while interactive:
        choice = typer.prompt("[r]efresh or [q]uit", default="q")
        if choice.strip().lower() not in ("r", "refresh"):
            break
        state = _refresh(target, config, measure, limit)

    if state.status == ViewStatus.ERROR:
        sys.exit(EXIT_CODE_FAIL)
    sys.exit(EXIT_CODE_PASS)


def _refresh(target: str, config: DashboardConfig, measure: str, limit: int) -> DashboardState:
    render_dashboard(DashboardState.loading(), console)
    state = load_state(target, timeout=config.request_timeout)
    render_dashboard(state, console, measure=measure, limit=limit)
    return state


@app.command()
def demo(directory: Path = typer.Argument(..., help="Directory to write the sample session log to")):
    """Write a sample session log for trying out the sync job."""
    try:
        path = write_demo_sessions(directory)
    except OSError as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"[green]✓[/] Demo session log written to {path}")


if __name__ == "__main__":
    app()
