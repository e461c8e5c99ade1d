"""
Terminal rendering of the dashboard.
"""

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from usage_dashboard.config.loader import DEFAULT_TOP_MODELS
from .client import DashboardState, ViewStatus
from .summary import provider_mix, summary_cards, top_models, trend_series

BAR_WIDTH = 30


def _bar(value: float, peak: float) -> str:
    if peak <= 0 or value <= 0:
        return ""
    return "█" * max(1, round(value / peak * BAR_WIDTH))


def _format_value(value: float, measure: str) -> str:
    if measure == "cost":
        return f"${value:,.2f}"
    return f"{value:,}"


def render_dashboard(
    state: DashboardState,
    console: Console,
    measure: str = "cost",
    limit: int = DEFAULT_TOP_MODELS,
) -> None:
    """Render the current view state to the console."""
    if state.status == ViewStatus.LOADING:
        console.print("[dim]Loading metrics...[/]")
        return
    if state.status == ViewStatus.ERROR:
        console.print(f"[red]Failed to load metrics:[/] {state.error}")
        console.print("[dim]Refresh to try again.[/]")
        return

    payload = state.payload
    console.print("\n[bold]API Metrics[/bold]")
    console.print(f"[dim]Generated {payload.generated_at} from {payload.source}[/]")

    cards = [
        Panel(f"[bold]{value}[/bold]", title=title, expand=True)
        for title, value in summary_cards(payload)
    ]
    console.print(Columns(cards, equal=True, expand=True))

    series = trend_series(payload, measure)
    trend = Table(title=f"Usage trend ({measure})")
    trend.add_column("Date")
    trend.add_column(measure.capitalize(), justify="right")
    trend.add_column("")
    peak = max((value for _, value in series), default=0)
    for date, value in series:
        trend.add_row(date, _format_value(value, measure), f"[cyan]{_bar(value, peak)}[/]")
    console.print(trend)

    mix = Table(title="Cost by provider")
    mix.add_column("Provider")
    mix.add_column("Cost", justify="right")
    mix.add_column("Share", justify="right")
    for entry in provider_mix(payload):
        mix.add_row(entry.provider, f"${entry.cost:,.2f}", f"{entry.share:.1%}")
    console.print(mix)

    models = Table(title="Top models")
    for column in ("Model", "Provider", "Calls", "Input", "Output", "Total", "Cost"):
        models.add_column(column, justify="left" if column in ("Model", "Provider") else "right")
    for row in top_models(payload, limit):
        models.add_row(
            row.model,
            row.provider,
            f"{row.calls:,}",
            f"{row.input_tokens:,}",
            f"{row.output_tokens:,}",
            f"{row.total_tokens:,}",
            f"${row.cost:,.2f}",
        )
    console.print(models)
