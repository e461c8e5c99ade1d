"""
Dashboard summaries.

Read-only views over a metrics payload: cards, trend, provider mix and
the top model rows.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from usage_dashboard.config.loader import DEFAULT_TOP_MODELS
from usage_dashboard.core.aggregation import ModelMetric
from usage_dashboard.storage.payload import MetricsPayload

TREND_MEASURES = ("cost", "calls")


@dataclass(frozen=True)
class ProviderShare:
    """Cost attributed to one provider."""
    provider: str
    cost: float
    share: float


def summary_cards(payload: MetricsPayload) -> List[Tuple[str, str]]:
    """Title/value pairs for the summary cards."""
    totals = payload.totals
    return [
        ("Total API Calls", f"{totals.calls:,}"),
        ("Input Tokens", f"{totals.input_tokens:,}"),
        ("Output Tokens", f"{totals.output_tokens:,}"),
        ("Estimated Cost", f"${totals.cost:,.2f}"),
    ]


def trend_series(payload: MetricsPayload, measure: str = "cost") -> List[Tuple[str, float]]:
    """Daily (date, value) points for the trend chart.

    Raises:
        ValueError: If measure is not "cost" or "calls"
    """
    if measure not in TREND_MEASURES:
        raise ValueError(f"measure must be one of: {list(TREND_MEASURES)}")
    return [(day.date, getattr(day, measure)) for day in payload.daily]


def provider_mix(payload: MetricsPayload) -> List[ProviderShare]:
    """Sum model costs per provider, in first-seen order."""
    grouped: Dict[str, float] = {}
    for model in payload.models:
        grouped[model.provider] = grouped.get(model.provider, 0) + model.cost

    overall = sum(grouped.values())
    return [
        ProviderShare(
            provider=provider,
            cost=cost,
            share=(cost / overall) if overall else 0.0,
        )
        for provider, cost in grouped.items()
    ]


def top_models(payload: MetricsPayload, limit: int = DEFAULT_TOP_MODELS) -> List[ModelMetric]:
    """First ``limit`` model rows; the payload is already cost-sorted."""
    if limit <= 0:
        raise ValueError("limit must be > 0")
    return payload.models[:limit]
