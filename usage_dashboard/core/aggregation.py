"""
Usage aggregation.

Folds usage events into running totals and per-day / per-model rollups.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from .events import Number, UsageEvent
from .providers import provider_from_model


@dataclass
class Totals:
    """Running totals across every included event."""
    calls: int = 0
    input_tokens: Number = 0
    output_tokens: Number = 0
    cache_read: Number = 0
    cache_write: Number = 0
    total_tokens: Number = 0
    cost: Number = 0

    def add(self, event: UsageEvent) -> None:
        self.calls += 1
        self.input_tokens += event.input_tokens
        self.output_tokens += event.output_tokens
        self.cache_read += event.cache_read
        self.cache_write += event.cache_write
        self.total_tokens += event.total_tokens
        self.cost += event.cost


@dataclass
class _Rollup:
    calls: int = 0
    input_tokens: Number = 0
    output_tokens: Number = 0
    total_tokens: Number = 0
    cost: Number = 0

    def add(self, event: UsageEvent) -> None:
        self.calls += 1
        self.input_tokens += event.input_tokens
        self.output_tokens += event.output_tokens
        self.total_tokens += event.total_tokens
        self.cost += event.cost


@dataclass
class DailyMetric(_Rollup):
    """Usage for one calendar day (YYYY-MM-DD)."""
    date: str = ""


@dataclass
class ModelMetric(_Rollup):
    """Usage for one model identifier."""
    model: str = ""
    provider: str = ""


@dataclass
class AggregationResult:
    """Accumulators produced by a single aggregation run.

    ``daily`` and ``models`` keep discovery order; the payload emitter
    is responsible for the published ordering.
    """
    totals: Totals = field(default_factory=Totals)
    daily: Dict[str, DailyMetric] = field(default_factory=dict)
    models: Dict[str, ModelMetric] = field(default_factory=dict)

    def add(self, event: UsageEvent, fallback_date: str) -> None:
        """Fold one event into every accumulator."""
        date = event.date if event.date is not None else fallback_date

        self.totals.add(event)

        day = self.daily.get(date)
        if day is None:
            day = self.daily[date] = DailyMetric(date=date)
        day.add(event)

        model = self.models.get(event.model)
        if model is None:
            model = self.models[event.model] = ModelMetric(
                model=event.model,
                provider=provider_from_model(event.model),
            )
        model.add(event)


def aggregate_events(
    events: Iterable[UsageEvent],
    now: Optional[datetime] = None,
    result: Optional[AggregationResult] = None,
) -> AggregationResult:
    """Aggregate usage events in a single pass.

    Events without a timestamp are attributed to the processing time,
    so gaps in source data land on the day the job runs.

    Args:
        events: Normalized usage events
        now: Processing time used for events without a timestamp
            (defaults to the current UTC time)
        result: Accumulators to keep folding into, for multi-file runs

    Returns:
        AggregationResult with totals, daily and per-model rollups
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    fallback_date = now.date().isoformat()

    if result is None:
        result = AggregationResult()
    for event in events:
        result.add(event, fallback_date)
    return result
