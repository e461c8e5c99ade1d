"""
Metrics payload building and persistence.

Produces the document consumed by the dashboard and reads it back.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from usage_dashboard.core.aggregation import (
    AggregationResult,
    DailyMetric,
    ModelMetric,
    Totals,
)
from usage_dashboard.core.events import coerce_number


class PayloadError(ValueError):
    """Raised when a metrics document does not have the expected shape."""


@dataclass
class MetricsPayload:
    """The published summary of all aggregated usage."""
    generated_at: str
    source: str
    totals: Totals = field(default_factory=Totals)
    daily: List[DailyMetric] = field(default_factory=list)
    models: List[ModelMetric] = field(default_factory=list)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def build_payload(
    result: AggregationResult,
    source: str,
    generated_at: Optional[datetime] = None,
) -> MetricsPayload:
    """Order the rollups and stamp the payload.

    Days sort ascending by their ISO date string. Models sort by cost,
    highest first; Python's sort is stable so ties keep discovery order.

    Args:
        result: Accumulators of a finished aggregation run
        source: Descriptive label of where the data came from
        generated_at: Completion time of the run (defaults to now)

    Returns:
        MetricsPayload ready to serialize
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    return MetricsPayload(
        generated_at=format_timestamp(generated_at),
        source=source,
        totals=result.totals,
        daily=sorted(result.daily.values(), key=lambda d: d.date),
        models=sorted(result.models.values(), key=lambda m: m.cost, reverse=True),
    )


def payload_to_dict(payload: MetricsPayload) -> Dict[str, Any]:
    """Convert a payload to the published document shape."""
    totals = payload.totals
    return {
        "generatedAt": payload.generated_at,
        "source": payload.source,
        "totals": {
            "calls": totals.calls,
            "inputTokens": totals.input_tokens,
            "outputTokens": totals.output_tokens,
            "cacheRead": totals.cache_read,
            "cacheWrite": totals.cache_write,
            "totalTokens": totals.total_tokens,
            "cost": totals.cost,
        },
        "daily": [
            {
                "date": day.date,
                "calls": day.calls,
                "inputTokens": day.input_tokens,
                "outputTokens": day.output_tokens,
                "totalTokens": day.total_tokens,
                "cost": day.cost,
            }
            for day in payload.daily
        ],
        "models": [
            {
                "model": model.model,
                "provider": model.provider,
                "calls": model.calls,
                "inputTokens": model.input_tokens,
                "outputTokens": model.output_tokens,
                "totalTokens": model.total_tokens,
                "cost": model.cost,
            }
            for model in payload.models
        ],
    }


def dump_payload(payload: MetricsPayload) -> str:
    """Serialize a payload as pretty-printed JSON."""
    return json.dumps(payload_to_dict(payload), indent=2, ensure_ascii=False)


def write_payload(payload: MetricsPayload, path: Union[str, Path]) -> Path:
    """Write the payload, replacing any previous document.

    The document is serialized fully before the file is opened, so a
    serialization problem never leaves a truncated file behind.

    Args:
        payload: Payload to publish
        path: Output location; missing parent directories are created

    Returns:
        The path written
    """
    output = Path(path)
    text = dump_payload(payload)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding='utf-8')
    return output


def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise PayloadError(f"'{key}' must be a {kind.__name__}")
    return value


def payload_from_dict(data: Any) -> MetricsPayload:
    """Parse a published document back into a MetricsPayload.

    Numeric fields get the same best-effort coercion as ingestion.

    Raises:
        PayloadError: If a section is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise PayloadError("Metrics document must be a JSON object")

    raw_totals = _section(data, "totals", dict)
    raw_daily = _section(data, "daily", list)
    raw_models = _section(data, "models", list)

    totals = Totals(
        calls=int(coerce_number(raw_totals.get("calls"))),
        input_tokens=coerce_number(raw_totals.get("inputTokens")),
        output_tokens=coerce_number(raw_totals.get("outputTokens")),
        cache_read=coerce_number(raw_totals.get("cacheRead")),
        cache_write=coerce_number(raw_totals.get("cacheWrite")),
        total_tokens=coerce_number(raw_totals.get("totalTokens")),
        cost=coerce_number(raw_totals.get("cost")),
    )

    daily = []
    for row in raw_daily:
        if not isinstance(row, dict):
            raise PayloadError("'daily' entries must be objects")
        daily.append(DailyMetric(
            date=str(row.get("date", "")),
            calls=int(coerce_number(row.get("calls"))),
            input_tokens=coerce_number(row.get("inputTokens")),
            output_tokens=coerce_number(row.get("outputTokens")),
            total_tokens=coerce_number(row.get("totalTokens")),
            cost=coerce_number(row.get("cost")),
        ))

    models = []
    for row in raw_models:
        if not isinstance(row, dict):
            raise PayloadError("'models' entries must be objects")
        models.append(ModelMetric(
            model=str(row.get("model", "")),
            provider=str(row.get("provider", "")),
            calls=int(coerce_number(row.get("calls"))),
            input_tokens=coerce_number(row.get("inputTokens")),
            output_tokens=coerce_number(row.get("outputTokens")),
            total_tokens=coerce_number(row.get("totalTokens")),
            cost=coerce_number(row.get("cost")),
        ))

    return MetricsPayload(
        generated_at=str(data.get("generatedAt", "")),
        source=str(data.get("source", "")),
        totals=totals,
        daily=daily,
        models=models,
    )


def parse_payload(text: str) -> MetricsPayload:
    """Parse a JSON document body into a MetricsPayload."""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise PayloadError(f"Metrics document is not valid JSON: {e}")
    return payload_from_dict(data)


def load_payload(path: Union[str, Path]) -> MetricsPayload:
    """Read a published metrics document from disk."""
    return parse_payload(Path(path).read_text(encoding='utf-8'))
