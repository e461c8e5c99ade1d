"""
Usage event normalization.

Turns loosely structured session log records into fully defaulted events.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

Number = Union[int, float]

UNKNOWN_MODEL = "unknown"


@dataclass(frozen=True)
class UsageEvent:
    """One billable API call extracted from a session log line.

    All numeric fields are already coerced, so aggregation never has to
    deal with absent values. Only ``timestamp`` stays optional.
    """
    model: str
    input_tokens: Number = 0
    output_tokens: Number = 0
    cache_read: Number = 0
    cache_write: Number = 0
    total_tokens: Number = 0
    cost: Number = 0
    timestamp: Optional[str] = None

    @property
    def date(self) -> Optional[str]:
        """Calendar day of the event (first 10 characters of the timestamp)."""
        if self.timestamp is None:
            return None
        return self.timestamp[:10]


def coerce_number(value: Any) -> Number:
    """Coerce a usage sub-field to a number, degrading to 0.

    Ints and floats pass through, booleans count as 1/0 and numeric
    strings are parsed. Anything else becomes 0, as do NaN and infinity.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return 0
        return parsed if math.isfinite(parsed) else 0
    return 0


def _is_set(value: Any) -> bool:
    # None, False, 0 and "" mark an absent value in session logs
    if value is None or value is False:
        return False
    if isinstance(value, (int, float, str)) and not value:
        return False
    return True


def parse_usage_event(record: Any) -> Optional[UsageEvent]:
    """Build a UsageEvent from a raw log record.

    The session format nests billable data under ``message``; records
    without a ``message`` object are read as flat events.

    Args:
        record: Parsed JSON value of one log line

    Returns:
        The normalized event, or None if the record carries no usage
        or no cost (a non-billable event)
    """
    if not isinstance(record, dict):
        return None

    message = record.get("message")
    if not isinstance(message, dict):
        message = record

    usage = message.get("usage")
    if not isinstance(usage, dict):
        return None
    cost = usage.get("cost")
    if not _is_set(cost):
        return None

    cost_total = cost.get("total") if isinstance(cost, dict) else None

    timestamp = record.get("timestamp")
    if not _is_set(timestamp):
        timestamp = message.get("timestamp")

    model = message.get("model")
    if not _is_set(model):
        model = message.get("modelId")
    if not _is_set(model):
        model = UNKNOWN_MODEL

    return UsageEvent(
        model=str(model),
        input_tokens=coerce_number(usage.get("input")),
        output_tokens=coerce_number(usage.get("output")),
        cache_read=coerce_number(usage.get("cacheRead")),
        cache_write=coerce_number(usage.get("cacheWrite")),
        total_tokens=coerce_number(usage.get("totalTokens")),
        cost=coerce_number(cost_total),
        timestamp=str(timestamp) if _is_set(timestamp) else None,
    )


def event_to_record(event: UsageEvent) -> Dict[str, Any]:
    """Render an event in the session log shape."""
    message: Dict[str, Any] = {
        "model": event.model,
        "usage": {
            "input": event.input_tokens,
            "output": event.output_tokens,
            "cacheRead": event.cache_read,
            "cacheWrite": event.cache_write,
            "totalTokens": event.total_tokens,
            "cost": {"total": event.cost},
        },
    }
    record: Dict[str, Any] = {"type": "message", "message": message}
    if event.timestamp is not None:
        record["timestamp"] = event.timestamp
    return record
