"""
Metrics sync run.

Reads every session log, aggregates usage and publishes the payload.

A run either writes one complete document or writes nothing:
1. An absent session directory skips the run and keeps the old document
2. An existing but empty directory publishes an all-zero payload
3. Malformed lines are dropped by the reader, never reported
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from pathlib import Path
from typing import Optional

from .aggregation import AggregationResult, aggregate_events
from usage_dashboard.config.loader import DashboardConfig
from usage_dashboard.storage.payload import MetricsPayload, build_payload, write_payload
from usage_dashboard.storage.reader import list_log_files, read_usage_events


class SyncStatus(Enum):
    """Outcome of a sync run."""
    WRITTEN = auto()
    SKIPPED_NO_SOURCE = auto()


@dataclass
class SyncResult:
    """Results of a sync run."""
    status: SyncStatus
    output_path: Path
    files_read: int = 0
    events_included: int = 0
    payload: Optional[MetricsPayload] = None


def run_sync(config: DashboardConfig, now: Optional[datetime] = None) -> SyncResult:
    """Aggregate the session logs and publish the metrics payload.

    Args:
        config: Dashboard configuration (source directory, output path)
        now: Processing time, used both for events without a timestamp
            and for ``generatedAt`` (defaults to the current UTC time)

    Returns:
        SyncResult describing what happened

    Raises:
        OSError: If the output location cannot be written
    """
    if not config.sessions_dir.is_dir():
        return SyncResult(
            status=SyncStatus.SKIPPED_NO_SOURCE,
            output_path=config.output_path,
        )

    processing_time = now or datetime.now(timezone.utc)

    files = list_log_files(config.sessions_dir, config.log_suffix)
    result = AggregationResult()
    for file_path in files:
        aggregate_events(read_usage_events(file_path), now=processing_time, result=result)

    completed_at = now or datetime.now(timezone.utc)
    payload = build_payload(result, source=config.source_label, generated_at=completed_at)
    write_payload(payload, config.output_path)

    return SyncResult(
        status=SyncStatus.WRITTEN,
        output_path=config.output_path,
        files_read=len(files),
        events_included=result.totals.calls,
        payload=payload,
    )
