# usage_dashboard/demo/seed_demo_data.py

import json
from pathlib import Path
from typing import Union

from usage_dashboard.core.events import UsageEvent, event_to_record

DEMO_FILE_NAME = "demo-session.jsonl"

DEMO_EVENTS = [
    UsageEvent(
        timestamp="2026-02-20T09:12:44.120Z",
        model="anthropic/claude-sonnet-4",
        input_tokens=12400,
        output_tokens=2210,
        cache_read=8000,
        cache_write=1200,
        total_tokens=23810,
        cost=0.0841,
    ),
    UsageEvent(
        timestamp="2026-02-20T10:03:10.004Z",
        model="openai/gpt-4.1",
        input_tokens=3200,
        output_tokens=880,
        total_tokens=4080,
        cost=0.0134,
    ),
    UsageEvent(
        timestamp="2026-02-21T16:47:31.778Z",
        model="openai-codex/gpt-5-codex",
        input_tokens=42000,
        output_tokens=5100,
        cache_read=30000,
        total_tokens=77100,
        cost=0.1275,
    ),
    UsageEvent(
        timestamp="2026-02-22T08:15:02.310Z",
        model="google/gemini-2.5-pro",
        input_tokens=9100,
        output_tokens=1400,
        total_tokens=10500,
        cost=0.0254,
    ),
]


def write_demo_sessions(directory: Union[str, Path]) -> Path:
    """Write a sample session log, including one truncated line."""
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    path = target / DEMO_FILE_NAME

    lines = [json.dumps({"type": "session", "timestamp": "2026-02-20T09:12:00.000Z"})]
    lines.extend(json.dumps(event_to_record(event)) for event in DEMO_EVENTS)
    lines.append('{"type": "message", "message": {"usage": ')
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
