"""
Unit tests for the metrics payload.

Tests ordering, document shape, persistence and parsing.
"""

import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from usage_dashboard.core.aggregation import aggregate_events
from usage_dashboard.core.events import UsageEvent
from usage_dashboard.storage.payload import (
    PayloadError,
    build_payload,
    dump_payload,
    format_timestamp,
    load_payload,
    parse_payload,
    payload_from_dict,
    payload_to_dict,
    write_payload,
)

GENERATED = datetime(2026, 2, 23, 7, 30, 15, 123456, tzinfo=timezone.utc)


def _result(events):
    return aggregate_events(events, now=GENERATED)


def _scenario():
    return _result([
        UsageEvent(model="anthropic/claude-3", cost=1.5, timestamp="2026-02-20T09:00:00Z"),
        UsageEvent(model="openai/gpt-4", cost=2.25, timestamp="2026-02-20T11:00:00Z"),
    ])


class TestFormatTimestamp:
    """Test generatedAt formatting."""

    def test_utc_with_milliseconds(self):
        """Verify ISO-8601 with millisecond precision and Z suffix."""
        assert format_timestamp(GENERATED) == "2026-02-23T07:30:15.123Z"

    def test_naive_is_treated_as_utc(self):
        """Verify naive datetimes are read as UTC."""
        assert format_timestamp(datetime(2026, 1, 1)) == "2026-01-01T00:00:00.000Z"


class TestBuildPayload:
    """Test payload ordering."""

    def test_scenario_models_sorted_by_cost(self):
        """Verify the costlier model comes first."""
        payload = build_payload(_scenario(), source="test", generated_at=GENERATED)

        assert [m.model for m in payload.models] == ["openai/gpt-4", "anthropic/claude-3"]
        assert [m.provider for m in payload.models] == ["OpenAI", "Anthropic"]
        assert len(payload.daily) == 1
        assert payload.daily[0].cost == pytest.approx(3.75)
        assert payload.generated_at == "2026-02-23T07:30:15.123Z"
        assert payload.source == "test"

    def test_daily_sorted_ascending(self):
        """Verify days are ordered by date string."""
        result = _result([
            UsageEvent(model="m", cost=1, timestamp="2026-03-01T00:00:00Z"),
            UsageEvent(model="m", cost=1, timestamp="2026-02-28T00:00:00Z"),
            UsageEvent(model="m", cost=1, timestamp="2025-12-31T00:00:00Z"),
        ])

        dates = [d.date for d in build_payload(result, "s", GENERATED).daily]

        assert dates == ["2025-12-31", "2026-02-28", "2026-03-01"]

    def test_cost_ties_keep_discovery_order(self):
        """Verify equal costs stay in first-seen order."""
        result = _result([
            UsageEvent(model="first", cost=1, timestamp="2026-02-20"),
            UsageEvent(model="big", cost=5, timestamp="2026-02-20"),
            UsageEvent(model="second", cost=1, timestamp="2026-02-20"),
            UsageEvent(model="third", cost=1, timestamp="2026-02-20"),
        ])

        models = [m.model for m in build_payload(result, "s", GENERATED).models]

        assert models == ["big", "first", "second", "third"]


class TestDocument:
    """Test the serialized document."""

    def test_document_shape_and_key_order(self):
        """Verify field names and their order."""
        document = payload_to_dict(build_payload(_scenario(), "src", GENERATED))

        assert list(document) == ["generatedAt", "source", "totals", "daily", "models"]
        assert list(document["totals"]) == [
            "calls", "inputTokens", "outputTokens", "cacheRead", "cacheWrite", "totalTokens", "cost",
        ]
        assert list(document["daily"][0]) == [
            "date", "calls", "inputTokens", "outputTokens", "totalTokens", "cost",
        ]
        assert list(document["models"][0]) == [
            "model", "provider", "calls", "inputTokens", "outputTokens", "totalTokens", "cost",
        ]
        assert document["totals"]["calls"] == 2
        assert document["totals"]["cost"] == pytest.approx(3.75)

    def test_dump_is_pretty_printed(self):
        """Verify two-space indentation."""
        text = dump_payload(build_payload(_scenario(), "src", GENERATED))
        assert text.startswith('{\n  "generatedAt": ')

    def test_write_creates_directories_and_overwrites(self):
        """Verify the document is written and replaced."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "public" / "nested" / "metrics.json"
            path.parent.mkdir(parents=True)
            path.write_text('{"stale": true, "padding": "' + "x" * 5000 + '"}', encoding='utf-8')

            payload = build_payload(_scenario(), "src", GENERATED)
            written = write_payload(payload, path)

            assert written == path
            assert json.loads(path.read_text(encoding='utf-8')) == payload_to_dict(payload)

    def test_write_missing_parent(self):
        """Verify missing parent directories are created."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "a" / "b" / "metrics.json"
            write_payload(build_payload(_result([]), "src", GENERATED), path)
            assert path.exists()


class TestParsePayload:
    """Test reading documents back for the dashboard."""

    def test_load_matches_written(self):
        """Verify a written document loads to an equal payload."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "metrics.json"
            payload = build_payload(_scenario(), "src", GENERATED)
            write_payload(payload, path)

            assert load_payload(path) == payload

    def test_numeric_fields_are_coerced(self):
        """Verify odd numeric values degrade to zero."""
        payload = payload_from_dict({
            "generatedAt": "2026-02-23T00:00:00.000Z",
            "source": "s",
            "totals": {"calls": "3", "cost": None},
            "daily": [{"date": "2026-02-20", "cost": "abc"}],
            "models": [{"model": "m", "provider": "Other", "cost": "1.25"}],
        })

        assert payload.totals.calls == 3
        assert payload.totals.cost == 0
        assert payload.daily[0].cost == 0
        assert payload.models[0].cost == 1.25

    @pytest.mark.parametrize("data", [
        [],
        {"totals": {}, "daily": []},
        {"totals": [], "daily": [], "models": []},
        {"totals": {}, "daily": ["x"], "models": []},
        {"totals": {}, "daily": [], "models": [1]},
    ])
    def test_wrong_shape_raises(self, data):
        """Verify malformed documents are rejected."""
        with pytest.raises(PayloadError):
            payload_from_dict(data)

    def test_invalid_json_raises(self):
        """Verify non-JSON bodies are rejected."""
        with pytest.raises(PayloadError, match="not valid JSON"):
            parse_payload("<html>oops</html>")

    def test_deeply_nested_body_raises(self):
        """Verify a body too deeply nested to decode is rejected."""
        with pytest.raises(PayloadError, match="not valid JSON"):
            parse_payload("[" * 200000)
