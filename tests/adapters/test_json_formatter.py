from __future__ import annotations

import json
import math
from datetime import datetime, timezone

import pytest

from lib_log_pubsub.adapters.json_formatter import JsonFormatter
from lib_log_pubsub.domain import LogEntry, LogLevel, SerializationError


@pytest.fixture
def entry() -> LogEntry:
    return LogEntry(
        level=LogLevel.WARNING,
        message="disk almost full",
        fields={"env": "prod", "usage": 0.91},
        timestamp=datetime(2025, 9, 23, 12, 30, tzinfo=timezone.utc),
        logger_name="tests",
    )


def test_payload_is_one_json_line(entry: LogEntry) -> None:
    payload = JsonFormatter().format(entry)
    assert payload.endswith(b"\n")
    assert payload.count(b"\n") == 1
    assert json.loads(payload) == {
        "env": "prod",
        "usage": 0.91,
        "level": "warning",
        "msg": "disk almost full",
        "time": "2025-09-23T12:30:00+00:00",
    }


def test_output_is_deterministic_for_equal_field_sets(entry: LogEntry) -> None:
    reordered = LogEntry(
        level=entry.level,
        message=entry.message,
        fields={"usage": 0.91, "env": "prod"},
        timestamp=entry.timestamp,
    )
    formatter = JsonFormatter()
    assert formatter.format(entry) == formatter.format(reordered)


def test_reserved_keys_are_prefixed(entry: LogEntry) -> None:
    entry.fields.update({"msg": "shadow", "level": "x", "time": "t"})
    payload = json.loads(JsonFormatter().format(entry))
    assert payload["msg"] == "disk almost full"
    assert payload["fields.msg"] == "shadow"
    assert payload["fields.level"] == "x"
    assert payload["fields.time"] == "t"


def test_exceptions_are_rendered_as_text(entry: LogEntry) -> None:
    entry.fields["error"] = ValueError("bad input")
    payload = json.loads(JsonFormatter().format(entry))
    assert payload["error"] == "bad input"


def test_timestamp_format_is_applied(entry: LogEntry) -> None:
    payload = json.loads(JsonFormatter(timestamp_format="%Y-%m-%d %H:%M").format(entry))
    assert payload["time"] == "2025-09-23 12:30"


def test_data_key_nests_fields(entry: LogEntry) -> None:
    entry.fields["msg"] = "shadow"
    payload = json.loads(JsonFormatter(data_key="fields").format(entry))
    assert payload["fields"] == {"env": "prod", "usage": 0.91, "msg": "shadow"}
    assert payload["msg"] == "disk almost full"


def test_unicode_is_encoded_as_utf8(entry: LogEntry) -> None:
    entry.fields["city"] = "Zürich"
    payload = JsonFormatter().format(entry)
    assert "Zürich".encode("utf-8") in payload


@pytest.mark.parametrize("value", [object(), math.nan, {1, 2}])
def test_unrepresentable_values_raise_serialisation_error(entry: LogEntry, value: object) -> None:
    entry.fields["bad"] = value
    with pytest.raises(SerializationError, match="marshal"):
        JsonFormatter().format(entry)


def test_recursion_limit_raises_serialisation_error(entry: LogEntry) -> None:
    nested: list[object] = []
    for _ in range(100_000):
        nested = [nested]
    entry.fields["deep"] = nested

    with pytest.raises(SerializationError, match="marshal") as excinfo:
        JsonFormatter().format(entry)

    assert isinstance(excinfo.value.__cause__, RecursionError)


def test_lone_surrogate_raises_serialisation_error(entry: LogEntry) -> None:
    entry.fields["bad"] = "\ud800"
    with pytest.raises(SerializationError, match="marshal"):
        JsonFormatter().format(entry)
