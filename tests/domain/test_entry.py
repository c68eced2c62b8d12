from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lib_log_pubsub.domain.entry import LogEntry
from lib_log_pubsub.domain.levels import LogLevel


def test_timestamp_defaults_to_aware_utc_now() -> None:
    before = datetime.now(timezone.utc)
    entry = LogEntry(LogLevel.INFO, "msg")
    after = datetime.now(timezone.utc)
    assert before <= entry.timestamp <= after
    assert entry.timestamp.tzinfo is timezone.utc


def test_timestamp_is_normalised_to_utc() -> None:
    local = datetime(2025, 9, 23, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    entry = LogEntry(LogLevel.INFO, "msg", timestamp=local)
    assert entry.timestamp == datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)
    assert entry.timestamp.tzinfo is timezone.utc


def test_naive_timestamp_is_rejected() -> None:
    with pytest.raises(ValueError, match="timezone-aware"):
        LogEntry(LogLevel.INFO, "msg", timestamp=datetime(2025, 9, 23, 12, 0))


def test_fields_are_mutable_in_place() -> None:
    fields = {"user": "ada"}
    entry = LogEntry(LogLevel.INFO, "msg", fields)
    entry.fields["env"] = "prod"
    assert fields == {"user": "ada", "env": "prod"}


def test_default_fields_are_not_shared_between_entries() -> None:
    first = LogEntry(LogLevel.INFO, "one")
    second = LogEntry(LogLevel.INFO, "two")
    first.fields["x"] = "1"
    assert second.fields == {}
