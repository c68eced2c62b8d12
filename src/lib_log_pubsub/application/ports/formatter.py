"""Port for serialising log entries into transport-ready payloads."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_pubsub.domain.entry import LogEntry


@runtime_checkable
class FormatterPort(Protocol):
    """Turn an entry into bytes; must be deterministic for a given entry."""

    def format(self, entry: LogEntry) -> bytes: ...


__all__ = ["FormatterPort"]
