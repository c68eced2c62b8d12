"""Mutable log entry handed from the logging facility to its hooks.

Purpose
-------
Represent a single structured log record while it travels through the hook
chain. Unlike most value objects in this package the entry is deliberately
mutable: hooks enrich :attr:`LogEntry.fields` in place and hooks invoked later
in the same chain observe those changes.

Contents
--------
* :class:`LogEntry` dataclass.
* Utility function ``_ensure_aware`` for timestamp validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .levels import LogLevel


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, eq=False)
class LogEntry:
    """Structured log record borrowed by hooks during a single fire call.

    Attributes
    ----------
    level:
        :class:`LogLevel` severity associated with the entry.
    message:
        Rendered message passed by the caller.
    fields:
        Key/value payload. Hooks may add or overwrite keys; the same mapping
        object is shared by every hook in the chain.
    timestamp:
        Time of the entry in timezone-aware UTC.
    logger_name:
        Logical logger emitting the entry.

    Examples
    --------
    >>> entry = LogEntry(LogLevel.INFO, "hello", {"user": "ada"})
    >>> entry.fields["env"] = "prod"
    >>> sorted(entry.fields)
    ['env', 'user']
    """

    level: LogLevel
    message: str
    fields: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)
    logger_name: str = "root"

    def __post_init__(self) -> None:
        self.timestamp = _ensure_aware(self.timestamp)


__all__ = ["LogEntry"]
