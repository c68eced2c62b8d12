"""JSON formatter turning enriched log entries into publishable bytes.

Purpose
-------
Provide the default :class:`FormatterPort` used by
:class:`~lib_log_pubsub.application.use_cases.forward.LogForwarder`. The
layout puts every entry field at the top level next to ``time``, ``msg`` and
``level`` so log collectors can index fields without unpacking a nested
object.

Contents
--------
* :class:`JsonFormatter` - deterministic JSON-lines renderer.
* ``_RESERVED_KEYS`` - keys owned by the formatter.
"""

from __future__ import annotations

import json
from typing import Any

from lib_log_pubsub.application.ports.formatter import FormatterPort
from lib_log_pubsub.domain.entry import LogEntry
from lib_log_pubsub.domain.errors import SerializationError

_RESERVED_KEYS = ("time", "msg", "level")
#: Keys written by the formatter itself; clashing fields move to ``fields.<key>``.


class JsonFormatter(FormatterPort):
    """Render entries as one UTF-8 JSON object per line."""

    def __init__(self, *, timestamp_format: str | None = None, data_key: str | None = None) -> None:
        """Configure the optional ``strftime`` layout and nesting key.

        Parameters
        ----------
        timestamp_format:
            ``strftime`` pattern for ``time``; ISO-8601 when ``None``.
        data_key:
            When set, entry fields are nested under this key instead of being
            merged into the top-level object.
        """
        self._timestamp_format = timestamp_format
        self._data_key = data_key

    def format(self, entry: LogEntry) -> bytes:
        """Serialise ``entry``.

        Raises
        ------
        SerializationError
            When a field value has no JSON representation.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> from lib_log_pubsub.domain.levels import LogLevel
        >>> entry = LogEntry(LogLevel.INFO, "hi", {"env": "prod", "msg": "x"},
        ...                  timestamp=datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        >>> JsonFormatter().format(entry)
        b'{"env": "prod", "fields.msg": "x", "level": "info", "msg": "hi", "time": "2025-01-02T03:04:05+00:00"}\\n'
        """
        data = self._build_fields(entry)
        data["time"] = self._format_timestamp(entry)
        data["msg"] = entry.message
        data["level"] = entry.level.severity
        try:
            rendered = json.dumps(data, sort_keys=True, allow_nan=False, ensure_ascii=False)
            return (rendered + "\n").encode("utf-8")
        except (TypeError, ValueError, RecursionError) as exc:
            raise SerializationError(f"Failed to marshal fields to JSON: {exc}") from exc

    def _build_fields(self, entry: LogEntry) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, value in entry.fields.items():
            fields[key] = str(value) if isinstance(value, BaseException) else value

        if self._data_key:
            return {self._data_key: fields}

        for reserved in _RESERVED_KEYS:
            if reserved in fields:
                fields[f"fields.{reserved}"] = fields.pop(reserved)
        return fields

    def _format_timestamp(self, entry: LogEntry) -> str:
        if self._timestamp_format:
            return entry.timestamp.strftime(self._timestamp_format)
        return entry.timestamp.isoformat()


__all__ = ["JsonFormatter"]
