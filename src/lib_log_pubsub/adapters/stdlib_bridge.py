"""Bridge from the stdlib :mod:`logging` module into a :class:`HookChain`.

Purpose
-------
Let applications keep calling ``logging.getLogger(...).info(...)`` while the
records are fanned out to forwarding hooks.

Contents
--------
* :class:`ForwardingHandler` - ``logging.Handler`` building :class:`LogEntry`
  objects from records.
* ``_STANDARD_RECORD_ATTRS`` - attributes every ``LogRecord`` carries.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

from lib_log_pubsub.application.use_cases.hook_chain import HookChain
from lib_log_pubsub.domain.entry import LogEntry
from lib_log_pubsub.domain.levels import LogLevel

ERROR_KEY = "error"
#: Field receiving the formatted exception when a record carries ``exc_info``.

_STANDARD_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
}


class ForwardingHandler(logging.Handler):
    """Convert log records to entries and fire the chain's hooks.

    Records logged on a thread that is already inside :meth:`emit` (for
    example a transport logging about its own publish) are dropped, otherwise
    they would loop back into the same hooks.
    """

    def __init__(self, chain: HookChain, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.chain = chain
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "active", False):
            return
        self._local.active = True
        try:
            level = LogLevel.from_python_level(record.levelno)
            if not self.chain.wants(level):
                return
            self.chain.fire(self.build_entry(record, level))
        except Exception:
            self.handleError(record)
        finally:
            self._local.active = False

    def build_entry(self, record: logging.LogRecord, level: LogLevel | None = None) -> LogEntry:
        """Return the :class:`LogEntry` equivalent of ``record``.

        Examples
        --------
        >>> record = logging.LogRecord("app", logging.WARNING, __file__, 1, "disk %s%%", (91,), None)
        >>> record.tenant = "acme"
        >>> entry = ForwardingHandler(HookChain()).build_entry(record)
        >>> entry.level, entry.message, entry.fields
        (<LogLevel.WARNING: 30>, 'disk 91%', {'tenant': 'acme'})
        """
        fields: dict[str, Any] = {
            key: value for key, value in record.__dict__.items() if key not in _STANDARD_RECORD_ATTRS
        }
        if record.exc_info:
            formatter = self.formatter or logging.Formatter()
            fields[ERROR_KEY] = formatter.formatException(record.exc_info)
        return LogEntry(
            level=level or LogLevel.from_python_level(record.levelno),
            message=record.getMessage(),
            fields=fields,
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            logger_name=record.name,
        )


__all__ = ["ERROR_KEY", "ForwardingHandler"]
