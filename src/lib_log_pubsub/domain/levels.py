"""Log level abstraction shared by hooks, formatters, and the stdlib bridge.

Purpose
-------
Offer the six severities a forwarding hook can subscribe to, together with the
conversions needed to accept records from the stdlib :mod:`logging` module.

Contents
--------
* :class:`LogLevel` enum with name and stdlib conversion helpers.

System Role
-----------
Hooks declare their interest set in terms of :class:`LogLevel`; the hook chain
uses it as the dispatch key and the JSON formatter renders :attr:`severity`.
"""

from __future__ import annotations

import logging
from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels, ordered by numeric severity."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50
    PANIC = 60

    @property
    def severity(self) -> str:
        """Return the lowercase severity name for structured logging payloads."""

        return self.name.lower()

    def to_python_level(self) -> int:
        """Return the :mod:`logging` constant closest to this level.

        ``FATAL`` and ``PANIC`` both collapse onto ``logging.CRITICAL`` plus an
        offset so round-tripping through :meth:`from_python_level` is stable.

        Examples
        --------
        >>> LogLevel.WARNING.to_python_level() == logging.WARNING
        True
        >>> LogLevel.FATAL.to_python_level() == logging.CRITICAL
        True
        """

        if self is LogLevel.PANIC:
            return logging.CRITICAL + 10
        if self is LogLevel.FATAL:
            return logging.CRITICAL
        return getattr(logging, self.name)

    @classmethod
    def descending(cls) -> tuple["LogLevel", ...]:
        """Return every level from most to least severe."""

        return tuple(sorted(cls, key=lambda level: level.value, reverse=True))

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Translate a stdlib logging level integer into :class:`LogLevel`.

        Custom numeric levels round down to the nearest known level; anything
        below ``DEBUG`` counts as ``DEBUG`` and anything above ``CRITICAL``
        counts as ``PANIC``.

        Examples
        --------
        >>> LogLevel.from_python_level(logging.CRITICAL)
        <LogLevel.FATAL: 50>
        >>> LogLevel.from_python_level(25)
        <LogLevel.INFO: 20>
        >>> LogLevel.from_python_level(5)
        <LogLevel.DEBUG: 10>
        """

        if level > logging.CRITICAL:
            return cls.PANIC
        for candidate in cls.descending():
            if level >= candidate.value:
                return candidate
        return cls.DEBUG


_ALIASES = {
    "WARN": "WARNING",
    "CRITICAL": "FATAL",
}
# Names accepted by :meth:`LogLevel.from_name` in addition to the member names.


__all__ = ["LogLevel"]
