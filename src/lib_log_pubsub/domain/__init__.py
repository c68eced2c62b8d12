"""Domain entities and value objects used by the forwarding hooks."""

from __future__ import annotations

from .entry import LogEntry
from .errors import (
    ConfigurationError,
    ForwarderError,
    PublishError,
    SerializationError,
    TransportUnavailable,
)
from .levels import LogLevel

__all__ = [
    "ConfigurationError",
    "ForwarderError",
    "LogEntry",
    "LogLevel",
    "PublishError",
    "SerializationError",
    "TransportUnavailable",
]
