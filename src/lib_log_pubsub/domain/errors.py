"""Error hierarchy raised while configuring or firing forwarding hooks."""

from __future__ import annotations


class ForwarderError(Exception):
    """Base class for every failure reported by the forwarding pipeline."""


class ConfigurationError(ForwarderError, ValueError):
    """Raised when a forwarder or its settings cannot be built.

    Subclasses :class:`ValueError` so callers validating settings the usual
    way keep working.
    """


class TransportUnavailable(ForwarderError):
    """Raised when the transport reports it is closed or not connected."""


class SerializationError(ForwarderError):
    """Raised when an enriched entry cannot be turned into a payload."""


class PublishError(ForwarderError):
    """Raised when the transport rejects or fails a publish attempt."""


__all__ = [
    "ConfigurationError",
    "ForwarderError",
    "PublishError",
    "SerializationError",
    "TransportUnavailable",
]
