"""Hook that enriches log entries and publishes them onto a pub/sub subject.

Purpose
-------
Republish structured log entries to a central collector. The forwarder is
registered into a :class:`~lib_log_pubsub.application.use_cases.hook_chain.HookChain`
and is fired synchronously, on the emitting thread, for every entry whose
level it is interested in.

Contents
--------
* :class:`LogForwarder` - the :class:`HookPort` implementation.

System Role
-----------
Sits between the logging facility and the transport. It owns the enrichment
fields and the destination subject; the transport and the entry are borrowed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from lib_log_pubsub.application.ports import FormatterPort, HookPort, TransportPort
from lib_log_pubsub.domain import (
    ConfigurationError,
    LogEntry,
    LogLevel,
    PublishError,
    SerializationError,
    TransportUnavailable,
)

FieldGenerator = Callable[[], str]

logger = logging.getLogger(__name__)


def _default_formatter() -> FormatterPort:
    from lib_log_pubsub.adapters.json_formatter import JsonFormatter

    return JsonFormatter()


class LogForwarder(HookPort):
    """Publish every fired entry, enriched with static and dynamic fields.

    Static and dynamic fields share one namespace: registering a key through
    either method replaces whatever was registered under it before. At fire
    time static fields are written first and dynamic fields second, both
    overwriting fields already present on the entry.

    Field registration is guarded by a lock, so :meth:`add_static_field` and
    :meth:`add_dynamic_field` may be called while other threads are logging.
    Generators run outside the lock and may be invoked concurrently from
    several threads; making them thread-safe is the caller's job.

    Examples
    --------
    >>> class ListTransport:
    ...     def __init__(self):
    ...         self.sent = []
    ...     def is_closed(self):
    ...         return False
    ...     def publish(self, subject, payload):
    ...         self.sent.append((subject, payload))
    >>> transport = ListTransport()
    >>> forwarder = LogForwarder(transport, "logs.app").add_static_field("env", "prod")
    >>> entry = LogEntry(LogLevel.INFO, "started")
    >>> forwarder.fire(entry)
    >>> entry.fields
    {'env': 'prod'}
    >>> transport.sent[0][0]
    'logs.app'
    """

    def __init__(
        self,
        transport: TransportPort,
        subject: str,
        *,
        formatter: FormatterPort | None = None,
    ) -> None:
        """Bind the forwarder to ``transport`` and ``subject``.

        Raises
        ------
        ConfigurationError
            When ``subject`` is empty. The transport is not touched.
        """
        if not subject or not subject.strip():
            raise ConfigurationError("Must provide a subject for the forwarding hook")
        self._transport = transport
        self._subject = subject
        self._formatter = formatter if formatter is not None else _default_formatter()
        self._static_fields: dict[str, str] = {}
        self._dynamic_fields: dict[str, FieldGenerator] = {}
        self._fields_lock = threading.Lock()
        self.log_levels: list[LogLevel] = list(LogLevel.descending())

    @property
    def subject(self) -> str:
        """Destination subject every payload is published to."""
        return self._subject

    def add_static_field(self, key: str, value: str) -> "LogForwarder":
        """Attach ``key=value`` to every forwarded entry."""
        with self._fields_lock:
            self._dynamic_fields.pop(key, None)
            self._static_fields[key] = value
        return self

    def add_dynamic_field(self, key: str, generator: FieldGenerator) -> "LogForwarder":
        """Attach ``key=generator()`` to every forwarded entry.

        ``generator`` is called once per fire, so it can report fire-time
        state such as timestamps, counters or host load.
        """
        with self._fields_lock:
            self._static_fields.pop(key, None)
            self._dynamic_fields[key] = generator
        return self

    def levels(self) -> tuple[LogLevel, ...]:
        """Return a snapshot of the severities this forwarder reacts to."""
        return tuple(self.log_levels)

    def fire(self, entry: LogEntry) -> None:
        """Enrich ``entry`` in place, serialise it, and publish the payload.

        The enrichment is written into ``entry.fields`` and stays there even
        when serialising or publishing fails afterwards; hooks that run later
        in the chain see the enriched fields.

        Raises
        ------
        TransportUnavailable
            The transport reports closed. ``entry`` is left untouched.
        SerializationError
            The formatter could not render the enriched entry.
        PublishError
            The transport rejected the payload. The entry is not retried.
        """
        # Best-effort guard; the transport may still close before publish.
        if self._transport.is_closed():
            raise TransportUnavailable("Attempted to log on a closed connection")

        with self._fields_lock:
            static_fields = dict(self._static_fields)
            dynamic_fields = dict(self._dynamic_fields)

        entry.fields.update(static_fields)
        for key, generator in dynamic_fields.items():
            entry.fields[key] = generator()

        payload = self._serialise(entry)

        try:
            self._transport.publish(self._subject, payload)
        except PublishError:
            raise
        except Exception as exc:
            logger.debug("publish to %s failed: %s", self._subject, exc)
            raise PublishError(f"Failed to publish log entry to {self._subject!r}: {exc}") from exc

    def _serialise(self, entry: LogEntry) -> bytes:
        try:
            return self._formatter.format(entry)
        except SerializationError:
            raise
        except Exception as exc:
            raise SerializationError(f"Failed to serialise log entry: {exc}") from exc


__all__ = ["FieldGenerator", "LogForwarder"]
