"""Fan structured log entries out to a publish/subscribe broker.

The public surface re-exports the forwarding hook, the hook chain it plugs
into, the error hierarchy, and the one-call installer used at start-up::

    from lib_log_pubsub import install_forwarder, load_settings

    transport, forwarder = install_forwarder(load_settings(subject="logs.app"))
    forwarder.add_dynamic_field("uptime", uptime_seconds)
"""

from __future__ import annotations

from .application.ports import FormatterPort, HookPort, TransportPort
from .application.use_cases import HookChain, LogForwarder
from .config import ForwarderSettings, load_settings
from .domain import (
    ConfigurationError,
    ForwarderError,
    LogEntry,
    LogLevel,
    PublishError,
    SerializationError,
    TransportUnavailable,
)
from .runtime import current_chain, install_forwarder, uninstall

__all__ = [
    "ConfigurationError",
    "FormatterPort",
    "ForwarderError",
    "ForwarderSettings",
    "HookChain",
    "HookPort",
    "LogEntry",
    "LogForwarder",
    "LogLevel",
    "PublishError",
    "SerializationError",
    "TransportPort",
    "TransportUnavailable",
    "current_chain",
    "install_forwarder",
    "load_settings",
    "uninstall",
]
