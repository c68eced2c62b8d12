"""Adapter implementations for the application ports."""

from __future__ import annotations

from .console import RichConsoleTransport
from .json_formatter import JsonFormatter
from .mqtt import MqttTransport
from .stdlib_bridge import ForwardingHandler

__all__ = ["ForwardingHandler", "JsonFormatter", "MqttTransport", "RichConsoleTransport"]
