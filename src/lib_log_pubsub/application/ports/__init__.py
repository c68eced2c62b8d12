"""Application-layer ports (Protocols) implemented by adapters."""

from __future__ import annotations

from .formatter import FormatterPort
from .hook import HookPort
from .transport import TransportPort

__all__ = ["FormatterPort", "HookPort", "TransportPort"]
