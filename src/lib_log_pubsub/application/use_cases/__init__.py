"""Use cases: the forwarding hook and the chain that fires it."""

from __future__ import annotations

from .forward import FieldGenerator, LogForwarder
from .hook_chain import HookChain, report_to_stderr

__all__ = ["FieldGenerator", "HookChain", "LogForwarder", "report_to_stderr"]
