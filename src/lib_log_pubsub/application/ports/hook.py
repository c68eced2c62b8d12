"""Port describing the hook capability a logging facility invokes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from lib_log_pubsub.domain.entry import LogEntry
from lib_log_pubsub.domain.levels import LogLevel


@runtime_checkable
class HookPort(Protocol):
    """Observer fired by the logging facility for qualifying entries."""

    def fire(self, entry: LogEntry) -> None:
        """Handle ``entry``; raise to report a failure.

        Hooks may mutate ``entry.fields`` in place. The same entry object is
        passed to every hook in the chain, so such changes are visible to the
        hooks that run afterwards.
        """

    def levels(self) -> Sequence[LogLevel]:
        """Return the severities this hook wants to receive."""


__all__ = ["HookPort"]
