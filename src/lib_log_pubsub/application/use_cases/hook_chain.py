"""Per-level hook registry invoked for every log entry.

Purpose
-------
Play the role of the logging facility's hook mechanism: hooks are registered
once, indexed by the levels they declare, and fired synchronously for every
entry of a matching level.

Contents
--------
* :class:`HookChain` - registry plus dispatch.
* :func:`report_to_stderr` - default diagnostic for failing hooks.

System Role
-----------
Used by :class:`~lib_log_pubsub.adapters.stdlib_bridge.ForwardingHandler` and
by :func:`lib_log_pubsub.runtime.install_forwarder`. A failing hook never
stops the chain and never propagates into application code.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable

from lib_log_pubsub.application.ports import HookPort
from lib_log_pubsub.domain import LogEntry, LogLevel

HookErrorCallback = Callable[[HookPort, LogEntry, Exception], None]


def report_to_stderr(hook: HookPort, entry: LogEntry, exc: Exception) -> None:
    """Write a single diagnostic line for a failed hook to ``sys.stderr``.

    Logging the failure through :mod:`logging` could feed it straight back
    into the failing hook, so the message bypasses the logging system.
    """

    sys.stderr.write(f"Failed to fire hook: {exc}\n")


class HookChain:
    """Dispatch entries to the hooks registered for their level.

    The levels of a hook are read once, when it is added. Changing the
    interest set of a registered hook afterwards requires removing and
    adding it again.

    Examples
    --------
    >>> class Recorder:
    ...     def __init__(self):
    ...         self.seen = []
    ...     def levels(self):
    ...         return (LogLevel.ERROR,)
    ...     def fire(self, entry):
    ...         self.seen.append(entry.message)
    >>> chain = HookChain()
    >>> recorder = Recorder()
    >>> chain.add(recorder)
    >>> chain.fire(LogEntry(LogLevel.INFO, "ignored"))
    ()
    >>> chain.fire(LogEntry(LogLevel.ERROR, "boom"))
    ()
    >>> recorder.seen
    ['boom']
    """

    def __init__(self, *, on_error: HookErrorCallback | None = None) -> None:
        self._hooks: dict[LogLevel, tuple[HookPort, ...]] = {}
        self._lock = threading.Lock()
        self._on_error = on_error or report_to_stderr

    def add(self, hook: HookPort) -> None:
        """Register ``hook`` under every level it reports."""
        with self._lock:
            for level in hook.levels():
                self._hooks[level] = self._hooks.get(level, ()) + (hook,)

    def remove(self, hook: HookPort) -> None:
        """Unregister ``hook`` from every level; unknown hooks are ignored."""
        with self._lock:
            for level, hooks in list(self._hooks.items()):
                remaining = tuple(item for item in hooks if item is not hook)
                if remaining:
                    self._hooks[level] = remaining
                else:
                    del self._hooks[level]

    def clear(self) -> None:
        with self._lock:
            self._hooks.clear()

    def hooks_for(self, level: LogLevel) -> tuple[HookPort, ...]:
        with self._lock:
            return self._hooks.get(level, ())

    def wants(self, level: LogLevel) -> bool:
        """Return ``True`` when at least one hook listens on ``level``."""
        return bool(self.hooks_for(level))

    def fire(self, entry: LogEntry) -> tuple[Exception, ...]:
        """Fire every hook registered for ``entry.level`` in registration order.

        Returns
        -------
        tuple[Exception, ...]
            Errors raised by hooks, already reported through ``on_error``.
        """
        failures: list[Exception] = []
        for hook in self.hooks_for(entry.level):
            try:
                hook.fire(entry)
            except Exception as exc:
                failures.append(exc)
                self._on_error(hook, entry, exc)
        return tuple(failures)


__all__ = ["HookChain", "HookErrorCallback", "report_to_stderr"]
