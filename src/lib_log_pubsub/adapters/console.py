"""Rich-powered transport that prints payloads instead of publishing them.

Used by the ``demo`` CLI command and handy as a dry-run sink while wiring a
new service: every publish renders ``subject payload`` on a Rich console.
"""

from __future__ import annotations

import threading

from rich.console import Console
from rich.text import Text

from lib_log_pubsub.application.ports.transport import TransportPort


class RichConsoleTransport(TransportPort):
    """Render published payloads on a :class:`rich.console.Console`.

    Examples
    --------
    >>> from io import StringIO
    >>> console = Console(file=StringIO(), record=True, width=120)
    >>> transport = RichConsoleTransport(console=console)
    >>> transport.publish("logs.app", b'{"msg": "hi"}\\n')
    >>> "logs.app" in console.export_text()
    True
    >>> transport.close()
    >>> transport.is_closed()
    True
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        subject_style: str = "bold cyan",
    ) -> None:
        if console is not None:
            self._console = console
        else:
            self._console = Console(force_terminal=force_color, no_color=no_color)
        self._subject_style = subject_style
        self._closed = threading.Event()
        self.published = 0

    def is_closed(self) -> bool:
        return self._closed.is_set()

    def publish(self, subject: str, payload: bytes) -> None:
        line = Text()
        line.append(subject, style=self._subject_style)
        line.append(" ")
        line.append(payload.decode("utf-8", errors="replace").rstrip("\n"))
        self._console.print(line, highlight=False, soft_wrap=True)
        self.published += 1

    def close(self) -> None:
        self._closed.set()


__all__ = ["RichConsoleTransport"]
