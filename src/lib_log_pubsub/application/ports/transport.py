"""Port describing the publish/subscribe transport consumed by forwarders."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TransportPort(Protocol):
    """Shared, externally owned connection to a pub/sub broker."""

    def is_closed(self) -> bool:
        """Return ``True`` when the connection cannot currently publish."""

    def publish(self, subject: str, payload: bytes) -> None:
        """Hand ``payload`` to the broker for ``subject``; raise on failure."""


__all__ = ["TransportPort"]
