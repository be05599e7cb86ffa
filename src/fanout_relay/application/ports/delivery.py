"""Port describing the push primitive for a single connection."""

from __future__ import annotations

from typing import Protocol


class DeliveryPort(Protocol):
    """Pushes an encoded payload to one open connection."""

    def deliver(self, connection_id: str, payload: bytes) -> None:
        """Send ``payload`` to ``connection_id``.

        Raises ``RecipientGoneError`` when the connection no longer exists and
        ``DeliveryError`` for any other transport failure.
        """


__all__ = ["DeliveryPort"]
