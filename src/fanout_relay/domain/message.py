"""Broadcast message primitives."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum


class MessageAction(str, Enum):
    """Application-level actions carried in a message body."""

    ATTACH = "attach"
    PUBLISH = "publish"
    DETACH = "detach"
    UNKNOWN = "unknown"

    @classmethod
    def from_wire(cls, value: str | None) -> MessageAction:
        """Resolve a body ``action`` string, falling back to ``UNKNOWN``."""
        if not value:
            return cls.UNKNOWN
        return _ACTION_ALIASES.get(value, cls.UNKNOWN)


# Legacy clients send the gateway route names connect/message/disconnect.
_ACTION_ALIASES: dict[str, MessageAction] = {
    "attach": MessageAction.ATTACH,
    "publish": MessageAction.PUBLISH,
    "detach": MessageAction.DETACH,
    "connect": MessageAction.ATTACH,
    "message": MessageAction.PUBLISH,
    "disconnect": MessageAction.DETACH,
}


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as second-precision RFC 3339 in UTC."""
    if moment.tzinfo is None:
        raise ValueError("timestamp must be timezone-aware")
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True, slots=True)
class Message:
    """A published payload, alive for the duration of one dispatch."""

    action: str = ""
    sender_connection_id: str = ""
    content: str = ""
    timestamp: str = ""

    def stamped(self, *, sender_connection_id: str, received_at: datetime) -> Message:
        """Return a copy carrying the true sender and the receipt time."""
        return replace(
            self,
            sender_connection_id=sender_connection_id,
            timestamp=format_timestamp(received_at),
        )


__all__ = ["Message", "MessageAction", "format_timestamp"]
