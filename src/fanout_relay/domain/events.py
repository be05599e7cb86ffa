"""Inbound gateway events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TransportEventType(str, Enum):
    """Event types signalled by the WebSocket gateway itself."""

    CONNECT = "CONNECT"
    DISCONNECT = "DISCONNECT"
    MESSAGE = "MESSAGE"


@dataclass(frozen=True, slots=True)
class InboundEvent:
    """One event delivered by the gateway for a single connection."""

    event_type: TransportEventType
    connection_id: str
    body: str | None = None

    def __post_init__(self) -> None:
        if not self.connection_id:
            raise ValueError("connection_id must be a non-empty string")


__all__ = ["InboundEvent", "TransportEventType"]
