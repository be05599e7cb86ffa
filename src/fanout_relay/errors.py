"""Relay-specific exceptions shared across components."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for relay failures."""


class MalformedPayloadError(RelayError, ValueError):
    """Raised when an inbound message body cannot be parsed."""


class StorageUnavailableError(RelayError, RuntimeError):
    """Raised when the connection store cannot be read or written."""


class DeliveryError(RelayError, RuntimeError):
    """Raised when a payload could not be pushed to one connection."""

    def __init__(self, connection_id: str, message: str) -> None:
        super().__init__(message)
        self.connection_id = connection_id


class RecipientGoneError(DeliveryError):
    """Raised when the target connection is no longer reachable."""


__all__ = [
    "DeliveryError",
    "MalformedPayloadError",
    "RecipientGoneError",
    "RelayError",
    "StorageUnavailableError",
]
