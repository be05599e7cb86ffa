"""Port describing durable connection storage."""

from __future__ import annotations

from typing import Protocol

from fanout_relay.domain.connection import Connection


class ConnectionStorePort(Protocol):
    """Key-value store holding one record per attached connection.

    Implementations raise ``StorageUnavailableError`` when the backend
    cannot be reached; they never retry internally.
    """

    def put(self, connection: Connection) -> None:
        """Insert or overwrite the record keyed by ``connection.connection_id``."""

    def delete(self, connection_id: str) -> None:
        """Remove the record, if present."""

    def scan(self) -> tuple[Connection, ...]:
        """Return every stored record as a point-in-time snapshot."""


__all__ = ["ConnectionStorePort"]
