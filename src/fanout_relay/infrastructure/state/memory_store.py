"""In-memory connection store implementation."""

from __future__ import annotations

from threading import Lock

from fanout_relay.application.ports.connection_store import ConnectionStorePort
from fanout_relay.domain.connection import Connection


class InMemoryConnectionStore(ConnectionStorePort):
    """Stores connection records in memory for the lifetime of the process."""

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._lock = Lock()

    def put(self, connection: Connection) -> None:
        with self._lock:
            self._connections[connection.connection_id] = connection

    def delete(self, connection_id: str) -> None:
        with self._lock:
            self._connections.pop(connection_id, None)

    def scan(self) -> tuple[Connection, ...]:
        with self._lock:
            return tuple(self._connections.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)


__all__ = ["InMemoryConnectionStore"]
