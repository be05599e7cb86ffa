"""Connection registry use case backed by a durable store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from fanout_relay.application.ports.connection_store import ConnectionStorePort
from fanout_relay.domain.connection import Connection

logger = logging.getLogger("fanout_relay.registry")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionRegistry:
    """Tracks the set of currently attached connection ids.

    Store failures surface as ``StorageUnavailableError`` and are not retried.
    """

    def __init__(
        self,
        store: ConnectionStorePort,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    def add(self, connection_id: str) -> Connection:
        """Upsert the record for ``connection_id``; re-adding overwrites."""
        connection = Connection(connection_id=connection_id, connected_at=self._clock())
        self._store.put(connection)
        logger.debug("connection stored", extra={"data": {"connection_id": connection_id}})
        return connection

    def remove(self, connection_id: str) -> None:
        """Delete the record for ``connection_id``; absent ids are ignored."""
        self._store.delete(connection_id)
        logger.debug("connection removed", extra={"data": {"connection_id": connection_id}})

    def list_all(self) -> tuple[str, ...]:
        """Return a snapshot of every attached connection id, in no particular order."""
        return tuple(connection.connection_id for connection in self._store.scan())


__all__ = ["ConnectionRegistry"]
