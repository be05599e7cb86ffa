"""Durable connection store backed by SQLite.

One table keyed by ``connection_id``. Every backend failure is reported as
``StorageUnavailableError`` so callers never see ``sqlite3`` exceptions.
"""

from __future__ import annotations

import re
import sqlite3
from datetime import datetime
from pathlib import Path

from fanout_relay.application.ports.connection_store import ConnectionStorePort
from fanout_relay.domain.connection import Connection
from fanout_relay.errors import StorageUnavailableError

_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class SqliteConnectionStore(ConnectionStorePort):
    """Connection records persisted in a single SQLite table.

    Parameters
    ----------
    db_path:
        Path to the database file. Parent directories are created.
    table_name:
        Name of the table holding connection records.
    """

    def __init__(self, db_path: Path | str, *, table_name: str = "connections") -> None:
        if not _TABLE_NAME_PATTERN.match(table_name):
            raise ValueError(f"invalid table name: {table_name!r}")
        self._db_path = Path(db_path)
        self._table = table_name
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def table_name(self) -> str:
        return self._table

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=5.0)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        ddl = (
            f"CREATE TABLE IF NOT EXISTS {self._table} ("  # noqa: S608 - validated identifier
            "connection_id TEXT PRIMARY KEY NOT NULL, "
            "connected_at TEXT)"
        )
        self._execute(ddl)

    def _execute(self, sql: str, params: tuple[object, ...] = ()) -> list[tuple[object, ...]]:
        try:
            conn = self._connect()
            try:
                with conn:
                    rows = conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"connection store {self._table} failed: {exc}") from exc
        return rows

    def put(self, connection: Connection) -> None:
        connected_at = connection.connected_at.isoformat() if connection.connected_at else None
        self._execute(
            f"INSERT INTO {self._table} (connection_id, connected_at) VALUES (?, ?) "  # noqa: S608
            "ON CONFLICT(connection_id) DO UPDATE SET connected_at = excluded.connected_at",
            (connection.connection_id, connected_at),
        )

    def delete(self, connection_id: str) -> None:
        self._execute(
            f"DELETE FROM {self._table} WHERE connection_id = ?",  # noqa: S608
            (connection_id,),
        )

    def scan(self) -> tuple[Connection, ...]:
        rows = self._execute(f"SELECT connection_id, connected_at FROM {self._table}")  # noqa: S608
        return tuple(
            Connection(
                connection_id=str(connection_id),
                connected_at=datetime.fromisoformat(str(connected_at)) if connected_at else None,
            )
            for connection_id, connected_at in rows
        )


__all__ = ["SqliteConnectionStore"]
