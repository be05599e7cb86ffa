"""Connection records tracked by the registry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Connection:
    """One attached client, keyed by the gateway-assigned connection id."""

    connection_id: str
    connected_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.connection_id:
            raise ValueError("connection_id must be a non-empty string")


__all__ = ["Connection"]
