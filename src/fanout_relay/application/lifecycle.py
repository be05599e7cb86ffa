"""Attach/detach transitions for a single connection."""

from __future__ import annotations

import logging

from fanout_relay.application.registry import ConnectionRegistry
from fanout_relay.domain.events import InboundEvent

logger = logging.getLogger("fanout_relay.lifecycle")


class ConnectionLifecycle:
    """Moves connections between ``absent`` and ``attached``."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    def attach(self, connection_id: str) -> None:
        self._registry.add(connection_id)
        logger.info("connection attached", extra={"data": {"connection_id": connection_id}})

    def detach(self, connection_id: str) -> None:
        self._registry.remove(connection_id)
        logger.info("connection detached", extra={"data": {"connection_id": connection_id}})

    def unrecognized(self, event: InboundEvent, action: str) -> None:
        """Report an event whose action is not understood; the registry is left alone."""
        logger.warning(
            "unrecognized action ignored",
            extra={
                "data": {
                    "connection_id": event.connection_id,
                    "event_type": event.event_type.value,
                    "action": action,
                }
            },
        )


__all__ = ["ConnectionLifecycle"]
