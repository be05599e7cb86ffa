"""Routes gateway events to lifecycle and broadcast handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fanout_relay.application.dispatcher import BroadcastDispatcher
from fanout_relay.application.lifecycle import ConnectionLifecycle
from fanout_relay.application.message_codec import parse_message
from fanout_relay.domain.events import InboundEvent, TransportEventType
from fanout_relay.domain.message import MessageAction
from fanout_relay.errors import MalformedPayloadError, StorageUnavailableError

logger = logging.getLogger("fanout_relay.router")

STATUS_OK = 200
STATUS_BAD_REQUEST = 400
STATUS_SERVER_ERROR = 500


@dataclass(frozen=True, slots=True)
class RelayResponse:
    """Status returned to the gateway for one event."""

    status_code: int
    detail: str | None = None


class EventRouter:
    """Selects exactly one handler per event.

    The gateway event type is matched first; only ``MESSAGE`` events consult
    the body ``action``.
    """

    def __init__(self, lifecycle: ConnectionLifecycle, dispatcher: BroadcastDispatcher) -> None:
        self._lifecycle = lifecycle
        self._dispatcher = dispatcher

    def handle(self, event: InboundEvent) -> RelayResponse:
        logger.info(
            "event received",
            extra={
                "data": {
                    "event_type": event.event_type.value,
                    "connection_id": event.connection_id,
                }
            },
        )
        try:
            self._route(event)
        except MalformedPayloadError as exc:
            logger.warning(
                "rejected malformed message body",
                extra={"data": {"connection_id": event.connection_id, "error": str(exc)}},
            )
            return RelayResponse(STATUS_BAD_REQUEST, str(exc))
        except StorageUnavailableError as exc:
            logger.error(
                "connection store unavailable",
                extra={"data": {"connection_id": event.connection_id, "error": str(exc)}},
            )
            return RelayResponse(STATUS_SERVER_ERROR, str(exc))
        return RelayResponse(STATUS_OK)

    def _route(self, event: InboundEvent) -> None:
        match event.event_type:
            case TransportEventType.CONNECT:
                self._lifecycle.attach(event.connection_id)
            case TransportEventType.DISCONNECT:
                self._lifecycle.detach(event.connection_id)
            case TransportEventType.MESSAGE:
                self._route_message(event)

    def _route_message(self, event: InboundEvent) -> None:
        message = parse_message(event.body)
        match MessageAction.from_wire(message.action):
            case MessageAction.ATTACH:
                self._lifecycle.attach(event.connection_id)
            case MessageAction.PUBLISH:
                self._dispatcher.publish_message(event.connection_id, message)
            case MessageAction.DETACH:
                self._lifecycle.detach(event.connection_id)
            case MessageAction.UNKNOWN:
                self._lifecycle.unrecognized(event, message.action)


__all__ = [
    "STATUS_BAD_REQUEST",
    "STATUS_OK",
    "STATUS_SERVER_ERROR",
    "EventRouter",
    "RelayResponse",
]
