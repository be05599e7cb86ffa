"""Broadcast use case: stamp a published message and fan it out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from opentelemetry import trace

from fanout_relay.application.dto.fanout import DeliveryOutcome, DeliveryStatus, FanoutReport
from fanout_relay.application.message_codec import encode_message, parse_message
from fanout_relay.application.ports.delivery import DeliveryPort
from fanout_relay.application.registry import ConnectionRegistry
from fanout_relay.domain.message import Message
from fanout_relay.errors import DeliveryError, RecipientGoneError, StorageUnavailableError

logger = logging.getLogger("fanout_relay.dispatch")
_tracer = trace.get_tracer("fanout_relay.dispatch")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BroadcastDispatcher:
    """Delivers each published message to every connection in a registry snapshot.

    Parse and snapshot failures propagate to the caller. Delivery failures are
    recorded per recipient and never fail the publish.

    When ``prune_gone_connections`` is enabled, recipients reported gone are
    removed from the registry once fan-out has finished.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        delivery: DeliveryPort,
        *,
        clock: Callable[[], datetime] = _utcnow,
        prune_gone_connections: bool = False,
    ) -> None:
        self._registry = registry
        self._delivery = delivery
        self._clock = clock
        self._prune_gone_connections = prune_gone_connections

    def publish(self, sender_connection_id: str, raw_body: str | bytes | None) -> FanoutReport:
        """Parse ``raw_body`` and broadcast it on behalf of ``sender_connection_id``.

        Raises
        ------
        MalformedPayloadError
            The body could not be parsed; nothing was read or sent.
        StorageUnavailableError
            The registry snapshot could not be read; nothing was sent.
        """
        return self.publish_message(sender_connection_id, parse_message(raw_body))

    def publish_message(self, sender_connection_id: str, parsed: Message) -> FanoutReport:
        """Stamp an already parsed message and fan it out to the registry snapshot."""
        with _tracer.start_as_current_span("relay.publish") as span:
            span.set_attribute("relay.sender", sender_connection_id)

            message = parsed.stamped(
                sender_connection_id=sender_connection_id,
                received_at=self._clock(),
            )
            recipients = self._registry.list_all()
            payload = encode_message(message)

            outcomes = tuple(self._deliver(connection_id, payload) for connection_id in recipients)
            pruned = self._prune(outcomes) if self._prune_gone_connections else ()
            report = FanoutReport(message=message, outcomes=outcomes, pruned=pruned)

            span.set_attribute("relay.recipients", report.attempted)
            span.set_attribute("relay.failures", len(report.failures))

        logger.info(
            "broadcast fanned out",
            extra={
                "data": {
                    "sender": sender_connection_id,
                    "attempted": report.attempted,
                    "delivered": len(report.delivered),
                    "failed": [outcome.connection_id for outcome in report.failures],
                    "pruned": list(report.pruned),
                }
            },
        )
        return report

    def _deliver(self, connection_id: str, payload: bytes) -> DeliveryOutcome:
        try:
            self._delivery.deliver(connection_id, payload)
        except RecipientGoneError as exc:
            logger.warning(
                "delivery skipped: connection gone",
                extra={"data": {"connection_id": connection_id, "error": str(exc)}},
            )
            return DeliveryOutcome(connection_id, DeliveryStatus.GONE, str(exc))
        except DeliveryError as exc:
            logger.warning(
                "delivery failed",
                extra={"data": {"connection_id": connection_id, "error": str(exc)}},
            )
            return DeliveryOutcome(connection_id, DeliveryStatus.FAILED, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "delivery raised unexpectedly",
                extra={"data": {"connection_id": connection_id}},
            )
            return DeliveryOutcome(connection_id, DeliveryStatus.FAILED, repr(exc))
        return DeliveryOutcome(connection_id, DeliveryStatus.DELIVERED)

    def _prune(self, outcomes: tuple[DeliveryOutcome, ...]) -> tuple[str, ...]:
        pruned: list[str] = []
        for outcome in outcomes:
            if outcome.status is not DeliveryStatus.GONE:
                continue
            try:
                self._registry.remove(outcome.connection_id)
            except StorageUnavailableError as exc:
                logger.warning(
                    "failed to prune gone connection",
                    extra={"data": {"connection_id": outcome.connection_id, "error": str(exc)}},
                )
                continue
            pruned.append(outcome.connection_id)
        return tuple(pruned)


__all__ = ["BroadcastDispatcher"]
