"""DTOs describing the outcome of a broadcast."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fanout_relay.domain.message import Message


class DeliveryStatus(str, Enum):
    """Result of a single delivery attempt."""

    DELIVERED = "delivered"
    GONE = "gone"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """Per-recipient record produced during fan-out."""

    connection_id: str
    status: DeliveryStatus
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


@dataclass(frozen=True, slots=True)
class FanoutReport:
    """Aggregate of one publish; never used to fail the publish itself."""

    message: Message
    outcomes: tuple[DeliveryOutcome, ...]
    pruned: tuple[str, ...] = ()

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def delivered(self) -> tuple[str, ...]:
        return tuple(outcome.connection_id for outcome in self.outcomes if outcome.ok)

    @property
    def failures(self) -> tuple[DeliveryOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)


__all__ = ["DeliveryOutcome", "DeliveryStatus", "FanoutReport"]
