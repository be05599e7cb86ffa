"""Pydantic shapes for the relay HTTP API."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fanout_relay.domain.events import InboundEvent, TransportEventType


class RequestContextModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    event_type: TransportEventType = Field(alias="eventType")
    connection_id: str = Field(alias="connectionId", min_length=1)


class GatewayEventModel(BaseModel):
    """WebSocket proxy event as forwarded by the gateway."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    request_context: RequestContextModel = Field(alias="requestContext")
    body: Any = None

    def to_event(self) -> InboundEvent:
        # Non-string JSON bodies are re-encoded and left to the message codec to validate.
        body = self.body
        if body is not None and not isinstance(body, str):
            body = json.dumps(body, separators=(",", ":"))
        return InboundEvent(
            event_type=self.request_context.event_type,
            connection_id=self.request_context.connection_id,
            body=body,
        )


class EventResultModel(BaseModel):
    status_code: int = Field(serialization_alias="statusCode")


class HealthResponse(BaseModel):
    status: str


__all__ = ["EventResultModel", "GatewayEventModel", "HealthResponse", "RequestContextModel"]
