"""Parsing and encoding of broadcast message bodies."""

from __future__ import annotations

import json

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from fanout_relay.domain.message import Message
from fanout_relay.errors import MalformedPayloadError


class _MessageBodyPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    action: str | None = None
    content: str | None = None
    timestamp: str | None = None
    connection_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("connectionId", "senderSessionId"),
    )


_MESSAGE_BODY_ADAPTER = TypeAdapter(_MessageBodyPayload)


def parse_message(raw_body: str | bytes | None) -> Message:
    """Parse a raw JSON body into a :class:`Message`.

    Raises ``MalformedPayloadError`` when the body is missing, is not a JSON
    object, or carries a non-string value for a known field.
    """
    if raw_body is None:
        raise MalformedPayloadError("message body is missing")
    try:
        parsed = _MESSAGE_BODY_ADAPTER.validate_json(raw_body)
    except ValidationError as exc:
        raise MalformedPayloadError(f"message body is not valid: {exc.error_count()} error(s)") from exc
    return Message(
        action=parsed.action or "",
        sender_connection_id=parsed.connection_id or "",
        content=parsed.content or "",
        timestamp=parsed.timestamp or "",
    )


def encode_message(message: Message) -> bytes:
    """Serialize a stamped message into the payload pushed to recipients."""
    document = {
        "action": message.action,
        "connectionId": message.sender_connection_id,
        "content": message.content,
        "timestamp": message.timestamp,
    }
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


__all__ = ["encode_message", "parse_message"]
