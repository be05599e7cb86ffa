from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from fanout_relay.domain.message import Message, MessageAction, format_timestamp


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("attach", MessageAction.ATTACH),
        ("publish", MessageAction.PUBLISH),
        ("detach", MessageAction.DETACH),
        ("connect", MessageAction.ATTACH),
        ("message", MessageAction.PUBLISH),
        ("disconnect", MessageAction.DETACH),
        ("frobnicate", MessageAction.UNKNOWN),
        ("", MessageAction.UNKNOWN),
        (None, MessageAction.UNKNOWN),
        ("PUBLISH", MessageAction.UNKNOWN),
    ],
)
def test_action_from_wire(raw: str | None, expected: MessageAction) -> None:
    assert MessageAction.from_wire(raw) is expected


def test_stamped_replaces_sender_and_timestamp() -> None:
    forged = Message(action="publish", sender_connection_id="mallory", content="hi", timestamp="1999")

    stamped = forged.stamped(
        sender_connection_id="alice",
        received_at=datetime(2026, 10, 18, 9, 5, 1, tzinfo=UTC),
    )

    assert stamped.sender_connection_id == "alice"
    assert stamped.timestamp == "2026-10-18T09:05:01Z"
    assert stamped.content == "hi"
    assert forged.sender_connection_id == "mallory"


def test_format_timestamp_normalizes_to_utc() -> None:
    tokyo = timezone(timedelta(hours=9))

    assert format_timestamp(datetime(2026, 10, 18, 21, 0, 0, tzinfo=tokyo)) == "2026-10-18T12:00:00Z"


def test_format_timestamp_rejects_naive_datetimes() -> None:
    with pytest.raises(ValueError, match="timezone-aware"):
        format_timestamp(datetime(2026, 10, 18, 12, 0, 0))  # noqa: DTZ001
