from __future__ import annotations

import logging

import pytest

from fanout_relay.application.lifecycle import ConnectionLifecycle
from fanout_relay.application.registry import ConnectionRegistry
from fanout_relay.domain.events import InboundEvent, TransportEventType
from tests.fixtures.fakes import RecordingConnectionStore


def test_attach_twice_leaves_single_record() -> None:
    store = RecordingConnectionStore()
    lifecycle = ConnectionLifecycle(ConnectionRegistry(store))

    lifecycle.attach("s1")
    lifecycle.attach("s1")

    assert len(store.scan()) == 1


def test_detach_of_absent_connection_is_a_noop() -> None:
    store = RecordingConnectionStore(initial=("s1",))
    lifecycle = ConnectionLifecycle(ConnectionRegistry(store))

    lifecycle.detach("ghost")
    lifecycle.detach("s1")
    lifecycle.detach("s1")

    assert store.ids() == set()


def test_unrecognized_reports_without_mutation(caplog: pytest.LogCaptureFixture) -> None:
    store = RecordingConnectionStore(initial=("s1",))
    lifecycle = ConnectionLifecycle(ConnectionRegistry(store))
    caplog.set_level(logging.WARNING, logger="fanout_relay.lifecycle")
    event = InboundEvent(TransportEventType.MESSAGE, "s1", '{"action": "frobnicate"}')

    lifecycle.unrecognized(event, "frobnicate")

    assert store.mutations == 0
    record = next(r for r in caplog.records if r.name == "fanout_relay.lifecycle")
    assert record.data["action"] == "frobnicate"
