from __future__ import annotations

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fanout_relay.application.dispatcher import BroadcastDispatcher
from fanout_relay.application.lifecycle import ConnectionLifecycle
from fanout_relay.application.registry import ConnectionRegistry
from fanout_relay.application.router import EventRouter
from fanout_relay.infrastructure.http.routes import RelayRouteDeps, add_relay_routes
from tests.fixtures.fakes import RecordingConnectionStore, ScriptedDelivery, fixed_clock


class DemoRouteDependencyProvider:
    def __init__(self, store: RecordingConnectionStore, delivery: ScriptedDelivery) -> None:
        registry = ConnectionRegistry(store, clock=fixed_clock)
        self._deps = RelayRouteDeps(
            router=EventRouter(
                ConnectionLifecycle(registry),
                BroadcastDispatcher(registry, delivery, clock=fixed_clock),
            )
        )

    def __call__(self) -> RelayRouteDeps:
        return self._deps


def _create_test_app(store: RecordingConnectionStore, delivery: ScriptedDelivery) -> FastAPI:
    app = FastAPI()
    add_relay_routes(app, DemoRouteDependencyProvider(store, delivery))
    return app


def _event(event_type: str, connection_id: str, body: object = None) -> dict[str, object]:
    return {
        "requestContext": {"eventType": event_type, "connectionId": connection_id, "stage": "prod"},
        "body": body,
    }


def test_connect_message_disconnect_over_http() -> None:
    store = RecordingConnectionStore()
    delivery = ScriptedDelivery()
    client = TestClient(_create_test_app(store, delivery))

    assert client.post("/v1/events", json=_event("CONNECT", "c1")).status_code == 200
    assert client.post("/v1/events", json=_event("CONNECT", "c2")).status_code == 200

    response = client.post(
        "/v1/events",
        json=_event("MESSAGE", "c1", json.dumps({"action": "message", "content": "hi"})),
    )

    assert response.status_code == 200
    assert response.json() == {"statusCode": 200}
    assert sorted(delivery.recipients) == ["c1", "c2"]

    assert client.post("/v1/events", json=_event("DISCONNECT", "c1")).status_code == 200
    assert store.ids() == {"c2"}


def test_object_body_is_accepted() -> None:
    store = RecordingConnectionStore(initial=("c1",))
    delivery = ScriptedDelivery()
    client = TestClient(_create_test_app(store, delivery))

    response = client.post(
        "/v1/events",
        json=_event("MESSAGE", "c1", {"action": "publish", "content": "obj"}),
    )

    assert response.status_code == 200
    (_, payload), = delivery.attempts
    assert json.loads(payload)["content"] == "obj"


@pytest.mark.parametrize("body", ["{nope", ["publish"], 7, True])
def test_malformed_body_maps_to_400(body: object) -> None:
    store = RecordingConnectionStore(initial=("c1",))
    delivery = ScriptedDelivery()
    client = TestClient(_create_test_app(store, delivery))

    response = client.post("/v1/events", json=_event("MESSAGE", "c1", body))

    assert response.status_code == 400
    assert response.json() == {"statusCode": 400}
    assert delivery.attempts == []


def test_storage_failure_maps_to_500() -> None:
    store = RecordingConnectionStore()
    store.fail_writes = True
    client = TestClient(_create_test_app(store, ScriptedDelivery()))

    response = client.post("/v1/events", json=_event("CONNECT", "c1"))

    assert response.status_code == 500


def test_invalid_envelope_is_rejected_before_routing() -> None:
    store = RecordingConnectionStore()
    client = TestClient(_create_test_app(store, ScriptedDelivery()))

    unknown_type = client.post("/v1/events", json=_event("PING", "c1"))
    missing_id = client.post("/v1/events", json={"requestContext": {"eventType": "CONNECT"}})

    assert unknown_type.status_code == 422
    assert missing_id.status_code == 422
    assert store.mutations == 0


def test_healthz() -> None:
    client = TestClient(_create_test_app(RecordingConnectionStore(), ScriptedDelivery()))

    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
