"""Runtime wiring for the relay service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from fanout_relay.application.dispatcher import BroadcastDispatcher
from fanout_relay.application.lifecycle import ConnectionLifecycle
from fanout_relay.application.ports.connection_store import ConnectionStorePort
from fanout_relay.application.ports.delivery import DeliveryPort
from fanout_relay.application.registry import ConnectionRegistry
from fanout_relay.application.router import EventRouter
from fanout_relay.config.store import StoreSettings
from fanout_relay.infrastructure.delivery.management_api import HttpConnectionManagementClient
from fanout_relay.infrastructure.http.routes import RelayRouteDeps
from fanout_relay.infrastructure.state.memory_store import InMemoryConnectionStore
from fanout_relay.infrastructure.state.sqlite_store import SqliteConnectionStore
from fanout_relay.runtime.settings import Settings

logger = logging.getLogger("fanout_relay.runtime")


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Long-lived service objects shared by every inbound event."""

    settings: Settings
    store: ConnectionStorePort
    delivery: DeliveryPort
    registry: ConnectionRegistry
    dispatcher: BroadcastDispatcher
    lifecycle: ConnectionLifecycle
    router: EventRouter
    route_deps_provider: Callable[[], RelayRouteDeps]


def build_runtime(
    settings: Settings | None = None,
    *,
    store: ConnectionStorePort | None = None,
    delivery: DeliveryPort | None = None,
) -> RuntimeContext:
    """Construct the runtime context once at process start.

    ``store`` and ``delivery`` override the adapters selected by settings.
    """
    resolved = settings or Settings.load()
    logger.info(
        "building relay runtime",
        extra={
            "data": {
                "store_backend": resolved.store.backend,
                "table_name": resolved.store.table_name,
                "prune_gone_connections": resolved.delivery.prune_gone_connections,
            }
        },
    )

    resolved_store = store if store is not None else create_store(resolved.store)
    resolved_delivery = delivery if delivery is not None else _create_delivery(resolved)

    registry = ConnectionRegistry(resolved_store)
    dispatcher = BroadcastDispatcher(
        registry,
        resolved_delivery,
        prune_gone_connections=resolved.delivery.prune_gone_connections,
    )
    lifecycle = ConnectionLifecycle(registry)
    router = EventRouter(lifecycle, dispatcher)
    route_deps = RelayRouteDeps(router=router)

    return RuntimeContext(
        settings=resolved,
        store=resolved_store,
        delivery=resolved_delivery,
        registry=registry,
        dispatcher=dispatcher,
        lifecycle=lifecycle,
        router=router,
        route_deps_provider=lambda: route_deps,
    )


def create_store(settings: StoreSettings) -> ConnectionStorePort:
    match settings.backend:
        case "sqlite":
            return SqliteConnectionStore(Path(settings.sqlite_path), table_name=settings.table_name)
        case "memory":
            return InMemoryConnectionStore()
    raise ValueError(f"unsupported store backend: {settings.backend}")


def _create_delivery(settings: Settings) -> HttpConnectionManagementClient:
    endpoint = settings.delivery.management_api_endpoint
    if not endpoint:
        raise RuntimeError("RELAY_MANAGEMENT_API_ENDPOINT must be set")
    return HttpConnectionManagementClient(
        endpoint=endpoint,
        timeout_seconds=settings.delivery.timeout_seconds,
    )


def close_runtime_resources(runtime: RuntimeContext) -> None:
    close = getattr(runtime.delivery, "close", None)
    if callable(close):
        close()


__all__ = ["RuntimeContext", "build_runtime", "close_runtime_resources", "create_store"]
