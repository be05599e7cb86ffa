"""Entrypoint for running the relay API service under uvicorn."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fanout_relay.infrastructure.http.middleware import request_logging_middleware
from fanout_relay.infrastructure.http.routes import add_relay_routes
from fanout_relay.infrastructure.observability.logging import (
    configure_logging,
    init_logging,
    shutdown_logging,
)
from fanout_relay.infrastructure.observability.tracing import configure_tracing
from fanout_relay.runtime.bootstrap import RuntimeContext, build_runtime, close_runtime_resources
from fanout_relay.runtime.settings import Settings


def create_app(runtime: RuntimeContext) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        yield
        close_runtime_resources(runtime)
        shutdown_logging()

    app = FastAPI(title="Fanout Relay API", version="0.1.0", lifespan=lifespan)
    app.middleware("http")(request_logging_middleware)
    add_relay_routes(app, runtime.route_deps_provider)
    return app


def bootstrap() -> RuntimeContext:
    init_logging()
    configure_tracing(service_name="fanout-relay")
    settings = Settings.load()
    if settings.observability.enable_cloud_logging:
        if settings.observability.gcp_project_id is None:
            raise RuntimeError("Cloud logging enabled but no GCP project configured")
        configure_logging(
            cloud_logging_enabled=True,
            gcp_project=settings.observability.gcp_project_id,
            cloud_log_labels={"service": "fanout-relay"},
        )
    return build_runtime(settings)


def main() -> None:
    import uvicorn

    runtime = bootstrap()
    uvicorn.run(
        create_app(runtime),
        host=runtime.settings.listen_host,
        port=runtime.settings.listen_port,
        # logging already setup
        log_config=None,
    )


__all__ = ["bootstrap", "create_app", "main"]
