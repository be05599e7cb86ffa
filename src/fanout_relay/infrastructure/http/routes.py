"""HTTP route definitions for the relay API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from fanout_relay.application.router import EventRouter
from fanout_relay.infrastructure.http.schemas import (
    EventResultModel,
    GatewayEventModel,
    HealthResponse,
)

logger = logging.getLogger("fanout_relay.http")


@dataclass(frozen=True)
class RelayRouteDeps:
    router: EventRouter


def add_relay_routes(app: FastAPI, dependency_provider: Callable[[], RelayRouteDeps]) -> None:
    def get_dependencies() -> RelayRouteDeps:
        return dependency_provider()

    @app.post(
        "/v1/events",
        response_model=EventResultModel,
        description="Handle one gateway event (connect, disconnect or message).",
    )
    def handle_event(
        payload: GatewayEventModel,
        deps: RelayRouteDeps = Depends(get_dependencies),  # noqa: B008
    ) -> JSONResponse:
        result = deps.router.handle(payload.to_event())
        body = EventResultModel(status_code=result.status_code).model_dump(by_alias=True)
        return JSONResponse(status_code=result.status_code, content=body)

    @app.get("/healthz", response_model=HealthResponse)
    def healthz() -> HealthResponse:
        return HealthResponse(status="ok")


__all__ = ["RelayRouteDeps", "add_relay_routes"]
