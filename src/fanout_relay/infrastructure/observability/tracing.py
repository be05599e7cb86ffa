"""Opt-in OTLP tracing for the relay service."""

from __future__ import annotations

import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

_configured = False


def _requested_exporter() -> str:
    return (os.getenv("OTEL_TRACES_EXPORTER") or "").strip().lower()


def _otlp_endpoint() -> str | None:
    return os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT") or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")


def configure_tracing(*, service_name: str) -> bool:
    """Install a batching OTLP tracer provider when the environment names a collector.

    Returns ``True`` only when this call installed a provider. The ``relay.publish``
    spans stay no-ops otherwise. ``OTEL_TRACES_EXPORTER`` set to anything but
    ``none`` without an endpoint is a startup error.
    """

    global _configured
    if _configured:
        return False

    requested = _requested_exporter()
    endpoint = _otlp_endpoint()
    if requested and requested != "none" and not endpoint:
        raise RuntimeError(
            "Tracing enabled but OTLP endpoint missing: set "
            "OTEL_EXPORTER_OTLP_ENDPOINT (or OTEL_EXPORTER_OTLP_TRACES_ENDPOINT), "
            "or set OTEL_TRACES_EXPORTER=none."
        )
    if requested == "none" or not endpoint:
        _configured = True
        return False

    relay_service = (os.getenv("OTEL_SERVICE_NAME") or service_name).strip()
    if not relay_service:
        raise RuntimeError("service_name must be a non-empty string")

    provider = TracerProvider(resource=Resource.create({"service.name": relay_service}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    trace.set_tracer_provider(provider)
    _configured = True
    return True


def reset_tracing_state() -> None:
    """Allow ``configure_tracing`` to run again (test helper)."""

    global _configured
    _configured = False


__all__ = ["configure_tracing", "reset_tracing_state"]
