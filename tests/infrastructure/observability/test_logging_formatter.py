from __future__ import annotations

import json
import logging
import sys

import pytest
from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from fanout_relay.infrastructure.observability.logging import (
    CloudJsonSanitizer,
    ExtrasFormatter,
    OtelContextLogFilter,
    build_log_config,
)


def _record(msg: str, *, level: int = logging.INFO, exc_info=None) -> logging.LogRecord:  # type: ignore[no-untyped-def]
    return logging.LogRecord(
        name="fanout_relay.dispatch",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_formatter_appends_data_outside_managed_runtimes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")
    record = _record("broadcast fanned out")
    record.data = {"attempted": 3, "failed": ["s2"]}

    rendered = formatter.format(record)

    assert rendered == (
        'INFO fanout_relay.dispatch: broadcast fanned out | data={"attempted":3,"failed":["s2"]}'
    )


def test_formatter_emits_json_on_cloud_run(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("K_SERVICE", "fanout-relay")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")
    record = _record("delivery failed", level=logging.WARNING)
    record.data = {"connection_id": "s1", "raw": b"abc"}

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "delivery failed"
    assert payload["severity"] == "WARNING"
    assert payload["logger"] == "fanout_relay.dispatch"
    assert payload["data"] == {"connection_id": "s1", "raw": "<bytes len=3>"}
    assert payload["timestamp"].endswith("Z")


def test_formatter_includes_exception_in_kubernetes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    formatter = ExtrasFormatter("%(message)s")
    try:
        raise ConnectionResetError("socket reset")
    except ConnectionResetError:
        exc_info = sys.exc_info()

    payload = json.loads(formatter.format(_record("delivery raised", level=logging.ERROR, exc_info=exc_info)))

    assert "ConnectionResetError: socket reset" in payload["exception"]


def test_cloud_json_sanitizer_copies_data_into_json_fields() -> None:
    record = _record("broadcast fanned out")
    record.data = {"pruned": ("s1",), "payload": b"hi"}

    assert CloudJsonSanitizer().filter(record) is True
    assert record.json_fields["data"] == {"pruned": ["s1"], "payload": "<bytes len=2>"}


def test_build_log_config_requires_project_for_cloud_logging() -> None:
    with pytest.raises(RuntimeError, match="GCP project"):
        build_log_config(cloud_logging_enabled=True)


def test_build_log_config_console_only(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = build_log_config()

    assert config["root"] == {"level": "DEBUG", "handlers": ["console"]}
    assert set(config["handlers"]) == {"console"}
    assert config["loggers"]["httpx"]["level"] == "WARNING"


def test_otel_ids_reach_json_lines_and_cloud_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("K_SERVICE", "fanout-relay")
    span = NonRecordingSpan(
        SpanContext(trace_id=0xABC, span_id=0x12, is_remote=False, trace_flags=TraceFlags(1))
    )
    record = _record("broadcast fanned out")
    record.data = {"attempted": 1}

    with trace.use_span(span):
        assert OtelContextLogFilter().filter(record) is True

    payload = json.loads(ExtrasFormatter("%(message)s").format(record))
    assert payload["otel"] == {"trace_id": f"{0xABC:032x}", "span_id": f"{0x12:016x}"}

    CloudJsonSanitizer(gcp_project_id="relay-prod").filter(record)
    assert record.json_fields["logging.googleapis.com/trace"] == (
        f"projects/relay-prod/traces/{0xABC:032x}"
    )
    assert record.json_fields["logging.googleapis.com/spanId"] == f"{0x12:016x}"
    assert record.json_fields["data"] == {"attempted": 1}


def test_otel_filter_leaves_record_alone_without_active_span() -> None:
    record = _record("event received")

    assert OtelContextLogFilter().filter(record) is True
    assert not hasattr(record, "otel")
