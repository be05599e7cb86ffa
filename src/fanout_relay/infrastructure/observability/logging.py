"""Relay logging setup (formatter, filters, dictConfig builder)."""

from __future__ import annotations

import json
import logging
import os
import time
import traceback
from collections.abc import Mapping
from dataclasses import asdict, is_dataclass
from enum import Enum
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace

_PACKAGE_LOGGER = "fanout_relay"
_CLOUD_HANDLER = "cloud_logging"
_CLOUD_LOG_NAME = "fanout-relay"


def _level(env_var: str, default: str) -> str:
    return os.getenv(env_var, default).upper()


def _managed_runtime() -> bool:
    # Cloud Run and Kubernetes ingest one JSON object per line as a structured entry.
    return bool(os.getenv("K_SERVICE") or os.getenv("KUBERNETES_SERVICE_HOST"))


def _utc_timestamp(record: logging.LogRecord) -> str:
    return (
        f"{time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created))}"
        f".{int(record.msecs):03d}Z"
    )


def _sanitize_for_json(value: Any) -> Any:
    """Return a JSON-serializable copy; unknown objects become strings."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes len={len(value)}>"
    if is_dataclass(value) and not isinstance(value, type):
        return _sanitize_for_json(asdict(value))
    if isinstance(value, Mapping):
        return {str(key): _sanitize_for_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_sanitize_for_json(item) for item in value]
    return str(value)


class ExtrasFormatter(logging.Formatter):
    """Append structured ``data`` payloads; emit JSON lines on managed runtimes."""

    def format(self, record: logging.LogRecord) -> str:
        record_dict = record.__dict__
        if _managed_runtime():
            payload: dict[str, Any] = {
                "message": record.getMessage(),
                "severity": record.levelname,
                "logger": record.name,
                "timestamp": _utc_timestamp(record),
            }
            if record_dict.get("data"):
                payload["data"] = _sanitize_for_json(record_dict["data"])
            if record_dict.get("otel"):
                payload["otel"] = record_dict["otel"]
            if record.exc_info:
                payload["exception"] = "".join(traceback.format_exception(*record.exc_info)).rstrip("\n")
            return json.dumps(payload, sort_keys=True, separators=(",", ":"))

        formatted = super().format(record)
        if not record_dict.get("data"):
            return formatted
        encoded = json.dumps(_sanitize_for_json(record_dict["data"]), sort_keys=True, separators=(",", ":"))
        return f"{formatted} | data={encoded}"


class OtelContextLogFilter(logging.Filter):
    """Attach the active trace/span ids as ``record.otel``."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.otel = {
                "trace_id": f"{span_context.trace_id:032x}",
                "span_id": f"{span_context.span_id:016x}",
            }
        return True


class CloudJsonSanitizer(logging.Filter):
    """Build the ``json_fields`` Cloud Logging ships from ``data`` and trace ids."""

    def __init__(self, *, gcp_project_id: str | None = None) -> None:
        super().__init__()
        self._gcp_project_id = gcp_project_id.strip() if gcp_project_id else None

    def filter(self, record: logging.LogRecord) -> bool:
        record_dict = record.__dict__
        fields: dict[str, Any] = {}
        if "data" in record_dict:
            fields["data"] = _sanitize_for_json(record_dict["data"])
        otel = record_dict.get("otel")
        if otel:
            fields["otel"] = otel
            if self._gcp_project_id:
                fields["logging.googleapis.com/trace"] = (
                    f"projects/{self._gcp_project_id}/traces/{otel['trace_id']}"
                )
                fields["logging.googleapis.com/spanId"] = otel["span_id"]
        record_dict["json_fields"] = fields
        return True


def build_log_config(
    *,
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_labels: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a dictConfig-compatible logging configuration."""

    handler_names = ["console"]
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": "ext://sys.stdout",
            "filters": ["otel_context"],
        }
    }
    if cloud_logging_enabled:
        if not gcp_project:
            raise RuntimeError("GCP project required when cloud logging is enabled")
        handlers[_CLOUD_HANDLER] = _cloud_logging_handler(gcp_project, cloud_log_labels)
        handler_names.append(_CLOUD_HANDLER)

    def entry(level_env: str, default: str) -> dict[str, Any]:
        return {"level": _level(level_env, default), "handlers": list(handler_names), "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ExtrasFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S",
            }
        },
        "filters": {
            "otel_context": {"()": OtelContextLogFilter},
            "cloud_json_sanitizer": {"()": CloudJsonSanitizer, "gcp_project_id": gcp_project},
        },
        "handlers": handlers,
        "root": {"level": _level("LOG_LEVEL", "INFO"), "handlers": list(handler_names)},
        "loggers": {
            "uvicorn": entry("UVICORN_LOG_LEVEL", "INFO"),
            "uvicorn.access": entry("UVICORN_ACCESS_LOG_LEVEL", "WARNING"),
            "httpx": entry("HTTPX_LOG_LEVEL", "WARNING"),
            "httpcore": entry("HTTPX_LOG_LEVEL", "WARNING"),
        },
    }


def _cloud_logging_handler(project: str, labels: Mapping[str, str] | None) -> dict[str, Any]:
    from google.cloud import logging as gcp_logging
    from google.cloud.logging_v2.resource import Resource

    client = gcp_logging.Client(project=project)  # type: ignore[no-untyped-call]
    return {
        "level": "INFO",
        "class": "google.cloud.logging_v2.handlers.handlers.CloudLoggingHandler",
        "client": client,
        "name": _CLOUD_LOG_NAME,
        "resource": Resource("global", {"project_id": project}),
        "labels": dict(labels or {}),
        "formatter": "console",
        "filters": ["otel_context", "cloud_json_sanitizer"],
    }


def configure_logging(
    *,
    cloud_logging_enabled: bool = False,
    gcp_project: str | None = None,
    cloud_log_labels: Mapping[str, str] | None = None,
) -> None:
    """Apply the relay logging config."""
    dictConfig(
        build_log_config(
            cloud_logging_enabled=cloud_logging_enabled,
            gcp_project=gcp_project,
            cloud_log_labels=cloud_log_labels,
        )
    )
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    package_logger.setLevel(logging.getLogger().level)
    package_logger.propagate = True


def init_logging() -> None:
    """Bootstrap console logging before settings are loaded."""

    configure_logging(cloud_logging_enabled=False)


def shutdown_logging() -> None:
    """Flush and close any Cloud Logging handlers attached to the root logger."""

    for handler in list(logging.getLogger().handlers):
        if type(handler).__name__ == "CloudLoggingHandler":
            handler.flush()
            handler.close()


__all__ = [
    "CloudJsonSanitizer",
    "ExtrasFormatter",
    "OtelContextLogFilter",
    "build_log_config",
    "configure_logging",
    "init_logging",
    "shutdown_logging",
]
