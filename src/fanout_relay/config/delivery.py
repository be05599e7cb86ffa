"""Delivery (management API) configuration."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeliverySettings(BaseSettings):
    """Endpoint and behavior of per-connection delivery."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    management_api_endpoint: str = Field(default="", alias="RELAY_MANAGEMENT_API_ENDPOINT")
    timeout_seconds: float = Field(default=5.0, alias="RELAY_DELIVERY_TIMEOUT_SECONDS", gt=0.0)
    prune_gone_connections: bool = Field(
        default=False,
        alias="RELAY_PRUNE_GONE_CONNECTIONS",
        description="Remove connections the gateway reports as gone after each broadcast.",
    )


__all__ = ["DeliverySettings"]
