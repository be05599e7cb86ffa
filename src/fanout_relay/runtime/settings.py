"""Configuration helpers for relay runtime wiring."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fanout_relay.config.delivery import DeliverySettings
from fanout_relay.config.observability import ObservabilitySettings
from fanout_relay.config.store import StoreSettings


class Settings(BaseSettings):
    """Relay configuration resolved once from the environment at startup."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # --- Server ---
    listen_host: str = Field(default="0.0.0.0", alias="RELAY_HOST")  # noqa: S104
    listen_port: int = Field(default=8080, alias="RELAY_PORT")

    # --- Component settings ---
    store: StoreSettings = Field(default_factory=StoreSettings)
    delivery: DeliverySettings = Field(default_factory=DeliverySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    # --- Loader ---
    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("fanout_relay.settings")
        logger.info("relay settings loaded: %r", instance)
        return instance


__all__ = ["Settings"]
