"""Connection store configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

StoreBackend = Literal["sqlite", "memory"]


class StoreSettings(BaseSettings):
    """Backend selection and naming for the connection registry."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    backend: StoreBackend = Field(default="sqlite", alias="RELAY_STORE_BACKEND")
    table_name: str = Field(default="connections", alias="RELAY_TABLE_NAME")
    sqlite_path: str = Field(default=".fanout-relay/connections.db", alias="RELAY_SQLITE_PATH")


__all__ = ["StoreBackend", "StoreSettings"]
