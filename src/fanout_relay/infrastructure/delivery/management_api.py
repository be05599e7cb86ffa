"""HTTP client for the gateway's connection management API."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from fanout_relay.application.ports.delivery import DeliveryPort
from fanout_relay.errors import DeliveryError, RecipientGoneError


@dataclass
class HttpConnectionManagementClient(DeliveryPort):
    """Implementation of DeliveryPort backed by HTTPX.

    Posts each payload to ``{endpoint}/@connections/{connection_id}``. A
    ``410 Gone`` response means the gateway no longer holds the connection.
    """

    endpoint: str
    timeout_seconds: float = 5.0
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ValueError("management API endpoint must not be empty")
        self._http = httpx.Client(
            base_url=self.endpoint.rstrip("/"),
            timeout=self.timeout_seconds,
            transport=self.transport,
        )

    def deliver(self, connection_id: str, payload: bytes) -> None:
        path = f"/@connections/{quote(connection_id, safe='')}"
        try:
            response = self._http.post(
                path,
                content=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(connection_id, f"POST {path} failed: {exc}") from exc
        if response.status_code == httpx.codes.GONE:
            raise RecipientGoneError(connection_id, f"connection {connection_id} is gone")
        if not response.is_success:
            raise DeliveryError(
                connection_id,
                f"management API returned {response.status_code} for POST {path}",
            )

    def close(self) -> None:
        self._http.close()


__all__ = ["HttpConnectionManagementClient"]
