"""Transport contract for the remote service-request API, plus factory helpers."""

from __future__ import annotations

import os
from typing import Any, Protocol

from bay_requests.errors import TransportError
from bay_requests.shared.settings import ClientSettings

TRANSPORT_API = "api"
TRANSPORT_IN_MEMORY = "in_memory"


class RequestTransport(Protocol):
    """One network call per operation; failures raise TransportError."""

    def list_requests(self) -> list[dict[str, Any]]: ...

    def create_request(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def update_request(self, request_id: str, fields: dict[str, Any]) -> dict[str, Any]: ...

    def delete_request(self, request_id: str) -> dict[str, Any]: ...


def build_transport_from_env(
    env: dict[str, str] | None = None,
    settings: ClientSettings | None = None,
) -> RequestTransport:
    env_map = os.environ if env is None else env
    resolved = settings or ClientSettings.from_env(env_map)
    transport_type = resolved.transport.strip().lower()

    if transport_type == TRANSPORT_IN_MEMORY:
        from bay_requests.transport.inmemory import InMemoryRequestTransport

        return InMemoryRequestTransport()

    if transport_type != TRANSPORT_API:
        raise ValueError(f"Unsupported transport: {resolved.transport}")

    from bay_requests.transport.api import RequestsAPITransport

    return RequestsAPITransport(base_url=resolved.api_base_url, timeout_s=resolved.timeout_s)


__all__ = [
    "RequestTransport",
    "TRANSPORT_API",
    "TRANSPORT_IN_MEMORY",
    "TransportError",
    "build_transport_from_env",
]
