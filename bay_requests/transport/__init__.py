"""Transport implementations and environment-driven selection."""

from __future__ import annotations

from bay_requests.transport.api import RequestsAPITransport
from bay_requests.transport.contracts import (
    TRANSPORT_API,
    TRANSPORT_IN_MEMORY,
    RequestTransport,
    build_transport_from_env,
)
from bay_requests.transport.inmemory import InMemoryRequestTransport

__all__ = [
    "InMemoryRequestTransport",
    "RequestTransport",
    "RequestsAPITransport",
    "TRANSPORT_API",
    "TRANSPORT_IN_MEMORY",
    "build_transport_from_env",
]
