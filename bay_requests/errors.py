"""Error taxonomy shared by the transport, store and workflow layers."""

from __future__ import annotations


class BayRequestsError(RuntimeError):
    pass


class TransportError(BayRequestsError):
    """Network failure or non-2xx response from the remote service."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class DecodeError(BayRequestsError):
    """A wire record could not be turned into a ServiceRequest."""

    def __init__(self, message: str, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


class LocalStateError(BayRequestsError):
    """The targeted request is missing locally or already has a mutation in flight."""

    def __init__(self, message: str, request_id: str) -> None:
        super().__init__(message)
        self.request_id = request_id


class WorkflowError(BayRequestsError):
    pass
