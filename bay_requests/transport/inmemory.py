"""In-memory service-request API used for deterministic tests and offline runs."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from bay_requests.errors import TransportError
from bay_requests.transcoder import CREATE_FIELDS, WIRE_TO_ENTITY

_ENTITY_TO_WIRE = {entity: wire for wire, entity in WIRE_TO_ENTITY.items()}

OPERATIONS = {"list", "create", "update", "delete"}


class InMemoryRequestTransport:
    """Behaves like the remote service: accepts entity-convention bodies, answers wire records."""

    def __init__(
        self,
        records: list[dict[str, Any]] | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str | None]] = []
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._failures: dict[str, list[TransportError]] = {}
        for record in records or []:
            self.seed(record)

    def seed(self, record: dict[str, Any]) -> None:
        self.records[str(record["id"])] = dict(record)

    def fail_next(
        self, operation: str, status: int = 500, message: str = "Internal Server Error"
    ) -> None:
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        error = TransportError(f"API Error: {status} - {message}", status=status)
        self._failures.setdefault(operation, []).append(error)

    def list_requests(self) -> list[dict[str, Any]]:
        self._record_call("list")
        return [dict(record) for record in self.records.values()]

    def create_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._record_call("create")
        missing = [key for key in CREATE_FIELDS if key != "aircraftEta" and not payload.get(key)]
        if missing:
            raise TransportError(
                f"API Error: 400 Bad Request - missing fields: {', '.join(missing)}", status=400
            )
        record_id = self._id_factory()
        record: dict[str, Any] = {
            "id": record_id,
            "request_time": self._clock().isoformat(),
            "status": "PENDING",
            "completion_time": None,
            "delivery_staff_name": None,
            "delivery_staff_number": None,
        }
        for key in CREATE_FIELDS:
            record[_ENTITY_TO_WIRE[key]] = payload.get(key, "")
        self.records[record_id] = record
        return dict(record)

    def update_request(self, request_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        self._record_call("update", request_id)
        record = self._require(request_id)
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            wire_key = _ENTITY_TO_WIRE.get(key)
            if wire_key is None or wire_key in {"id", "request_time"}:
                raise TransportError(
                    f"API Error: 400 Bad Request - invalid field: {key}", status=400
                )
            changes[wire_key] = value
        record.update(changes)
        return dict(record)

    def delete_request(self, request_id: str) -> dict[str, Any]:
        self._record_call("delete", request_id)
        self._require(request_id)
        del self.records[request_id]
        return {}

    def _record_call(self, operation: str, request_id: str | None = None) -> None:
        self.calls.append((operation, request_id))
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _require(self, request_id: str) -> dict[str, Any]:
        record = self.records.get(request_id)
        if record is None:
            raise TransportError(f"API Error: 404 Not Found - request {request_id}", status=404)
        return record
