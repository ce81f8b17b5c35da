"""Mapping between wire records (snake_case) and ServiceRequest entities (camelCase)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from loguru import logger
from pydantic import ValidationError

from bay_requests.errors import DecodeError
from bay_requests.models import RequestDraft, ServiceRequest

WIRE_TO_ENTITY = {
    "id": "id",
    "staff_name": "staffName",
    "staff_number": "staffNumber",
    "aircraft_bay": "aircraftBay",
    "flight_number": "flightNumber",
    "request_time": "requestTime",
    "completion_time": "completionTime",
    "status": "status",
    "service_type": "serviceType",
    "aircraft_eta": "aircraftEta",
    "delivery_staff_name": "deliveryStaffName",
    "delivery_staff_number": "deliveryStaffNumber",
}

CREATE_FIELDS = (
    "staffName",
    "staffNumber",
    "aircraftBay",
    "flightNumber",
    "serviceType",
    "aircraftEta",
)

IMMUTABLE_FIELDS = {"id", "requestTime"}

_ENTITY_FIELDS = set(WIRE_TO_ENTITY.values())


def decode(wire: Any) -> ServiceRequest:
    if not isinstance(wire, dict):
        raise DecodeError(f"Expected a JSON object, got {type(wire).__name__}")

    record_id = wire.get("id")
    record_id = str(record_id) if record_id is not None else None
    if not wire.get("request_time"):
        raise DecodeError("Missing request_time", record_id=record_id)

    entity: dict[str, Any] = {}
    for wire_key, entity_key in WIRE_TO_ENTITY.items():
        value = wire.get(wire_key)
        if entity_key == "completionTime" and value == "":
            value = None
        if value is not None:
            entity[entity_key] = value

    try:
        return ServiceRequest.model_validate(entity)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
            for err in exc.errors()
        )
        raise DecodeError(
            f"Invalid service request record: {problems}", record_id=record_id
        ) from exc


def decode_many(rows: Iterable[Any]) -> tuple[list[ServiceRequest], int]:
    """Decode a list response, skipping records that fail to decode."""

    decoded: list[ServiceRequest] = []
    skipped = 0
    for row in rows:
        try:
            decoded.append(decode(row))
        except DecodeError as exc:
            skipped += 1
            logger.warning("Skipping undecodable record {}: {}", exc.record_id or "?", exc)
    return decoded, skipped


def encode_create(draft: RequestDraft) -> dict[str, Any]:
    body = draft.model_dump(by_alias=True, mode="json")
    return {key: body[key] for key in CREATE_FIELDS}


def encode_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Build a partial update body in entity convention.

    Keys may be given as entity (camelCase) or attribute (snake_case) names.
    """

    body: dict[str, Any] = {}
    for key, value in fields.items():
        entity_key = WIRE_TO_ENTITY.get(key, key)
        if entity_key not in _ENTITY_FIELDS:
            raise ValueError(f"Unknown service request field: {key}")
        if entity_key in IMMUTABLE_FIELDS:
            raise ValueError(f"Field is immutable: {entity_key}")
        body[entity_key] = _encode_value(value)
    return body


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value
