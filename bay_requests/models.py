"""Pydantic models for service requests, drafts and notifications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class ServiceType(str, Enum):
    CONNECT = "CONNECT"
    DISCONNECT = "DISCONNECT"
    REPLACE = "REPLACE"


class Role(str, Enum):
    REQUESTER = "REQUEST"
    DELIVERY = "DELIVERY"


NotificationType = Literal["success", "error", "info"]


class ServiceRequest(BaseModel):
    """One ground-service task against an aircraft bay.

    Attributes are snake_case; the entity convention (camelCase) is exposed
    through aliases, so ``model_dump(by_alias=True)`` yields entity field names.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(min_length=1)
    staff_name: str
    staff_number: str
    aircraft_bay: str
    flight_number: str
    request_time: datetime
    completion_time: datetime | None = None
    status: RequestStatus
    service_type: ServiceType
    aircraft_eta: str = ""
    delivery_staff_name: str | None = None
    delivery_staff_number: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("delivery_staff_name", "delivery_staff_number", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("aircraft_eta", mode="before")
    @classmethod
    def _eta_default(cls, value: object) -> object:
        return "" if value is None else value

    @model_validator(mode="after")
    def _check_invariants(self) -> "ServiceRequest":
        completed = self.status == RequestStatus.COMPLETED
        if completed != (self.completion_time is not None):
            raise ValueError("completion_time must be set exactly when status is COMPLETED")
        if (self.delivery_staff_name is None) != (self.delivery_staff_number is None):
            raise ValueError("delivery staff name and number must be set together")
        return self

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


class RequestDraft(BaseModel):
    """Fields a requester supplies when creating a request."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    staff_name: str = Field(min_length=1)
    staff_number: str = Field(min_length=1)
    aircraft_bay: str = Field(min_length=1)
    flight_number: str = Field(min_length=1)
    service_type: ServiceType
    aircraft_eta: str = ""


class NotificationMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    message: str
    type: NotificationType
