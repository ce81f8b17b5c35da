"""Confirmation-gated complete/delete flows and the delivery-completion flow."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Callable

from loguru import logger

from bay_requests.errors import LocalStateError, WorkflowError
from bay_requests.models import RequestStatus, Role, ServiceRequest
from bay_requests.store import RequestStore

CONFIRM_COMPLETE_PROMPT = "Are you sure you want to mark this request as completed?"
CONFIRM_DELETE_PROMPT = "Are you sure you want to permanently delete this request?"

_TIME_OF_DAY_RE = re.compile(r"^(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)$")


class FlowState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    AWAITING_DETAILS = "awaiting_details"


@dataclass(frozen=True)
class PendingAction:
    state: FlowState = FlowState.IDLE
    request_id: str | None = None


_IDLE = PendingAction()


class MutationWorkflowController:
    def __init__(
        self,
        *,
        store: RequestStore,
        role: Role,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.store = store
        self.role = role
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.complete_flow = _IDLE
        self.delete_flow = _IDLE
        self.delivery_flow = _IDLE

    def initiate_for_role(self, request_id: str) -> PendingAction:
        """Start whichever completion flow the current role uses."""

        if self.role == Role.DELIVERY:
            return self.begin_delivery(request_id)
        return self.initiate_complete(request_id)

    # -------- Complete flow --------

    def initiate_complete(self, request_id: str) -> PendingAction:
        self._require_role(Role.REQUESTER, "complete")
        self.complete_flow = PendingAction(FlowState.CONFIRMING, request_id)
        return self.complete_flow

    def confirm_complete(self) -> ServiceRequest | None:
        request_id = self._pending_target(self.complete_flow, "complete")
        if self._completable(request_id) is None:
            self.store.notify("Failed to mark request as complete.", "error")
            self.complete_flow = _IDLE
            return None
        updated = self.store.update(
            request_id,
            {"status": RequestStatus.COMPLETED, "completionTime": self._clock()},
            success_message="Request marked as complete.",
            success_type="info",
            failure_message="Failed to mark request as complete.",
        )
        if updated is not None:
            self.complete_flow = _IDLE
        return updated

    def cancel_complete(self) -> None:
        self.complete_flow = _IDLE

    # -------- Delete flow --------

    def initiate_delete(self, request_id: str) -> PendingAction:
        self.delete_flow = PendingAction(FlowState.CONFIRMING, request_id)
        return self.delete_flow

    def confirm_delete(self) -> bool:
        request_id = self._pending_target(self.delete_flow, "delete")
        deleted = self.store.delete(request_id)
        if deleted:
            self.delete_flow = _IDLE
        return deleted

    def cancel_delete(self) -> None:
        self.delete_flow = _IDLE

    # -------- Delivery-completion flow --------

    def begin_delivery(self, request_id: str) -> PendingAction:
        self._require_role(Role.DELIVERY, "deliver")
        self.delivery_flow = PendingAction(FlowState.AWAITING_DETAILS, request_id)
        return self.delivery_flow

    def submit_delivery(
        self, delivery_staff_name: str, delivery_staff_number: str, time_of_day: str
    ) -> ServiceRequest | None:
        """Complete the pending delivery task on the same calendar day it was requested."""

        if self.delivery_flow.state != FlowState.AWAITING_DETAILS:
            raise WorkflowError("No delivery completion is awaiting details")
        request_id = self.delivery_flow.request_id or ""

        name = delivery_staff_name.strip()
        number = delivery_staff_number.strip()
        if not name or not number:
            self.store.notify("Delivery staff name and number are required.", "error")
            return None
        try:
            hour, minute = parse_time_of_day(time_of_day)
        except ValueError:
            self.store.notify(
                f"Invalid completion time: {time_of_day!r} (expected HH:MM).", "error"
            )
            return None

        target = self._completable(request_id)
        if target is None:
            self.store.notify("Failed to complete task.", "error")
            self.delivery_flow = _IDLE
            return None

        updated = self.store.update(
            request_id,
            {
                "status": RequestStatus.COMPLETED,
                "completionTime": same_day_completion(target.request_time, hour, minute, self.tz),
                "deliveryStaffName": name,
                "deliveryStaffNumber": number,
            },
            success_message="Task completed successfully.",
            success_type="success",
            failure_message="Failed to complete task.",
        )
        if updated is not None:
            self.delivery_flow = _IDLE
        return updated

    def cancel_delivery(self) -> None:
        self.delivery_flow = _IDLE

    def _completable(self, request_id: str) -> ServiceRequest | None:
        """Local copy of a request that may still be completed, or None."""

        target = self.store.get(request_id)
        if target is None:
            error = LocalStateError(
                f"Request with ID {request_id} not found in state.", request_id=request_id
            )
        elif not target.is_pending:
            error = LocalStateError(
                f"Request with ID {request_id} is already completed.", request_id=request_id
            )
        else:
            return target
        logger.warning("{}", error)
        return None

    def _require_role(self, role: Role, action: str) -> None:
        if self.role != role:
            raise WorkflowError(f"Role {self.role.value} cannot {action} requests this way")

    @staticmethod
    def _pending_target(action: PendingAction, flow: str) -> str:
        if action.state != FlowState.CONFIRMING or action.request_id is None:
            raise WorkflowError(f"No {flow} confirmation is pending")
        return action.request_id


def parse_time_of_day(value: str) -> tuple[int, int]:
    match = _TIME_OF_DAY_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time of day: {value}")
    return int(match.group("hour")), int(match.group("minute"))


def same_day_completion(
    request_time: datetime, hour: int, minute: int, tz: tzinfo | None = None
) -> datetime:
    """Request date with the given wall-clock hour/minute; seconds are zeroed."""

    local = request_time
    if request_time.tzinfo is not None:
        local = request_time.astimezone(tz)
    return local.replace(hour=hour, minute=minute, second=0, microsecond=0)
