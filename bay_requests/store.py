"""Authoritative in-memory copy of service requests, synchronized through a transport."""

from __future__ import annotations

import itertools
import threading
import time
from typing import Any

from loguru import logger

from bay_requests.errors import BayRequestsError, LocalStateError
from bay_requests.models import NotificationMessage, NotificationType, RequestDraft, ServiceRequest
from bay_requests.shared.settings import DEFAULT_NOTIFICATION_LIMIT
from bay_requests.transcoder import decode, decode_many, encode_create, encode_update
from bay_requests.transport.contracts import RequestTransport

LOAD_ERROR_TEXT = "Failed to load service requests. Please try again later."


class NotificationQueue:
    """Insertion-ordered outcome messages; oldest entries drop once the limit is reached."""

    def __init__(self, limit: int = DEFAULT_NOTIFICATION_LIMIT) -> None:
        self.limit = max(1, int(limit))
        self._items: list[NotificationMessage] = []
        self._counter = itertools.count(1)

    def push(self, message: str, type_: NotificationType) -> NotificationMessage:
        notification = NotificationMessage(
            id=f"notif-{time.time_ns()}-{next(self._counter)}",
            message=message,
            type=type_,
        )
        self._items.append(notification)
        overflow = len(self._items) - self.limit
        if overflow > 0:
            del self._items[:overflow]
        return notification

    def dismiss(self, notification_id: str) -> bool:
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                del self._items[index]
                return True
        return False

    def snapshot(self) -> list[NotificationMessage]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)


class RequestStore:
    """Owns the canonical request list.

    Mutations go through the transport first and touch local state only once
    the server has answered. Every outcome enqueues exactly one notification.
    """

    def __init__(
        self,
        *,
        transport: RequestTransport,
        notification_limit: int = DEFAULT_NOTIFICATION_LIMIT,
    ) -> None:
        self.transport = transport
        self._lock = threading.Lock()
        self._requests: list[ServiceRequest] = []
        self._in_flight: set[str] = set()
        self._notifications = NotificationQueue(limit=notification_limit)
        self.is_loading = False
        self.error: str | None = None

    @property
    def requests(self) -> list[ServiceRequest]:
        with self._lock:
            return list(self._requests)

    @property
    def notifications(self) -> list[NotificationMessage]:
        with self._lock:
            return self._notifications.snapshot()

    def get(self, request_id: str) -> ServiceRequest | None:
        with self._lock:
            return next((req for req in self._requests if req.id == request_id), None)

    def notify(self, message: str, type_: NotificationType) -> NotificationMessage:
        with self._lock:
            return self._notifications.push(message, type_)

    def dismiss(self, notification_id: str) -> bool:
        with self._lock:
            return self._notifications.dismiss(notification_id)

    def load(self) -> bool:
        with self._lock:
            self.is_loading = True
            self.error = None
        try:
            rows = self.transport.list_requests()
            decoded, skipped = decode_many(rows)
        except BayRequestsError as exc:
            logger.error("Loading service requests failed: {}", exc)
            with self._lock:
                self.error = LOAD_ERROR_TEXT
            self.notify("Failed to load service requests from the server.", "error")
            return False
        finally:
            with self._lock:
                self.is_loading = False

        with self._lock:
            self._requests = _dedupe_by_id(decoded)
        logger.info("Loaded {} service requests", len(decoded))
        if skipped:
            self.notify(
                f"{skipped} service request record(s) could not be read and were skipped.",
                "error",
            )
        return True

    def create(self, draft: RequestDraft) -> ServiceRequest | None:
        try:
            created = decode(self.transport.create_request(encode_create(draft)))
        except BayRequestsError as exc:
            logger.error("Creating service request failed: {}", exc)
            self.notify("Failed to create service request.", "error")
            return None

        with self._lock:
            self._requests = [created] + [req for req in self._requests if req.id != created.id]
            self._notifications.push("Service request created successfully.", "success")
        logger.info("Created service request {}", created.id)
        return created

    def update(
        self,
        request_id: str,
        fields: dict[str, Any],
        *,
        success_message: str = "Service request updated.",
        success_type: NotificationType = "success",
        failure_message: str = "Failed to update service request.",
    ) -> ServiceRequest | None:
        try:
            body = encode_update(fields)
            self._claim(request_id)
        except (ValueError, LocalStateError) as exc:
            logger.warning("{}", exc)
            self.notify(failure_message, "error")
            return None

        try:
            updated = decode(self.transport.update_request(request_id, body))
        except BayRequestsError as exc:
            logger.error("Updating service request {} failed: {}", request_id, exc)
            self.notify(failure_message, "error")
            return None
        finally:
            self._release(request_id)

        with self._lock:
            if not any(req.id == request_id for req in self._requests):
                logger.warning("Updated service request {} is no longer held locally", request_id)
            self._requests = [updated if req.id == request_id else req for req in self._requests]
            self._notifications.push(success_message, success_type)
        logger.info("Updated service request {}", request_id)
        return updated

    def delete(self, request_id: str) -> bool:
        try:
            self._claim(request_id)
        except LocalStateError as exc:
            logger.warning("{}", exc)
            self.notify("Failed to delete request.", "error")
            return False

        try:
            self.transport.delete_request(request_id)
        except BayRequestsError as exc:
            logger.error("Deleting service request {} failed: {}", request_id, exc)
            self.notify("Failed to delete request.", "error")
            return False
        finally:
            self._release(request_id)

        with self._lock:
            self._requests = [req for req in self._requests if req.id != request_id]
            self._notifications.push("Request has been deleted.", "info")
        logger.info("Deleted service request {}", request_id)
        return True

    def is_in_flight(self, request_id: str) -> bool:
        with self._lock:
            return request_id in self._in_flight

    def _claim(self, request_id: str) -> None:
        with self._lock:
            if request_id in self._in_flight:
                raise LocalStateError(
                    f"Request {request_id} already has a mutation in flight", request_id=request_id
                )
            self._in_flight.add(request_id)

    def _release(self, request_id: str) -> None:
        with self._lock:
            self._in_flight.discard(request_id)


def _dedupe_by_id(requests: list[ServiceRequest]) -> list[ServiceRequest]:
    seen: set[str] = set()
    unique: list[ServiceRequest] = []
    for req in requests:
        if req.id in seen:
            logger.warning("Dropping duplicate service request id {}", req.id)
            continue
        seen.add(req.id)
        unique.append(req)
    return unique
