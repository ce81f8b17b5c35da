"""CSV export of the request list."""

from __future__ import annotations

import csv
from datetime import datetime, tzinfo
from typing import Iterable, TextIO

from bay_requests.models import ServiceRequest

CSV_HEADERS = [
    "Request ID",
    "Status",
    "Service Type",
    "Requester Name",
    "Requester Number",
    "Aircraft Bay",
    "Flight Number",
    "ETA",
    "Request Time",
    "Completion Time",
    "Delivery Staff Name",
    "Delivery Staff Number",
]

MISSING = "N/A"


def format_timestamp(moment: datetime | None, tz: tzinfo | None = None) -> str:
    if moment is None:
        return MISSING
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.strftime("%Y-%m-%d %H:%M")


def to_row(req: ServiceRequest, tz: tzinfo | None = None) -> list[str]:
    return [
        req.id,
        req.status.value,
        req.service_type.value,
        req.staff_name,
        req.staff_number,
        req.aircraft_bay,
        req.flight_number,
        req.aircraft_eta,
        format_timestamp(req.request_time, tz),
        format_timestamp(req.completion_time, tz),
        req.delivery_staff_name or MISSING,
        req.delivery_staff_number or MISSING,
    ]


def write_csv(requests: Iterable[ServiceRequest], stream: TextIO, tz: tzinfo | None = None) -> int:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    count = 0
    for req in requests:
        writer.writerow(to_row(req, tz))
        count += 1
    return count
