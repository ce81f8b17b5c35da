"""Role-scoped, filtered and sorted projections over the request list."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Literal, Union

from bay_requests.models import RequestStatus, Role, ServiceRequest, ServiceType

ALL: Literal["ALL"] = "ALL"

StatusFilter = Union[RequestStatus, Literal["ALL"]]
ServiceTypeFilter = Union[ServiceType, Literal["ALL"]]

_STATUS_RANK = {RequestStatus.PENDING: 0, RequestStatus.COMPLETED: 1}

DELIVERY_TITLES = {
    RequestStatus.PENDING: "Pending Service Tasks",
    RequestStatus.COMPLETED: "Completed Service Tasks",
    ALL: "All Service Tasks",
}
REQUESTER_TITLE = "All Service Requests"


@dataclass(frozen=True)
class ViewFilters:
    status: StatusFilter = ALL
    service_type: ServiceTypeFilter = ALL
    request_date: date | None = None
    search: str = ""

    @classmethod
    def build(
        cls,
        status: str = ALL,
        service_type: str = ALL,
        date_filter: str | date | None = None,
        search: str = "",
    ) -> "ViewFilters":
        """Coerce raw input values (e.g. from the command line) into filters."""

        parsed_status: StatusFilter = (
            ALL if status.upper() == ALL else RequestStatus(status.upper())
        )
        parsed_type: ServiceTypeFilter = (
            ALL if service_type.upper() == ALL else ServiceType(service_type.upper())
        )
        parsed_date: date | None
        if isinstance(date_filter, date):
            parsed_date = date_filter
        elif date_filter:
            parsed_date = date.fromisoformat(date_filter.strip())
        else:
            parsed_date = None
        return cls(
            status=parsed_status,
            service_type=parsed_type,
            request_date=parsed_date,
            search=search,
        )


@dataclass(frozen=True)
class RequestView:
    items: list[ServiceRequest]
    pending_count: int
    title: str


def default_filters(role: Role) -> ViewFilters:
    if role == Role.DELIVERY:
        return ViewFilters(status=RequestStatus.PENDING)
    return ViewFilters()


def sort_requests(requests: Iterable[ServiceRequest]) -> list[ServiceRequest]:
    """Pending before completed; newest request first within a status."""

    newest_first = sorted(requests, key=lambda req: req.request_time.timestamp(), reverse=True)
    return sorted(newest_first, key=lambda req: _STATUS_RANK[req.status])


def pending_count(requests: Iterable[ServiceRequest]) -> int:
    return sum(1 for req in requests if req.is_pending)


def civil_date(moment: datetime, tz: tzinfo | None = None) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def matches(req: ServiceRequest, filters: ViewFilters, tz: tzinfo | None = None) -> bool:
    if filters.status != ALL and req.status != filters.status:
        return False
    if filters.service_type != ALL and req.service_type != filters.service_type:
        return False
    if filters.request_date is not None:
        if civil_date(req.request_time, tz) != filters.request_date:
            return False
    term = filters.search.strip().lower()
    if term:
        haystacks = (req.flight_number, req.aircraft_bay, req.staff_name)
        if not any(term in value.lower() for value in haystacks):
            return False
    return True


def project(
    requests: Iterable[ServiceRequest],
    role: Role,
    filters: ViewFilters | None = None,
    tz: tzinfo | None = None,
) -> RequestView:
    source = list(requests)
    active = filters or default_filters(role)
    ordered = sort_requests(source)
    if role == Role.DELIVERY:
        active = ViewFilters(status=active.status)
        title = DELIVERY_TITLES[active.status]
    else:
        title = REQUESTER_TITLE
    return RequestView(
        items=[req for req in ordered if matches(req, active, tz)],
        pending_count=pending_count(source),
        title=title,
    )
