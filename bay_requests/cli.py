"""bay-requests CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from pydantic import ValidationError

from bay_requests.export import write_csv
from bay_requests.models import RequestDraft, Role, ServiceRequest, ServiceType
from bay_requests.shared.logging import configure_logging
from bay_requests.shared.settings import ClientSettings, get_client_settings
from bay_requests.store import RequestStore
from bay_requests.transport.contracts import build_transport_from_env
from bay_requests.views import ViewFilters, default_filters, project
from bay_requests.workflow import (
    CONFIRM_COMPLETE_PROMPT,
    CONFIRM_DELETE_PROMPT,
    MutationWorkflowController,
)

app = typer.Typer(add_completion=False, help="bay-requests: aircraft bay service requests")


def _open_store() -> tuple[RequestStore, ClientSettings]:
    settings = get_client_settings()
    configure_logging(settings.log_level)
    store = RequestStore(
        transport=build_transport_from_env(settings=settings),
        notification_limit=settings.notification_limit,
    )
    if not store.load():
        _flush_notifications(store)
        raise typer.Exit(code=1)
    return store, settings


def _flush_notifications(store: RequestStore) -> bool:
    """Print and dismiss queued notifications; returns True if any was an error."""

    had_error = False
    for notification in store.notifications:
        is_error = notification.type == "error"
        had_error = had_error or is_error
        typer.echo(f"[{notification.type}] {notification.message}", err=is_error)
        store.dismiss(notification.id)
    return had_error


def _finish(store: RequestStore) -> None:
    if _flush_notifications(store):
        raise typer.Exit(code=1)


def _parse_role(role: str) -> Role:
    normalized = role.strip().upper()
    for candidate in Role:
        if normalized in {candidate.value, candidate.name}:
            return candidate
    raise typer.BadParameter(f"Unknown role: {role} (expected 'request' or 'delivery')")


def _summary_line(req: ServiceRequest) -> str:
    parts = [
        req.id,
        req.status.value,
        req.service_type.value,
        f"bay={req.aircraft_bay}",
        f"flight={req.flight_number}",
        f"by={req.staff_name}",
        f"requested={req.request_time.isoformat()}",
    ]
    if req.completion_time is not None:
        parts.append(f"completed={req.completion_time.isoformat()}")
    return "  ".join(parts)


@app.command(name="list")
def list_requests(
    role: str = typer.Option("request", "--role"),
    status: str = typer.Option("", "--status"),
    service_type: str = typer.Option("ALL", "--type"),
    date: str = typer.Option("", "--date", help="YYYY-MM-DD"),
    search: str = typer.Option("", "--search"),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    """Show the role-scoped view of service requests."""
    parsed_role = _parse_role(role)
    store, settings = _open_store()
    try:
        filters = ViewFilters.build(
            status=status or default_filters(parsed_role).status,
            service_type=service_type,
            date_filter=date,
            search=search,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    view = project(store.requests, parsed_role, filters, tz=settings.tzinfo())
    if as_json:
        payload = {
            "title": view.title,
            "pending_count": view.pending_count,
            "items": [req.model_dump(by_alias=True, mode="json") for req in view.items],
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(f"{view.title} ({view.pending_count} pending)")
        if not view.items:
            typer.echo("No service requests.")
        for req in view.items:
            typer.echo(_summary_line(req))
    _finish(store)


@app.command()
def create(
    staff_name: str = typer.Option(..., "--staff-name"),
    staff_number: str = typer.Option(..., "--staff-number"),
    aircraft_bay: str = typer.Option(..., "--bay"),
    flight_number: str = typer.Option(..., "--flight"),
    service_type: str = typer.Option(..., "--type"),
    aircraft_eta: str = typer.Option("", "--eta"),
) -> None:
    """Create a new service request."""
    try:
        draft = RequestDraft(
            staff_name=staff_name,
            staff_number=staff_number,
            aircraft_bay=aircraft_bay,
            flight_number=flight_number,
            service_type=ServiceType(service_type.strip().upper()),
            aircraft_eta=aircraft_eta,
        )
    except (ValueError, ValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    store, _settings = _open_store()
    created = store.create(draft)
    if created is not None:
        typer.echo(_summary_line(created))
    _finish(store)


@app.command()
def complete(
    request_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Mark a request as completed now (requester role)."""
    store, settings = _open_store()
    controller = MutationWorkflowController(store=store, role=Role.REQUESTER, tz=settings.tzinfo())
    controller.initiate_complete(request_id)
    if not yes and not typer.confirm(CONFIRM_COMPLETE_PROMPT):
        controller.cancel_complete()
        typer.echo("Cancelled.")
        raise typer.Exit(code=0)
    controller.confirm_complete()
    _finish(store)


@app.command()
def deliver(
    request_id: str,
    name: str = typer.Option(..., "--name"),
    number: str = typer.Option(..., "--number"),
    at: str = typer.Option(..., "--at", help="Completion time of day, HH:MM"),
) -> None:
    """Complete a delivery task on the day it was requested (delivery role)."""
    store, settings = _open_store()
    controller = MutationWorkflowController(store=store, role=Role.DELIVERY, tz=settings.tzinfo())
    controller.begin_delivery(request_id)
    updated = controller.submit_delivery(name, number, at)
    if updated is not None:
        typer.echo(_summary_line(updated))
    _finish(store)


@app.command()
def delete(
    request_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Permanently delete a request."""
    store, settings = _open_store()
    controller = MutationWorkflowController(store=store, role=Role.REQUESTER, tz=settings.tzinfo())
    controller.initiate_delete(request_id)
    if not yes and not typer.confirm(CONFIRM_DELETE_PROMPT):
        controller.cancel_delete()
        typer.echo("Cancelled.")
        raise typer.Exit(code=0)
    controller.confirm_delete()
    _finish(store)


@app.command()
def export(output: Path = typer.Option(None, "--output", "-o")) -> None:
    """Write all requests as CSV to a file or stdout."""
    store, settings = _open_store()
    if output is None:
        write_csv(store.requests, sys.stdout, tz=settings.tzinfo())
    else:
        with output.open("w", encoding="utf-8", newline="") as handle:
            count = write_csv(store.requests, handle, tz=settings.tzinfo())
        typer.echo(f"Wrote {count} requests to {output}")
    _finish(store)


if __name__ == "__main__":
    app()
