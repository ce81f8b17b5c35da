from __future__ import annotations

import json
from typing import Any

import pytest
from typer.testing import CliRunner

from bay_requests import cli
from bay_requests.transport.inmemory import InMemoryRequestTransport


def _wire(record_id: str, **overrides: Any) -> dict[str, Any]:
    record = {
        "id": record_id,
        "staff_name": "Ada Ops",
        "staff_number": "S100",
        "aircraft_bay": "B12",
        "flight_number": "QF1",
        "request_time": "2024-03-05T08:00:00",
        "status": "PENDING",
        "service_type": "CONNECT",
        "aircraft_eta": "",
    }
    record.update(overrides)
    return record


@pytest.fixture
def transport(monkeypatch: pytest.MonkeyPatch) -> InMemoryRequestTransport:
    fake = InMemoryRequestTransport(
        records=[
            _wire("a"),
            _wire(
                "b",
                status="COMPLETED",
                completion_time="2024-03-05T09:00:00",
                service_type="REPLACE",
            ),
        ]
    )
    monkeypatch.setattr(cli, "build_transport_from_env", lambda **_kwargs: fake)
    return fake


def test_list_json_for_delivery_role_shows_pending_only(
    transport: InMemoryRequestTransport,
) -> None:
    result = CliRunner().invoke(cli.app, ["list", "--role", "delivery", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["title"] == "Pending Service Tasks"
    assert payload["pending_count"] == 1
    assert [item["id"] for item in payload["items"]] == ["a"]
    assert payload["items"][0]["staffName"] == "Ada Ops"


def test_list_with_type_filter_for_requester(transport: InMemoryRequestTransport) -> None:
    result = CliRunner().invoke(cli.app, ["list", "--type", "replace"])

    assert result.exit_code == 0, result.output
    assert "All Service Requests (1 pending)" in result.stdout
    assert "b  COMPLETED  REPLACE" in result.stdout
    assert "a  PENDING" not in result.stdout


def test_create_prints_new_request(transport: InMemoryRequestTransport) -> None:
    result = CliRunner().invoke(
        cli.app,
        [
            "create",
            "--staff-name",
            "Ada",
            "--staff-number",
            "S1",
            "--bay",
            "C4",
            "--flight",
            "NZ7",
            "--type",
            "disconnect",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Service request created successfully." in result.output
    assert len(transport.records) == 3


def test_complete_requires_confirmation(transport: InMemoryRequestTransport) -> None:
    declined = CliRunner().invoke(cli.app, ["complete", "a"], input="n\n")
    assert declined.exit_code == 0
    assert "Cancelled." in declined.output
    assert transport.records["a"]["status"] == "PENDING"

    accepted = CliRunner().invoke(cli.app, ["complete", "a"], input="y\n")
    assert accepted.exit_code == 0, accepted.output
    assert transport.records["a"]["status"] == "COMPLETED"
    assert transport.records["a"]["completion_time"]


def test_deliver_uses_request_day(transport: InMemoryRequestTransport) -> None:
    result = CliRunner().invoke(
        cli.app, ["deliver", "a", "--name", "Bo", "--number", "D7", "--at", "14:30"]
    )

    assert result.exit_code == 0, result.output
    assert transport.records["a"]["completion_time"] == "2024-03-05T14:30:00"
    assert transport.records["a"]["delivery_staff_name"] == "Bo"


def test_failed_delete_exits_non_zero(transport: InMemoryRequestTransport) -> None:
    transport.fail_next("delete")

    result = CliRunner().invoke(cli.app, ["delete", "a", "--yes"])

    assert result.exit_code == 1
    assert "Failed to delete request." in result.output
    assert "a" in transport.records


def test_export_to_stdout(transport: InMemoryRequestTransport) -> None:
    result = CliRunner().invoke(cli.app, ["export"])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0].startswith("Request ID,Status,Service Type")
    assert len(lines) == 3


def test_load_failure_exits_non_zero(transport: InMemoryRequestTransport) -> None:
    transport.fail_next("list", status=503)

    result = CliRunner().invoke(cli.app, ["list"])

    assert result.exit_code == 1
    assert "Failed to load service requests from the server." in result.output


def test_complete_already_completed_request_exits_non_zero(
    transport: InMemoryRequestTransport,
) -> None:
    result = CliRunner().invoke(cli.app, ["complete", "b", "--yes"])

    assert result.exit_code == 1
    assert "Failed to mark request as complete." in result.output
    assert transport.records["b"]["completion_time"] == "2024-03-05T09:00:00"
