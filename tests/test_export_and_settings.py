from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest

from bay_requests.export import CSV_HEADERS, write_csv
from bay_requests.models import RequestStatus, ServiceRequest, ServiceType
from bay_requests.shared.settings import ClientSettings


def test_write_csv_rows_and_missing_values() -> None:
    pending = ServiceRequest(
        id="p1",
        staff_name="Ada, Ops",
        staff_number="S1",
        aircraft_bay="B12",
        flight_number="QF1",
        request_time=datetime(2024, 3, 5, 8, 0),
        status=RequestStatus.PENDING,
        service_type=ServiceType.CONNECT,
        aircraft_eta="08:45",
    )
    delivered = ServiceRequest(
        id="c1",
        staff_name="Bo",
        staff_number="S2",
        aircraft_bay="B3",
        flight_number="VA2",
        request_time=datetime(2024, 3, 4, 22, 0, tzinfo=timezone.utc),
        completion_time=datetime(2024, 3, 5, 4, 30, tzinfo=timezone.utc),
        status=RequestStatus.COMPLETED,
        service_type=ServiceType.REPLACE,
        delivery_staff_name="Cy",
        delivery_staff_number="D9",
    )
    stream = io.StringIO()

    count = write_csv([pending, delivered], stream, tz=timezone(timedelta(hours=10)))

    lines = stream.getvalue().splitlines()
    assert count == 2
    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == (
        'p1,PENDING,CONNECT,"Ada, Ops",S1,B12,QF1,08:45,2024-03-05 08:00,N/A,N/A,N/A'
    )
    assert lines[2] == (
        "c1,COMPLETED,REPLACE,Bo,S2,B3,VA2,,2024-03-05 08:00,2024-03-05 14:30,Cy,D9"
    )


def test_settings_from_env_defaults() -> None:
    settings = ClientSettings.from_env({})

    assert settings.api_base_url == "http://localhost:3000/api"
    assert settings.transport == "api"
    assert settings.timeout_s == 15.0
    assert settings.notification_limit == 50
    assert settings.tzinfo() is None


def test_settings_from_env_overrides_and_bad_numbers() -> None:
    settings = ClientSettings.from_env(
        {
            "BAY_REQUESTS_API_URL": "https://ops.example/api",
            "BAY_REQUESTS_TRANSPORT": "IN_MEMORY",
            "BAY_REQUESTS_TIMEOUT_S": "abc",
            "BAY_REQUESTS_NOTIFICATION_LIMIT": "5",
            "BAY_REQUESTS_TZ": "UTC",
            "BAY_REQUESTS_LOG_LEVEL": "debug",
        }
    )

    assert settings.api_base_url == "https://ops.example/api"
    assert settings.transport == "in_memory"
    assert settings.timeout_s == 15.0
    assert settings.notification_limit == 5
    assert settings.log_level == "DEBUG"
    assert settings.tzinfo() is not None


def test_settings_unknown_timezone() -> None:
    with pytest.raises(ValueError):
        ClientSettings(timezone="Mars/Olympus_Mons").tzinfo()
