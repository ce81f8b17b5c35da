"""REST transport for the service-request API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests
from loguru import logger

from bay_requests.errors import TransportError


class RequestsAPITransport:
    def __init__(
        self,
        base_url: str = "http://localhost:3000/api",
        session: requests.Session | None = None,
        timeout_s: float = 15,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def list_requests(self) -> list[dict[str, Any]]:
        payload = self._request("GET", "/requests")
        if not isinstance(payload, list):
            raise TransportError(
                f"API Error: expected a list of requests, got {type(payload).__name__}"
            )
        return payload

    def create_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/requests", json=payload)

    def update_request(self, request_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return self._request("PATCH", f"/requests/{_quote_id(request_id)}", json=fields)

    def delete_request(self, request_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/requests/{_quote_id(request_id)}")

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        logger.debug("API: {} {}", method, path)
        headers = {"Accept": "application/json"}
        if json is not None:
            headers["Content-Type"] = "application/json"
        try:
            response = self.session.request(
                method=method,
                url=f"{self.base_url}{path}",
                headers=headers,
                json=json,
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise TransportError(f"API Error: {method} {path} failed - {exc}") from exc

        if not 200 <= response.status_code < 300:
            status_line = " ".join(
                part for part in (str(response.status_code), response.reason or "") if part
            )
            raise TransportError(
                f"API Error: {status_line} - {response.text}", status=response.status_code
            )

        content_type = (response.headers or {}).get("content-type", "")
        if "application/json" not in content_type or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"API Error: {response.status_code} invalid JSON body", status=response.status_code
            ) from exc


def _quote_id(request_id: str) -> str:
    return quote(str(request_id), safe="")
