"""Runtime settings for the service-request client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from zoneinfo import ZoneInfo

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_NOTIFICATION_LIMIT = 50


@dataclass(frozen=True)
class ClientSettings:
    """Remote endpoint, transport choice and local presentation settings."""

    api_base_url: str = DEFAULT_API_BASE_URL
    transport: str = "api"
    timeout_s: float = DEFAULT_TIMEOUT_S
    notification_limit: int = DEFAULT_NOTIFICATION_LIMIT
    timezone: str | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "ClientSettings":
        source = os.environ if env is None else env
        timeout_s = _parse_float(source.get("BAY_REQUESTS_TIMEOUT_S"), DEFAULT_TIMEOUT_S)
        limit = _parse_int(
            source.get("BAY_REQUESTS_NOTIFICATION_LIMIT"), DEFAULT_NOTIFICATION_LIMIT
        )
        return cls(
            api_base_url=(source.get("BAY_REQUESTS_API_URL") or DEFAULT_API_BASE_URL).strip(),
            transport=(source.get("BAY_REQUESTS_TRANSPORT") or "api").strip().lower(),
            timeout_s=timeout_s if timeout_s > 0 else DEFAULT_TIMEOUT_S,
            notification_limit=limit if limit > 0 else DEFAULT_NOTIFICATION_LIMIT,
            timezone=(source.get("BAY_REQUESTS_TZ") or "").strip() or None,
            log_level=(source.get("BAY_REQUESTS_LOG_LEVEL") or "WARNING").strip().upper(),
        )

    def tzinfo(self) -> tzinfo | None:
        """Zone used for calendar dates; None means the system local zone."""

        if self.timezone is None:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {self.timezone}") from exc


def get_client_settings(env: dict[str, str] | None = None) -> ClientSettings:
    return ClientSettings.from_env(env)


def _parse_float(value: str | None, default: float) -> float:
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default
