from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_BASE_URL_ENV = "API_BASE_URL"
_SNAPSHOT_PATH_ENV = "SNAPSHOT_PATH"
_PUSH_EVENT_ENV = "PUSH_EVENT_NAME"
_TOKEN_ENV = "API_TOKEN"
_REQUEST_TIMEOUT_ENV = "REQUEST_TIMEOUT"
_ENVIRONMENT_ENV = "DEFAULT_ENVIRONMENT"
_WINDOW_ENV = "DEFAULT_TIME_WINDOW"
_CHART_TYPE_ENV = "DEFAULT_CHART_TYPE"
_TIMEZONE_ENV = "DISPLAY_TIMEZONE"
_UI_POLL_ENV = "UI_POLL_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    snapshot_path: str
    push_event_name: str
    api_token: Optional[str]
    request_timeout: float
    default_environment: str
    default_time_window: str
    default_chart_type: str
    display_timezone: str
    ui_poll_seconds: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_path(name: str, default: str) -> str:
    path = _read_str_env(name, default)
    return path if path.startswith("/") else f"/{path}"


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_base_url=_read_str_env(_BASE_URL_ENV, "http://localhost:3000").rstrip("/"),
        snapshot_path=_read_path(_SNAPSHOT_PATH_ENV, "/dados-sensores"),
        push_event_name=_read_str_env(_PUSH_EVENT_ENV, "sensorDataUpdate"),
        api_token=_read_optional_env(_TOKEN_ENV, None),
        request_timeout=_read_positive_float(_REQUEST_TIMEOUT_ENV, 10.0),
        default_environment=_read_str_env(_ENVIRONMENT_ENV, "1"),
        default_time_window=_read_str_env(_WINDOW_ENV, "lastHour"),
        default_chart_type=_read_str_env(_CHART_TYPE_ENV, "line").lower(),
        display_timezone=_read_str_env(_TIMEZONE_ENV, "UTC"),
        ui_poll_seconds=_read_positive_float(_UI_POLL_ENV, 5.0),
        log_level=_read_log_level("INFO"),
    )
