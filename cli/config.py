from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import get_settings

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_DURATION = 60.0

_POLL_INTERVAL_ENV = "CLI_POLL_INTERVAL"
_DURATION_ENV = "CLI_WATCH_DURATION"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str
    snapshot_path: str
    event_name: str
    token: Optional[str] = None
    timeout: float = 10.0
    poll_interval: float = DEFAULT_POLL_INTERVAL
    duration: float = DEFAULT_DURATION


def _read_float(value: Optional[str], default: float) -> float:
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


def load_config(
    base_url: Optional[str] = None,
    token: Optional[str] = None,
    poll_interval: Optional[float] = None,
    duration: Optional[float] = None,
) -> CLIConfig:
    settings = get_settings()
    url = base_url or settings.api_base_url
    if poll_interval is None:
        poll_interval = _read_float(os.getenv(_POLL_INTERVAL_ENV), DEFAULT_POLL_INTERVAL)
    if duration is None:
        duration = _read_float(os.getenv(_DURATION_ENV), DEFAULT_DURATION)
    return CLIConfig(
        base_url=url.rstrip("/"),
        snapshot_path=settings.snapshot_path,
        event_name=settings.push_event_name,
        token=token or settings.api_token,
        timeout=settings.request_timeout,
        poll_interval=poll_interval,
        duration=duration,
    )
