from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from models.records import SensorReading

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_reading(
    sensor_id: str = "1",
    ago: timedelta = timedelta(seconds=30),
    temperature: float = 21.5,
) -> SensorReading:
    return SensorReading(sensor_id=sensor_id, timestamp=NOW - ago, temperature=temperature)


def wire_record(reading: SensorReading) -> Dict[str, Any]:
    return {
        "sensor_id": int(reading.sensor_id) if reading.sensor_id.isdigit() else reading.sensor_id,
        "timestamp": reading.timestamp.isoformat().replace("+00:00", "Z"),
        "temperatura": reading.temperature,
    }


class FakeSocketClient:
    """Stands in for ``socketio.Client`` without opening a connection."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.handlers: Dict[str, Callable[..., Any]] = {}
        self.connect_calls: List[tuple[str, Optional[dict]]] = []
        self.disconnect_calls = 0

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers[event] = handler

    def connect(self, url: str, auth: Optional[dict] = None, wait_timeout: float = 1) -> None:
        if self.fail:
            raise SocketIOConnectionError("Connection refused by the server")
        self.connect_calls.append((url, auth))
        self.handlers["connect"]()

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.handlers["disconnect"]()

    def push(self, event: str, data: Any) -> Any:
        return self.handlers[event](data)


class SnapshotServer:
    """Programmable ``httpx.MockTransport`` handler for the snapshot endpoint."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body: Any = []
        self.error: Optional[Exception] = None
        self.requests: List[httpx.Request] = []

    def serve(self, readings: Iterable[SensorReading]) -> None:
        self.status_code = 200
        self.body = [wire_record(reading) for reading in readings]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        content = self.body if isinstance(self.body, (bytes, str)) else json.dumps(self.body)
        return httpx.Response(self.status_code, content=content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture()
def fake_socket() -> FakeSocketClient:
    return FakeSocketClient()


@pytest.fixture()
def snapshot_server() -> SnapshotServer:
    return SnapshotServer()
