from datetime import timedelta, timezone
from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.api import get_projector
from app.main import create_app
from conftest import NOW, FakeSocketClient, SnapshotServer, make_reading, wire_record
from services.ingestion import IngestionService
from services.projection import ChartProjector
from sources.push import PushChannel
from sources.snapshot import SnapshotClient


@pytest.fixture
def services() -> List[IngestionService]:
    return []


@pytest.fixture
def api_client(
    monkeypatch, services, snapshot_server: SnapshotServer, fake_socket: FakeSocketClient
) -> Iterator[TestClient]:
    def build_test_ingestion(token=None) -> IngestionService:
        if not services:
            services.append(
                IngestionService(
                    snapshot_client=SnapshotClient(
                        "http://sensors.test", "/dados-sensores", transport=snapshot_server.transport
                    ),
                    channel=PushChannel(
                        "http://sensors.test", "sensorDataUpdate", client_factory=lambda: fake_socket
                    ),
                    token="secret",
                )
            )
        return services[0]

    build_test_ingestion.cache_clear = lambda: None  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_ingestion", build_test_ingestion)
    monkeypatch.setattr("app.api.build_default_ingestion", build_test_ingestion)

    snapshot_server.serve(
        [
            make_reading("1", timedelta(seconds=40), 20.0),
            make_reading("2", timedelta(seconds=30), 25.0),
            make_reading("1", timedelta(hours=3), 18.0),
        ]
    )

    app = create_app()
    app.dependency_overrides[get_projector] = lambda: ChartProjector(
        display_tz=timezone.utc, clock=lambda: NOW
    )
    with TestClient(app) as client:
        yield client


def test_lifespan_loads_snapshot_and_releases_channel(
    monkeypatch, snapshot_server: SnapshotServer, fake_socket: FakeSocketClient
) -> None:
    service = IngestionService(
        snapshot_client=SnapshotClient(
            "http://sensors.test", "/dados-sensores", transport=snapshot_server.transport
        ),
        channel=PushChannel(
            "http://sensors.test", "sensorDataUpdate", client_factory=lambda: fake_socket
        ),
        token="secret",
    )
    cleared = []

    def build_test_ingestion(token=None) -> IngestionService:
        return service

    build_test_ingestion.cache_clear = lambda: cleared.append(True)  # type: ignore[attr-defined]
    monkeypatch.setattr("app.main.build_default_ingestion", build_test_ingestion)
    monkeypatch.setattr("app.api.build_default_ingestion", build_test_ingestion)
    snapshot_server.serve([make_reading("1"), make_reading("2")])

    with TestClient(create_app()) as client:
        assert len(client.get("/readings").json()) == 2
        assert fake_socket.connect_calls == [("http://sensors.test", {"token": "Bearer secret"})]
        assert fake_socket.disconnect_calls == 0

    assert fake_socket.disconnect_calls == 1
    assert service.store.closed
    assert cleared == [True]


def test_chart_defaults_to_settings_selection(api_client: TestClient) -> None:
    response = api_client.get("/chart")

    assert response.status_code == 200
    body = response.json()
    assert body["sensor_id"] == "1"
    assert body["environment_name"] == "Kitchen"
    assert body["chart_type"] == "line"
    assert body["data"]["labels"] == ["11:59:20"]
    dataset = body["data"]["datasets"][0]
    assert dataset["data"] == [20.0]
    assert dataset["borderColor"] == "rgb(205, 1, 1)"


def test_chart_selection_query(api_client: TestClient) -> None:
    response = api_client.get(
        "/chart", params={"environment": "1", "window": "last24Hours", "chart_type": "bar"}
    )

    body = response.json()
    assert body["chart_type"] == "bar"
    assert body["data"]["datasets"][0]["data"] == [20.0, 18.0]


def test_chart_for_empty_environment(api_client: TestClient) -> None:
    response = api_client.get("/chart", params={"environment": "4"})

    assert response.status_code == 200
    body = response.json()
    assert body["environment_name"] == "Office"
    assert body["data"]["labels"] == []
    assert body["data"]["datasets"][0]["data"] == []


def test_pushed_reading_reaches_chart(api_client: TestClient, fake_socket: FakeSocketClient) -> None:
    fake_socket.push("sensorDataUpdate", wire_record(make_reading("2", timedelta(seconds=5), 26.0)))
    fake_socket.push("sensorDataUpdate", wire_record(make_reading("2", timedelta(seconds=5), 26.0)))

    body = api_client.get("/chart", params={"environment": "2"}).json()

    assert body["data"]["datasets"][0]["data"] == [25.0, 26.0]


def test_refresh_replaces_store(api_client: TestClient, snapshot_server: SnapshotServer) -> None:
    snapshot_server.serve([make_reading("3", timedelta(seconds=1), 19.0)])

    response = api_client.post("/refresh")

    assert response.status_code == 200
    assert response.json() == {"refreshed": True, "reading_count": 1}


def test_refresh_failure_keeps_readings(api_client: TestClient, snapshot_server: SnapshotServer) -> None:
    snapshot_server.status_code = 503

    response = api_client.post("/refresh")

    assert response.status_code == 200
    assert response.json() == {"refreshed": False, "reading_count": 3}


def test_picker_endpoints(api_client: TestClient) -> None:
    environments = api_client.get("/environments").json()
    windows = api_client.get("/windows").json()

    assert environments[0] == {"value": "1", "label": "Kitchen"}
    assert len(environments) == 4
    assert windows[0] == {"value": "lastHour", "label": "Last hour"}


def test_ui_page_renders_pickers(api_client: TestClient) -> None:
    response = api_client.get("/ui", params={"environment": "2", "chart_type": "bar"})

    assert response.status_code == 200
    assert "Living Room" in response.text
    assert '<option value="2" selected>' in response.text


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
