from __future__ import annotations

from typing import List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from app.schemas import ReadingPayload
from models.records import SensorReading

_SNAPSHOT_ADAPTER = TypeAdapter(List[ReadingPayload])


class SnapshotError(RuntimeError):
    """Raised when a snapshot cannot be fetched or decoded."""

    def __init__(self, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class SnapshotClient:
    """Fetches the full list of known readings from the sensor API."""

    def __init__(
        self,
        base_url: str,
        path: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self.path = path
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch(self, token: Optional[str] = None) -> List[SensorReading]:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = self._client.get(self.path, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SnapshotError(
                "non-success response status", status_code=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise SnapshotError(f"transport failure: {exc}") from exc

        try:
            payloads = _SNAPSHOT_ADAPTER.validate_json(response.content)
        except ValidationError as exc:
            raise SnapshotError(
                f"malformed payload: {exc.error_count()} invalid field(s)",
                status_code=response.status_code,
            ) from exc
        return [payload.to_reading() for payload in payloads]
