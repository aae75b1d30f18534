"""Snapshot and push ingestion into the in-memory reading store."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from functools import lru_cache
from threading import Lock
from typing import Any, Iterable, List, Optional, Set

from pydantic import ValidationError

from app.schemas import ReadingPayload
from models.records import SensorReading
from settings import get_settings
from sources.push import PushChannel, PushChannelError
from sources.snapshot import SnapshotClient, SnapshotError

logger = logging.getLogger(__name__)


class ReadingStore:
    """Insertion-ordered readings, deduplicated by timestamp on append.

    The store refuses every mutation once closed, so callbacks that land
    after teardown cannot change what the view sees.
    """

    def __init__(self) -> None:
        self._readings: List[SensorReading] = []
        self._timestamps: Set[datetime] = set()
        self._closed = False
        self._lock = Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def replace(self, readings: Iterable[SensorReading]) -> bool:
        items = list(readings)
        with self._lock:
            if self._closed:
                return False
            self._readings = items
            self._timestamps = {reading.timestamp for reading in items}
            return True

    def append(self, reading: SensorReading) -> bool:
        with self._lock:
            if self._closed or reading.timestamp in self._timestamps:
                return False
            self._readings.append(reading)
            self._timestamps.add(reading.timestamp)
            return True

    def readings(self) -> List[SensorReading]:
        with self._lock:
            return list(self._readings)

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)


def decode_push_event(payload: Any) -> SensorReading:
    """Decode one push event body; raises ``ValueError`` when malformed."""
    if isinstance(payload, (bytes, str)):
        payload = json.loads(payload)
    return ReadingPayload.model_validate(payload).to_reading()


class IngestionService:
    """Keeps the store in sync with the snapshot endpoint and push channel.

    All failures are logged and swallowed: callers only ever see a boolean
    outcome, and the store is left as it was.
    """

    def __init__(
        self,
        snapshot_client: SnapshotClient,
        channel: PushChannel,
        token: Optional[str] = None,
        store: Optional[ReadingStore] = None,
    ) -> None:
        self.snapshot_client = snapshot_client
        self.channel = channel
        self.token = token
        self.store = store if store is not None else ReadingStore()

    @property
    def active(self) -> bool:
        return not self.store.closed

    def load_snapshot(self) -> bool:
        """Replace the store with a fresh snapshot."""
        if not self.active:
            return False
        try:
            readings = self.snapshot_client.fetch(self.token)
        except SnapshotError as exc:
            logger.error(
                "Failed to load sensor snapshot",
                extra={"reason": exc.reason, "status_code": exc.status_code},
            )
            return False

        if not self.store.replace(readings):
            logger.info(
                "Discarding snapshot received after teardown",
                extra={"reading_count": len(readings)},
            )
            return False
        logger.info("Loaded sensor snapshot", extra={"reading_count": len(readings)})
        return True

    def refresh(self) -> bool:
        return self.load_snapshot()

    def subscribe(self, token: Optional[str] = None) -> bool:
        """Open the push channel; events are appended through ``handle_push``."""
        if not self.active:
            return False
        if self.channel.is_open:
            return True
        try:
            self.channel.open(token if token is not None else self.token, self.handle_push)
        except PushChannelError as exc:
            logger.error("Failed to open push channel", extra={"reason": str(exc)})
            return False
        return True

    def handle_push(self, payload: Any) -> bool:
        try:
            reading = decode_push_event(payload)
        except (ValueError, ValidationError) as exc:
            logger.error(
                "Dropping malformed push event",
                extra={"event": self.channel.event_name, "reason": str(exc)},
            )
            return False

        appended = self.store.append(reading)
        if not appended:
            logger.debug(
                "Ignoring push event",
                extra={
                    "sensor_id": reading.sensor_id,
                    "timestamp": reading.timestamp.isoformat(),
                    "reason": "closed" if self.store.closed else "duplicate",
                },
            )
        return appended

    def unsubscribe(self) -> None:
        """Tear down the channel and freeze the store; safe to call repeatedly."""
        self.store.close()
        self.channel.close()

    def shutdown(self) -> None:
        self.unsubscribe()
        self.snapshot_client.close()


@lru_cache
def build_default_ingestion(token: Optional[str] = None) -> IngestionService:
    """Factory that wires the ingestion service from settings."""
    settings = get_settings()
    snapshot_client = SnapshotClient(
        base_url=settings.api_base_url,
        path=settings.snapshot_path,
        timeout=settings.request_timeout,
    )
    channel = PushChannel(
        url=settings.api_base_url,
        event_name=settings.push_event_name,
        timeout=settings.request_timeout,
    )
    return IngestionService(
        snapshot_client=snapshot_client,
        channel=channel,
        token=token if token is not None else settings.api_token,
    )
