"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A single temperature observation from one environment's sensor."""

    sensor_id: str
    timestamp: datetime
    temperature: float
