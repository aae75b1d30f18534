"""Pydantic schemas for the wire format and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from models.records import SensorReading


class ChartType(str, Enum):
    """Chart flavours the renderer knows how to draw."""

    line = "line"
    bar = "bar"


class ReadingPayload(BaseModel):
    """One reading record as served by the snapshot endpoint and push channel."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_id: str
    timestamp: datetime
    temperature: float = Field(
        ...,
        validation_alias=AliasChoices("temperatura", "temperature"),
        allow_inf_nan=False,
    )

    @field_validator("sensor_id", mode="before")
    @classmethod
    def _normalize_sensor_id(cls, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError("sensor_id must be a string or integer")
        candidate = str(value).strip()
        if not candidate:
            raise ValueError("sensor_id must be non-empty")
        return candidate

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def to_reading(self) -> SensorReading:
        return SensorReading(
            sensor_id=self.sensor_id,
            timestamp=self.timestamp,
            temperature=self.temperature,
        )


class ReadingOut(BaseModel):
    """Reading as exposed by the screen service."""

    sensor_id: str
    timestamp: datetime
    temperature: float

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "ReadingOut":
        return cls(
            sensor_id=reading.sensor_id,
            timestamp=reading.timestamp,
            temperature=reading.temperature,
        )


class PickerOption(BaseModel):
    """Entry for one of the selection pickers."""

    value: str
    label: str


class ChartDataset(BaseModel):
    label: str
    data: List[float] = Field(default_factory=list)
    border_color: str = Field(..., serialization_alias="borderColor")
    background_color: str = Field(..., serialization_alias="backgroundColor")
    fill: bool = False
    tension: float = 0.1


class ChartData(BaseModel):
    labels: List[str] = Field(default_factory=list)
    datasets: List[ChartDataset] = Field(default_factory=list)


class ChartDocument(BaseModel):
    """Everything a charting component needs to draw one environment."""

    sensor_id: str
    environment_name: str
    chart_type: ChartType
    title: str
    data: ChartData
    options: Dict[str, Any] = Field(default_factory=dict)


class RefreshResponse(BaseModel):
    """Outcome of a manual snapshot refresh."""

    refreshed: bool
    reading_count: int = Field(..., ge=0)
