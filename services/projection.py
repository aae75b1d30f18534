"""Projection of stored readings into a single environment's chart series."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from functools import lru_cache
from typing import Callable, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.schemas import ChartData, ChartDataset, ChartDocument, ChartType, PickerOption
from models.records import SensorReading
from settings import get_settings

logger = logging.getLogger(__name__)

ENVIRONMENT_NAMES: Dict[str, str] = {
    "1": "Kitchen",
    "2": "Living Room",
    "3": "Bedroom",
    "4": "Office",
}

LINE_COLOR = "rgb(205, 1, 1)"
FILL_COLOR = "rgb(221, 15, 15)"
LABEL_FORMAT = "%H:%M:%S"


class TimeWindow(str, Enum):
    """Named relative durations offered by the time-range picker."""

    last_hour = "lastHour"
    last_24_hours = "last24Hours"
    last_week = "lastWeek"
    last_30_days = "last30Days"
    last_60_seconds = "last60Seconds"


_WINDOW_DURATIONS: Dict[TimeWindow, timedelta] = {
    TimeWindow.last_hour: timedelta(hours=1),
    TimeWindow.last_24_hours: timedelta(hours=24),
    TimeWindow.last_week: timedelta(days=7),
    TimeWindow.last_30_days: timedelta(days=30),
    TimeWindow.last_60_seconds: timedelta(seconds=60),
}

_WINDOW_LABELS: Dict[TimeWindow, str] = {
    TimeWindow.last_hour: "Last hour",
    TimeWindow.last_24_hours: "Last 24 hours",
    TimeWindow.last_week: "Last week",
    TimeWindow.last_30_days: "Last 30 days",
    TimeWindow.last_60_seconds: "Last 60 seconds",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def window_duration(tag: str) -> Optional[timedelta]:
    """Return the duration for ``tag`` or ``None`` when it applies no filter."""
    try:
        return _WINDOW_DURATIONS[TimeWindow(tag)]
    except ValueError:
        return None


def filter_by_window(
    readings: Iterable[SensorReading], tag: str, now: datetime
) -> List[SensorReading]:
    duration = window_duration(tag)
    if duration is None:
        return list(readings)
    cutoff = now - duration
    return [reading for reading in readings if reading.timestamp >= cutoff]


def group_by_sensor(readings: Iterable[SensorReading]) -> Dict[str, List[SensorReading]]:
    groups: Dict[str, List[SensorReading]] = {}
    for reading in readings:
        groups.setdefault(reading.sensor_id, []).append(reading)
    return groups


def environment_name(sensor_id: str) -> str:
    return ENVIRONMENT_NAMES.get(sensor_id, sensor_id)


def resolve_chart_type(value: str | None) -> ChartType:
    try:
        return ChartType((value or "").strip().lower())
    except ValueError:
        return ChartType.line


def resolve_timezone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown display timezone; using UTC", extra={"reason": name})
        return timezone.utc


def list_environments() -> List[PickerOption]:
    return [PickerOption(value=key, label=name) for key, name in ENVIRONMENT_NAMES.items()]


def list_time_windows() -> List[PickerOption]:
    return [PickerOption(value=window.value, label=_WINDOW_LABELS[window]) for window in TimeWindow]


@dataclass
class ChartSelection:
    """User-controlled picker state."""

    environment: str = "1"
    window: str = TimeWindow.last_hour.value
    chart_type: ChartType = ChartType.line


@dataclass
class ChartSeries:
    """Labels and values for exactly one environment, in store order."""

    sensor_id: str
    environment_name: str
    labels: List[str] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.values


class ChartProjector:
    """Pure projection component that can be unit tested in isolation."""

    def __init__(
        self,
        display_tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.display_tz = display_tz
        self._clock = clock

    def project(
        self,
        readings: Iterable[SensorReading],
        window: str,
        environment: str,
        now: datetime | None = None,
    ) -> ChartSeries:
        current = now if now is not None else self._clock()
        groups = group_by_sensor(filter_by_window(readings, window, current))
        selected = groups.get(environment, [])
        return ChartSeries(
            sensor_id=environment,
            environment_name=environment_name(environment),
            labels=[
                reading.timestamp.astimezone(self.display_tz).strftime(LABEL_FORMAT)
                for reading in selected
            ],
            values=[reading.temperature for reading in selected],
        )

    def render(
        self,
        readings: Iterable[SensorReading],
        selection: ChartSelection,
        now: datetime | None = None,
    ) -> ChartDocument:
        series = self.project(readings, selection.window, selection.environment, now=now)
        return build_chart(series, selection.chart_type)


def build_chart(series: ChartSeries, chart_type: ChartType | str = ChartType.line) -> ChartDocument:
    """Shape a series into the document the chart component consumes."""
    kind = chart_type if isinstance(chart_type, ChartType) else resolve_chart_type(chart_type)
    name = series.environment_name
    return ChartDocument(
        sensor_id=series.sensor_id,
        environment_name=name,
        chart_type=kind,
        title=f"Sensor chart: {name}",
        data=ChartData(
            labels=list(series.labels),
            datasets=[
                ChartDataset(
                    label=f"Temperature ({name})",
                    data=list(series.values),
                    border_color=LINE_COLOR,
                    background_color=FILL_COLOR,
                )
            ],
        ),
        options={
            "responsive": True,
            "scales": {
                "x": {"title": {"display": True, "text": "Time"}},
                "y": {
                    "title": {"display": True, "text": "Temperature (°C)"},
                    "beginAtZero": True,
                },
            },
        },
    )


@lru_cache
def build_default_projector() -> ChartProjector:
    settings = get_settings()
    return ChartProjector(display_tz=resolve_timezone(settings.display_timezone))


def default_selection(
    environment: str | None = None,
    window: str | None = None,
    chart_type: str | None = None,
) -> ChartSelection:
    """Fill unset picker values from settings."""
    settings = get_settings()
    return ChartSelection(
        environment=(environment or settings.default_environment).strip(),
        window=window or settings.default_time_window,
        chart_type=resolve_chart_type(chart_type or settings.default_chart_type),
    )
