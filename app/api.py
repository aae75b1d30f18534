"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas import ChartDocument, PickerOption, ReadingOut, RefreshResponse
from services.ingestion import IngestionService, build_default_ingestion
from services.projection import (
    ChartProjector,
    build_default_projector,
    default_selection,
    list_environments,
    list_time_windows,
)

router = APIRouter()


def get_ingestion() -> IngestionService:
    return build_default_ingestion()


def get_projector() -> ChartProjector:
    return build_default_projector()


@router.get(
    "/chart",
    response_model=ChartDocument,
    summary="Project the stored readings into one environment's chart.",
)
async def get_chart(
    environment: Optional[str] = Query(None, description="Sensor/environment identifier."),
    window: Optional[str] = Query(None, description="Time-window tag, e.g. lastHour."),
    chart_type: Optional[str] = Query(None, description="line or bar."),
    ingestion: IngestionService = Depends(get_ingestion),
    projector: ChartProjector = Depends(get_projector),
) -> ChartDocument:
    selection = default_selection(environment, window, chart_type)
    return projector.render(ingestion.store.readings(), selection)


@router.get(
    "/readings",
    response_model=List[ReadingOut],
    summary="List every reading currently held in the store.",
)
async def list_readings(
    ingestion: IngestionService = Depends(get_ingestion),
) -> List[ReadingOut]:
    return [ReadingOut.from_reading(reading) for reading in ingestion.store.readings()]


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Reload the full snapshot from the sensor API.",
)
def refresh(
    ingestion: IngestionService = Depends(get_ingestion),
) -> RefreshResponse:
    refreshed = ingestion.refresh()
    return RefreshResponse(refreshed=refreshed, reading_count=len(ingestion.store))


@router.get("/environments", response_model=List[PickerOption], summary="Environment picker entries.")
async def environments() -> List[PickerOption]:
    return list_environments()


@router.get("/windows", response_model=List[PickerOption], summary="Time-window picker entries.")
async def windows() -> List[PickerOption]:
    return list_time_windows()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
