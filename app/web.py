from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import ChartType
from services.projection import default_selection, list_environments, list_time_windows
from settings import get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_chart", response_class=HTMLResponse)
async def ui_chart(
    request: Request,
    environment: Optional[str] = None,
    window: Optional[str] = None,
    chart_type: Optional[str] = None,
) -> HTMLResponse:
    selection = default_selection(environment, window, chart_type)
    return templates.TemplateResponse(
        request,
        "ui/chart.html",
        {
            "selection": selection,
            "environments": list_environments(),
            "windows": list_time_windows(),
            "chart_types": [kind.value for kind in ChartType],
            "poll_ms": int(get_settings().ui_poll_seconds * 1000),
        },
    )
