"""HTTP route definitions for charts and sensor metadata."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import ValidationError

from app.schemas import ChartConfig, HealthStatus, SensorInfo
from datastore.series_store import SeriesStore, build_default_store
from services.chart import render_svg
from services.query import ChartQuery
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store() -> SeriesStore:
    return build_default_store()


def _parse_width(raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        width = int(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"width must be an integer, got {raw!r}",
        ) from exc
    if width <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="width must be positive",
        )
    return width


@router.get(
    "/chart",
    summary="Render one chart as SVG.",
    response_class=Response,
    responses={200: {"content": {"image/svg+xml": {}}}},
)
def chart(
    config: Optional[str] = None,
    width: Optional[str] = None,
    store: SeriesStore = Depends(get_store),
) -> Response:
    if not config:
        logger.warning("Chart requested without config", extra={"reason": "missing config"})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="config query parameter is required",
        )
    try:
        chart_config = ChartConfig.model_validate_json(config)
    except ValidationError as exc:
        logger.warning("Rejected chart config", extra={"chart": config, "reason": exc.error_count()})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="config is not a valid chart configuration",
        ) from exc

    settings = get_settings()
    image_width = _parse_width(width, settings.chart_default_width)

    series = ChartQuery(store).run(chart_config, as_of=datetime.now(timezone.utc))
    svg = render_svg(series, width=image_width, height=settings.chart_height)
    logger.debug("Rendered chart", extra={"chart": chart_config.name, "series_count": len(series)})
    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Cache-Control": "max-age=0, must-revalidate"},
    )


@router.get(
    "/sensors",
    response_model=List[SensorInfo],
    summary="List collected sensor series.",
)
async def sensors(store: SeriesStore = Depends(get_store)) -> List[SensorInfo]:
    counts = store.point_counts()
    items = [
        SensorInfo(
            adapter=key.adapter,
            name=key.name,
            label=key.label,
            type=key.type.value,
            source=key.source,
            points=points,
        )
        for key, points in counts.items()
    ]
    return sorted(items, key=lambda item: (item.adapter, item.label))


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(store: SeriesStore = Depends(get_store)) -> HealthStatus:
    return HealthStatus(status="ok", series=len(store))
