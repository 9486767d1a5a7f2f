from __future__ import annotations

import hashlib
import logging
from functools import lru_cache
from pathlib import Path
from typing import List
from urllib.parse import quote_plus

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from app.schemas import (
    ChartConfig,
    configs_query,
    configs_text,
    default_chart_configs,
    parse_configs,
)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@lru_cache
def static_url(path: str) -> str:
    """URL of a static asset with a content hash so browsers refetch on change."""
    digest = hashlib.sha256((STATIC_DIR / path).read_bytes()).hexdigest()[:12]
    return f"/static/{path}?v={digest}"


templates.env.globals["static"] = static_url


async def _configs_param(request: Request) -> str:
    # form body wins over the query string, so a replayed POST keeps its payload
    if request.method == "POST":
        form = await request.form()
        value = form.get("configs")
        if isinstance(value, str) and value:
            return value
    return request.query_params.get("configs", "")


def _load_configs(raw: str) -> List[ChartConfig]:
    if not raw:
        return default_chart_configs()
    try:
        return parse_configs(raw)
    except ValidationError as exc:
        logger.warning("Rejected dashboard configs", extra={"reason": exc.error_count()})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="configs is not a valid list of chart configurations",
        ) from exc


router = APIRouter(include_in_schema=False)


@router.api_route("/", methods=["GET", "POST"], name="dashboard", response_class=HTMLResponse)
async def dashboard(request: Request) -> HTMLResponse:
    configs = _load_configs(await _configs_param(request))
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "configs": configs,
            "configs_query": configs_query(configs),
        },
    )


@router.get("/config", name="config_form", response_class=HTMLResponse)
async def config_form(request: Request) -> HTMLResponse:
    configs = _load_configs(await _configs_param(request))
    return templates.TemplateResponse(
        request,
        "config.html",
        {"configs_text": configs_text(configs)},
    )


@router.post("/config", name="config_submit")
async def config_submit(request: Request) -> RedirectResponse:
    configs = _load_configs(await _configs_param(request))
    return RedirectResponse(
        url=f"/?configs={quote_plus(configs_query(configs))}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
