# backend/blogapp/graph/router.py

"""
コントリビューショングラフのページ（GET /）。

描画時に執筆記録 DB を読み、build_grid の結果を Jinja2 テンプレートで HTML にする。
Notion 側で何が起きてもグラフ自体は（空でも）必ず描画する。
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from blogapp.notion.router import REVALIDATE_CACHE_CONTROL
from blogapp.notion.schemas import EntrySummary
from blogapp.notion.service import PostService
from blogapp.notion.state import get_post_service
from blogapp.utils.config import ConfigurationError

from .builder import MONTH_ABBR, build_grid, default_graph_range
from .config import GraphSettings, get_graph_settings
from .schemas import VisualState

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

router = APIRouter(tags=["graph"])


def format_tooltip_date(day: date) -> str:
    """ツールチップ用の日付表記（例: Jan 6, 2025）。"""
    return f"{MONTH_ABBR[day.month - 1]} {day.day}, {day.year}"


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["tooltip_date"] = format_tooltip_date


def get_post_service_or_none() -> Optional[PostService]:
    """
    PostService を返す。API キー未設定などで作れない場合は None。

    ページは設定不備でも空のグラフを出すため、ここで例外を止める。
    """
    try:
        return get_post_service()
    except ConfigurationError:
        logger.exception("Notion is not configured; rendering an empty graph")
        return None


@router.get("/", response_class=HTMLResponse, summary="コントリビューショングラフ")
def graph_page(
    request: Request,
    service: Optional[PostService] = Depends(get_post_service_or_none),
    settings: GraphSettings = Depends(get_graph_settings),
) -> HTMLResponse:
    start, end = default_graph_range(settings)

    entries: List[EntrySummary] = []
    config_error: Optional[str] = None
    if service is None:
        config_error = "Notion is not configured."
    else:
        try:
            entries = service.list_entries()
        except ConfigurationError as exc:
            logger.error("Cannot list writing entries: %s", exc)
            config_error = "Writing database is not configured."

    grid = build_grid(start, end, entries)

    response = templates.TemplateResponse(
        request,
        "graph.html",
        {
            "grid": grid,
            "states": VisualState,
            "config_error": config_error,
        },
    )
    response.headers["Cache-Control"] = REVALIDATE_CACHE_CONTROL
    return response
