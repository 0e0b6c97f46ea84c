# backend/blogapp/graph/cli.py

"""
コントリビューショングラフをターミナルで確認するための簡易 CLI。

例:
    python -m blogapp.graph.cli grid
    python -m blogapp.graph.cli show 2025-01-06 --base-url http://localhost:8000
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import date
from typing import List, Optional, Sequence

from blogapp.notion.schemas import ContentBlockType, EntrySummary, PostDocument
from blogapp.notion.state import close_state, get_post_service
from blogapp.utils.config import ConfigurationError

from .builder import build_grid, default_graph_range
from .config import get_graph_settings
from .schemas import ContributionGrid, VisualState
from .viewer import HttpPostFetcher, PostViewer

logger = logging.getLogger(__name__)

CELL_SYMBOLS = {
    VisualState.NO_ENTRY: ".",
    VisualState.ENTRY_NO_POST: "o",
    VisualState.PUBLISHED_POST: "#",
}

WEEKDAY_LABELS = ("Mon", "", "Wed", "", "Fri", "", "")


def render_grid_text(grid: ContributionGrid) -> str:
    """
    グラフを曜日ごとの行（列が週）としてテキスト化する。
    """
    lines = ["    " + " ".join(grid.months)]
    for weekday in range(7):
        row = []
        for week in grid.weeks:
            row.append(CELL_SYMBOLS[week[weekday].visual_state] if weekday < len(week) else " ")
        lines.append(f"{WEEKDAY_LABELS[weekday]:<4}" + "".join(row))
    return "\n".join(lines)


def render_post_text(post: PostDocument) -> str:
    lines = [post.title, post.published_at.date().isoformat(), ""]
    number = 0
    for block in post.content:
        if block.type is ContentBlockType.NUMBERED_LIST_ITEM:
            number += 1
            lines.append(f"{number}. {block.text}")
            continue
        number = 0
        if block.type is ContentBlockType.HEADING3:
            lines.append(f"### {block.text}")
        elif block.type is ContentBlockType.BULLETED_LIST_ITEM:
            lines.append(f"- {block.text}")
        elif block.type is ContentBlockType.PARAGRAPH:
            lines.append(block.text)
    return "\n".join(lines)


def _load_grid() -> ContributionGrid:
    start, end = default_graph_range(get_graph_settings())
    entries: List[EntrySummary] = []
    try:
        entries = get_post_service().list_entries()
    except ConfigurationError as exc:
        logger.error("Cannot list writing entries: %s", exc)
    return build_grid(start, end, entries)


async def show_post(grid: ContributionGrid, day: date, base_url: str) -> Optional[PostDocument]:
    """
    指定日のマスを PostViewer で選択し、表示された投稿を返す。
    """
    cell = grid.find_cell(day)
    if cell is None or cell.visual_state is not VisualState.PUBLISHED_POST:
        return None

    fetcher = HttpPostFetcher(base_url)
    try:
        viewer = PostViewer(fetcher)
        await viewer.select(cell)
        return viewer.state.post
    finally:
        await fetcher.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Writing contribution graph")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("grid", help="グラフをテキストで表示する")

    show = sub.add_parser("show", help="指定日の投稿を表示する")
    show.add_argument("day", type=date.fromisoformat, help="YYYY-MM-DD")
    show.add_argument("--base-url", default="http://localhost:8000", help="API のベース URL")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        grid = _load_grid()
    finally:
        close_state()

    if args.command == "grid":
        print(render_grid_text(grid))
        return 0

    post = asyncio.run(show_post(grid, args.day, args.base_url))
    if post is None:
        print(f"No published post on {args.day.isoformat()}.")
        return 1
    print(render_post_text(post))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
