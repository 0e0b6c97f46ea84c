# backend/blogapp/graph/builder.py

"""
日付範囲とエントリ一覧から、週単位のマス目（ContributionGrid）を組み立てる。

副作用のない純粋関数のみ。
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from blogapp.notion.schemas import EntrySummary

from .config import GraphSettings
from .schemas import ContributionGrid, DayCell, VisualState, WeekRow

DAYS_PER_WEEK = 7

# ロケールに依存しない英語の月略称
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def start_of_week(day: date) -> date:
    """直近の月曜日（day が月曜ならそのまま）を返す。"""
    return day - timedelta(days=day.weekday())


def add_months(day: date, months: int) -> date:
    """
    day の months ヶ月後を返す。存在しない日付は月末に丸める（1/31 + 1 → 2/28）。
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def default_graph_range(settings: GraphSettings) -> Tuple[date, date]:
    return settings.start_date, add_months(settings.start_date, settings.months)


def month_label(day: date) -> str:
    return MONTH_ABBR[day.month - 1]


def visual_state_for(entry: Optional[EntrySummary]) -> VisualState:
    if entry is None:
        return VisualState.NO_ENTRY
    if entry.post_id:
        return VisualState.PUBLISHED_POST
    return VisualState.ENTRY_NO_POST


def index_entries(entries: Iterable[EntrySummary]) -> Dict[str, EntrySummary]:
    """
    エントリを日付文字列で引けるようにする。同じ日付が複数あれば先頭を採用する。
    """
    index: Dict[str, EntrySummary] = {}
    for entry in entries:
        if entry.publish_date:
            index.setdefault(entry.publish_date, entry)
    return index


def build_grid(start: date, end: date, entries: Iterable[EntrySummary]) -> ContributionGrid:
    """
    コントリビューショングラフのマス目を組み立てる。

    1. start を直近の月曜日まで戻す
    2. そこから end（含む）まで 1 日ずつ列挙する
    3. 列挙順に 7 日ずつ区切る（余りは最後の短い行になる）
    4. 各日の YYYY-MM-DD と完全一致するエントリで表示状態を決める

    エントリは最初に日付で索引化するので、日数 × エントリ数の総当たりにはならない。
    month ラベルは列挙した日付に現れた順で重複なし（ソートしない）。

    end が start より前でも、月曜に戻した日以降であればその日までのマスを出す。
    空になるのは end が月曜に戻した日より前のときだけ。
    """
    by_date = index_entries(entries)
    first_day = start_of_week(start)

    weeks: List[WeekRow] = []
    current: List[DayCell] = []
    months: List[str] = []

    day = first_day
    while day <= end:
        entry = by_date.get(day.isoformat())
        current.append(DayCell(day=day, visual_state=visual_state_for(entry), entry=entry))

        label = month_label(day)
        if label not in months:
            months.append(label)

        if len(current) == DAYS_PER_WEEK:
            weeks.append(tuple(current))
            current = []
        day += timedelta(days=1)

    if current:
        weeks.append(tuple(current))

    return ContributionGrid(start=start, end=end, weeks=tuple(weeks), months=tuple(months))
