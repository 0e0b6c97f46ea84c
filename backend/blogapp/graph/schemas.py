# backend/blogapp/graph/schemas.py

"""
グラフ描画用の派生データ。

どれも描画のたびに日付範囲とエントリ一覧から計算し直す値で、保存はしない。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from blogapp.notion.schemas import EntrySummary


class VisualState(str, Enum):
    """1 日分のマスの表示状態。"""

    NO_ENTRY = "no_entry"
    ENTRY_NO_POST = "entry_no_post"
    PUBLISHED_POST = "published_post"


@dataclass(frozen=True)
class DayCell:
    day: date
    visual_state: VisualState
    # 元の EntrySummary への参照（コピーではない）
    entry: Optional[EntrySummary] = None

    @property
    def date_key(self) -> str:
        return self.day.isoformat()

    @property
    def post_id(self) -> Optional[str]:
        if self.visual_state is VisualState.PUBLISHED_POST and self.entry is not None:
            return self.entry.post_id
        return None


WeekRow = Tuple[DayCell, ...]


@dataclass(frozen=True)
class ContributionGrid:
    """
    週ごとの行と、ヘッダー用の月ラベル。

    weeks の各行は月曜始まりの 7 日分。最後の行だけ 7 日未満になりうる。
    """

    start: date
    end: date
    weeks: Tuple[WeekRow, ...] = field(default_factory=tuple)
    months: Tuple[str, ...] = field(default_factory=tuple)

    def iter_cells(self):
        for week in self.weeks:
            yield from week

    def find_cell(self, day: date) -> Optional[DayCell]:
        for cell in self.iter_cells():
            if cell.day == day:
                return cell
        return None
