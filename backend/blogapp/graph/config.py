# backend/blogapp/graph/config.py

"""
コントリビューショングラフの表示期間に関する設定値。
"""

from dataclasses import dataclass
from datetime import date

from blogapp.utils.config import get_env_date, get_env_int

DEFAULT_START_DATE = date(2024, 12, 18)
DEFAULT_MONTHS = 12


@dataclass(frozen=True)
class GraphSettings:
    """
    グラフに表示する期間。

    start_date から months ヶ月後までを 1 枚のグラフとして描画する。
    """

    start_date: date = DEFAULT_START_DATE
    months: int = DEFAULT_MONTHS


def get_graph_settings() -> GraphSettings:
    """
    環境変数からグラフ設定を読み出す。

    任意:
      - GRAPH_START_DATE（デフォルト 2024-12-18）
      - GRAPH_MONTHS（デフォルト 12）
    """
    return GraphSettings(
        start_date=get_env_date("GRAPH_START_DATE", DEFAULT_START_DATE),
        months=get_env_int("GRAPH_MONTHS", DEFAULT_MONTHS),
    )
