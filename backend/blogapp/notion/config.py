# backend/blogapp/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from blogapp.utils.config import get_env, get_env_int


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_key: str
    database_id: Optional[str]
    writing_database_id: Optional[str]
    api_base_url: str
    api_version: str
    timeout_seconds: int = 10


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    必須:
      - NOTION_API_KEY

    任意:
      - NOTION_DATABASE_ID          (メイン DB。認証チェックで使用)
      - NOTION_WRITING_DATABASE_ID  (執筆記録 DB。グラフのエントリ一覧で使用)
      - NOTION_API_BASE_URL (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION   (デフォルト: 2022-06-28)
      - NOTION_TIMEOUT_SECONDS (デフォルト: 10)
    """
    api_key = get_env("NOTION_API_KEY")

    # DB ID は呼び出し側で必要になった時点で検証する
    database_id = get_env("NOTION_DATABASE_ID", required=False)
    writing_database_id = get_env("NOTION_WRITING_DATABASE_ID", required=False)

    api_base_url = get_env(
        "NOTION_API_BASE_URL",
        default="https://api.notion.com/v1",
        required=False,
    )
    api_version = get_env(
        "NOTION_API_VERSION",
        default="2022-06-28",
        required=False,
    )
    timeout_seconds = get_env_int("NOTION_TIMEOUT_SECONDS", default=10)

    return NotionConfig(
        api_key=api_key,
        database_id=database_id,
        writing_database_id=writing_database_id,
        api_base_url=api_base_url.rstrip("/"),
        api_version=api_version,
        timeout_seconds=timeout_seconds,
    )
