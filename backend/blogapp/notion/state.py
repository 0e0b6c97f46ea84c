# backend/blogapp/notion/state.py

"""
NotionClient / PostService のシンプルな状態管理モジュール。

- アプリ全体で 1 つの NotionClient（= 1 つの httpx.Client）を共有する
- 初回利用時に生成し、アプリ終了時に close_state() で解放する
- テスト時にリセットできるようにする
"""

from __future__ import annotations

from typing import Optional

from blogapp.utils.cache import TTLCache
from blogapp.utils.config import get_env_int

from .client import NotionClient
from .service import PostService

_post_service: Optional[PostService] = None


def get_post_service() -> PostService:
    """
    共有の PostService インスタンスを返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    FastAPI の Depends からもこの関数を使う。
    """
    global _post_service
    if _post_service is None:
        ttl = get_env_int("CACHE_TTL_SECONDS", default=60)
        _post_service = PostService(NotionClient(), cache=TTLCache(ttl_seconds=ttl))
    return _post_service


def close_state() -> None:
    """
    共有クライアントを閉じてシングルトン状態を破棄する。
    """
    global _post_service
    if _post_service is not None:
        _post_service.client.close()
    _post_service = None


def reset_state() -> None:
    """
    テスト用にシングルトン状態をリセットする。
    """
    close_state()
