# backend/blogapp/utils/cache.py

"""
(操作名, 引数) をキーにした短命の結果キャッシュ。

- 一定時間 (TTL) だけ結果を保持し、期限切れなら再計算する
- 例外になった計算結果は保存しない
- 時刻取得関数を差し替え可能にしてテストしやすくする
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CacheKey = Tuple[Hashable, ...]


class TTLCache:
    """
    シンプルな TTL 付きキャッシュ。

    単一プロセス・単一スレッド前提なのでロックは持たない。
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, Any]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> Optional[Any]:
        """
        有効期限内の値を返す。期限切れ・未登録なら None。
        """
        item = self._entries.get(key)
        if item is None:
            return None

        expires_at, value = item
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = (self._clock() + self._ttl, value)

    def get_or_set(self, key: CacheKey, factory: Callable[[], T]) -> T:
        """
        キャッシュにあればそれを返し、なければ factory() で計算して保存する。

        factory が例外を投げた場合は何も保存せずにそのまま伝播させる。
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit: %s", key)
            return cached

        value = factory()
        if self._ttl > 0:
            self.set(key, value)
        return value

    def invalidate(self, key: Optional[CacheKey] = None) -> None:
        """
        指定キー、または key=None の場合は全エントリを破棄する。
        """
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
