# backend/blogapp/graph/viewer.py

"""
グラフのマス選択 → 投稿取得 → 表示 の状態管理。

- 公開記事のあるマスを選ぶと、すぐに loading 状態に入る
- 取得が終わったら投稿を表示、失敗したら表示をクリアする
- 連続で選択された場合は「最後に選んだもの」が必ず勝つ

最後の点は世代番号（generation）で担保する。選択のたびに番号を進め、
取得完了時に自分の番号が最新でなければその結果は捨てる。
実行中のリクエストはキャンセルしない。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional

import httpx

from blogapp.notion.schemas import PostDocument

from .schemas import DayCell

logger = logging.getLogger(__name__)

PostFetcher = Callable[[str], Awaitable[PostDocument]]


class PostFetchError(RuntimeError):
    """投稿 API が 200 以外を返した場合の例外。"""

    def __init__(self, post_id: str, status_code: int) -> None:
        super().__init__(f"Failed to fetch post {post_id}: status_code={status_code}")
        self.post_id = post_id
        self.status_code = status_code


@dataclass(frozen=True)
class ViewerState:
    selected_post_id: Optional[str] = None
    loading: bool = False
    post: Optional[PostDocument] = None
    error: Optional[str] = None


class HttpPostFetcher:
    """
    /api/posts/{post_id} を httpx.AsyncClient で呼び出す PostFetcher。
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __call__(self, post_id: str) -> PostDocument:
        response = await self._client.get(f"/api/posts/{post_id}")
        if response.status_code != 200:
            raise PostFetchError(post_id, response.status_code)
        return PostDocument.model_validate(response.json())

    async def aclose(self) -> None:
        await self._client.aclose()


class PostViewer:
    """
    グラフ下の投稿表示パネルの状態。
    """

    def __init__(self, fetcher: PostFetcher) -> None:
        self._fetcher = fetcher
        self._generation = 0
        self.state = ViewerState()

    @property
    def generation(self) -> int:
        return self._generation

    async def select(self, cell: DayCell) -> bool:
        """
        マスを選択する。

        公開記事のないマスは無視する。戻り値は、このリクエストの結果が
        画面に反映されたかどうか（後続の選択に追い越された場合は False）。
        """
        post_id = cell.post_id
        if not post_id:
            return False

        self._generation += 1
        generation = self._generation
        self.state = ViewerState(selected_post_id=post_id, loading=True)

        try:
            post = await self._fetcher(post_id)
        except Exception as exc:  # noqa: BLE001
            if generation != self._generation:
                logger.debug("Discarding stale error for post %s (generation %d)", post_id, generation)
                return False
            logger.error("Error fetching post %s: %s", post_id, exc)
            self.state = replace(self.state, loading=False, post=None, error="Failed to fetch post content")
            return True

        if generation != self._generation:
            logger.debug("Discarding stale response for post %s (generation %d)", post_id, generation)
            return False

        self.state = replace(self.state, loading=False, post=post, error=None)
        return True

    def clear(self) -> None:
        """表示をクリアする。実行中の取得結果も捨てられるよう世代を進める。"""
        self._generation += 1
        self.state = ViewerState()
