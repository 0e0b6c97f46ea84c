# backend/blogapp/notion/service.py

"""
Notion クライアントと内部スキーマをつなぐサービス層。

- 執筆記録データベースの一覧取得 → EntrySummary
- 投稿ページ + 本文ブロックの取得 → PostDocument
- API キー / データベース ID の確認

一覧系は「空でもいいからグラフを出す」ことを優先し、失敗はログに残して空を返す。
単一投稿の取得は 404 / 500 を呼び出し側が判断できるよう例外で返す。
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from blogapp.utils.cache import TTLCache
from blogapp.utils.config import ConfigurationError

from .client import (
    NotionAPIError,
    NotionAuthError,
    NotionClient,
    NotionClientError,
    NotionNotFoundError,
)
from .normalizer import (
    extract_date_start,
    extract_first_plain_text,
    extract_title,
    is_full_page,
    is_supported_block,
    normalize_block,
)
from .schemas import CredentialCheck, EntrySummary, PostDocument

logger = logging.getLogger(__name__)

# 執筆記録データベースのプロパティ名
TITLE_PROPERTY = "Name"
PUBLISH_DATE_PROPERTY = "Publish Date"
POST_ID_PROPERTY = "PostID"
PREVIEW_PROPERTY = "Preview"

# ページ送りの暴走防止
MAX_PAGES = 100


class PostNotFoundError(LookupError):
    """投稿ページが存在しない・アクセスできない。"""


class InvalidPostStructureError(PostNotFoundError):
    """ページはあるが、タイトルが空などで投稿として扱えない。"""


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def entry_from_page(page: Dict[str, Any]) -> EntrySummary:
    """
    データベースの 1 行（完全なページオブジェクト）を EntrySummary に変換する。
    """
    properties: Dict[str, Any] = page.get("properties", {}) or {}

    return EntrySummary(
        post_id=extract_first_plain_text(properties.get(POST_ID_PROPERTY)),
        title=extract_first_plain_text(properties.get(TITLE_PROPERTY)) or "Untitled",
        publish_date=extract_date_start(properties.get(PUBLISH_DATE_PROPERTY)),
        preview=extract_first_plain_text(properties.get(PREVIEW_PROPERTY)),
    )


class PostService:
    """
    NotionClient を利用して、アプリケーション層に対して
    扱いやすいモデルを返すサービス。
    """

    def __init__(
        self,
        client: Optional[NotionClient] = None,
        *,
        cache: Optional[TTLCache] = None,
        writing_database_id: Optional[str] = None,
        database_id: Optional[str] = None,
    ) -> None:
        self.client = client or NotionClient()
        self.cache = cache or TTLCache(ttl_seconds=60)
        self._writing_database_id = writing_database_id or self.client.config.writing_database_id
        self._database_id = database_id or self.client.config.database_id

    # ------------------------------------------------------------------
    # エントリ一覧
    # ------------------------------------------------------------------
    def list_entries(self, database_id: Optional[str] = None) -> List[EntrySummary]:
        """
        執筆記録データベースを Publish Date 降順で取得し、EntrySummary のリストで返す。

        - database_id 未指定かつ未設定なら ConfigurationError（握りつぶさない）
        - Notion 側の失敗はログに残して [] を返す（キャッシュはしない）
        """
        database_id = database_id or self._writing_database_id
        if not database_id:
            raise ConfigurationError("Writing database ID is not configured (NOTION_WRITING_DATABASE_ID).")

        try:
            return self.cache.get_or_set(
                ("list_entries", database_id),
                lambda: self._query_entries(database_id),
            )
        except NotionClientError:
            logger.exception("Error fetching blog post entries from database %s", database_id)
            return []

    def _query_entries(self, database_id: str) -> List[EntrySummary]:
        entries: List[EntrySummary] = []
        cursor: Optional[str] = None

        for _ in range(MAX_PAGES):
            response = self.client.query_database(
                database_id,
                sorts=[{"property": PUBLISH_DATE_PROPERTY, "direction": "descending"}],
                start_cursor=cursor,
            )

            for page in response.get("results", []):
                if not is_full_page(page):
                    logger.debug("Skipping partial page object: %s", page.get("id") if isinstance(page, dict) else page)
                    continue
                entries.append(entry_from_page(page))

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

        return entries

    # ------------------------------------------------------------------
    # 単一投稿
    # ------------------------------------------------------------------
    def fetch_post(self, post_id: str) -> PostDocument:
        """
        投稿 ID からページのメタデータと本文ブロックを取得し、PostDocument を組み立てる。

        本文ブロックを最後まで取得できた場合だけキャッシュする。
        途中で失敗した場合は、その時点までの内容を返すが保存はしない。

        :raises PostNotFoundError: ページがない・権限がない・ID が不正・完全なページでない
        :raises InvalidPostStructureError: タイトルが空
        :raises NotionClientError: 上記以外の Notion 呼び出し失敗（接続エラー・5xx など）
        """
        if not post_id:
            raise PostNotFoundError("Post ID is empty.")

        key = ("fetch_post", post_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        post, complete = self._build_post(post_id)
        if complete and self.cache.ttl_seconds > 0:
            self.cache.set(key, post)
        return post

    def _retrieve_post_page(self, post_id: str) -> Dict[str, Any]:
        try:
            page = self.client.retrieve_page(post_id)
        except NotionNotFoundError as exc:
            raise PostNotFoundError(f"Post {post_id} was not found.") from exc
        except NotionAuthError as exc:
            # 共有されていない / 権限のないページは「該当なし」と同じ扱い
            raise PostNotFoundError(f"Post {post_id} is not accessible.") from exc
        except NotionAPIError as exc:
            # UUID として不正な ID には 404 ではなく 400 validation_error が返る
            if exc.status_code == 400:
                raise PostNotFoundError(f"Post ID {post_id!r} was rejected by Notion.") from exc
            raise

        if not is_full_page(page):
            raise PostNotFoundError(f"Post {post_id} is not accessible.")
        return page

    def _build_post(self, post_id: str) -> Tuple[PostDocument, bool]:
        page = self._retrieve_post_page(post_id)

        title = extract_title(page["properties"])
        if not title:
            raise InvalidPostStructureError(f"Post {post_id} has no title.")

        created = _parse_timestamp(page.get("created_time"))
        last_edited = _parse_timestamp(page.get("last_edited_time"))
        if created is None or last_edited is None:
            raise InvalidPostStructureError(f"Post {post_id} has invalid timestamps.")

        children, complete = self.get_all_block_children(post_id)
        blocks = [block for block in children if is_supported_block(block)]

        post = PostDocument(
            title=title,
            published_at=created,
            content=[normalize_block(block) for block in blocks],
            last_edited_at=last_edited,
            canonical_url=page.get("url") or "",
        )
        return post, complete

    def get_all_block_children(self, block_id: str) -> Tuple[List[Dict[str, Any]], bool]:
        """
        ブロックの子要素を next_cursor をたどって全件取得する。

        戻り値は (子要素, 最後まで取得できたか)。
        途中で失敗した場合は、それまでに集めた分と False を返す。
        """
        children: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        for _ in range(MAX_PAGES):
            try:
                response = self.client.list_block_children(block_id, start_cursor=cursor)
            except NotionClientError:
                logger.exception(
                    "Error fetching block children of %s (collected %d so far)",
                    block_id,
                    len(children),
                )
                return children, False

            children.extend(response.get("results", []))
            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

        return children, True

    # ------------------------------------------------------------------
    # 認証確認
    # ------------------------------------------------------------------
    def verify_credentials(self) -> CredentialCheck:
        """
        API キーと メイン DB ID が有効かを確認する。

        結果は TTL の間キャッシュする（失敗結果も含む）。
        """
        return self.cache.get_or_set(("verify_credentials",), self._verify_credentials)

    def _verify_credentials(self) -> CredentialCheck:
        if not self._database_id:
            return CredentialCheck(is_valid=False, error="NOTION_DATABASE_ID is not defined")

        try:
            self.client.get_me()
            self.client.retrieve_database(self._database_id)
        except NotionAuthError:
            logger.exception("Error verifying Notion credentials")
            return CredentialCheck(is_valid=False, error="Invalid Notion API Key")
        except NotionNotFoundError:
            logger.exception("Error verifying Notion credentials")
            return CredentialCheck(is_valid=False, error="Invalid Notion Database ID")
        except NotionClientError:
            logger.exception("Error verifying Notion credentials")
            return CredentialCheck(is_valid=False, error="An unknown error occurred")

        return CredentialCheck(is_valid=True)
