# backend/blogapp/notion/schemas.py

"""
Notion から取得したデータを内部で扱うためのスキーマ定義。

JSON のフィールド名はフロントエンド（グラフページのスクリプト）との
契約に合わせて alias で camelCase にしている。
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentBlockType(str, Enum):
    """投稿本文として扱うブロック種別。これ以外はすべて UNKNOWN。"""

    PARAGRAPH = "paragraph"
    HEADING3 = "heading3"
    NUMBERED_LIST_ITEM = "numberedListItem"
    BULLETED_LIST_ITEM = "bulletedListItem"
    UNKNOWN = "unknown"


class ContentBlock(BaseModel):
    """
    正規化済みの本文ブロック 1 件。

    text はブロック内の rich_text の plain_text を区切りなしで連結したもの。
    """

    model_config = ConfigDict(frozen=True)

    type: ContentBlockType = Field(..., description="ブロック種別")
    text: str = Field("", description="ブロック内テキスト（装飾なし）")


class PostDocument(BaseModel):
    """
    /api/posts/{post_id} が返す投稿ドキュメント。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., min_length=1, description="ページタイトル")
    published_at: datetime = Field(
        ...,
        alias="date",
        description="公開日時（Notion ページの created_time）",
    )
    content: List[ContentBlock] = Field(default_factory=list)
    last_edited_at: datetime = Field(
        ...,
        alias="lastEditedTime",
        description="最終編集日時（Notion ページの last_edited_time）",
    )
    canonical_url: str = Field(..., alias="url", description="Notion 上のページ URL")


class EntrySummary(BaseModel):
    """
    執筆記録データベースの 1 行。グラフの 1 日分に対応する。

    post_id が None の場合は「記録はあるが公開記事はない日」を表す。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    post_id: Optional[str] = Field(None, alias="postId", description="公開記事のページ ID")
    title: str = Field("Untitled", description="エントリのタイトル")
    publish_date: Optional[str] = Field(
        None,
        alias="date",
        description="Publish Date の start 値（YYYY-MM-DD）",
    )
    preview: Optional[str] = Field(None, description="ツールチップ用のプレビュー文")

    @property
    def has_post(self) -> bool:
        return bool(self.post_id)


class CredentialCheck(BaseModel):
    """Notion の API キー・DB ID の確認結果。"""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """API のエラーレスポンス。内部の詳細は含めない。"""

    error: str
