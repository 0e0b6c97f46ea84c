# backend/blogapp/notion/router.py

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from blogapp.notion.schemas import CredentialCheck, ErrorResponse, PostDocument
from blogapp.notion.service import PostNotFoundError, PostService
from blogapp.notion.state import get_post_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["posts"])

# 60 秒の再検証ウィンドウ。CDN / ブラウザは最大 60 秒古いデータを返してよい
REVALIDATE_CACHE_CONTROL = "public, max-age=0, s-maxage=60, stale-while-revalidate=60"


@router.get(
    "/api/posts/{post_id}",
    response_model=PostDocument,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    summary="投稿 1 件を取得",
    description="Notion のページと本文ブロックを取得し、正規化した投稿ドキュメントを返す。",
)
def get_post(
    post_id: str,
    response: Response,
    service: PostService = Depends(get_post_service),
):
    """
    投稿取得エンドポイント。

    - 正常系: PostDocument を返す
    - ページなし / タイトルなし: 404 {"error": "Post not found"}
    - 予期しない例外: 500（詳細はログ側で確認）
    """
    try:
        post = service.fetch_post(post_id)
    except PostNotFoundError:
        logger.info("Post not found: %s", post_id)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Post not found"},
        )
    except Exception:  # noqa: BLE001
        logger.exception("Error fetching post %s", post_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    response.headers["Cache-Control"] = REVALIDATE_CACHE_CONTROL
    return post


@router.get(
    "/health/notion",
    response_model=CredentialCheck,
    tags=["health"],
    summary="Notion の API キー / DB ID を確認",
)
def check_notion_credentials(
    service: PostService = Depends(get_post_service),
) -> CredentialCheck:
    return service.verify_credentials()
