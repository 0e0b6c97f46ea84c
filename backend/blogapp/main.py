# backend/blogapp/main.py

"""
バックエンドアプリケーションのエントリーポイント。

- / でコントリビューショングラフのページを返す
- /api/posts/{post_id} で投稿ドキュメントを返す
- /health, /health/notion でヘルスチェック
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from blogapp.graph.router import router as graph_router
from blogapp.notion.router import router as notion_router
from blogapp.notion.state import close_state
from blogapp.utils.config import ConfigurationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # 共有の Notion クライアント（httpx.Client）を閉じる
    close_state()


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - グラフページ (/)
    - 投稿取得エンドポイント (/api/posts/{post_id})
    - ヘルスチェックエンドポイント (/health, /health/notion)
    """
    app = FastAPI(title="Writing Journey Backend", lifespan=lifespan)

    # ルーター登録
    app.include_router(graph_router)
    app.include_router(notion_router)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        # 設定不備の詳細はログにだけ残す
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
