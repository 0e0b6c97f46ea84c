# backend/blogapp/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。

読み取り専用。ページ取得・データベース query・ブロック子要素の一覧のみを扱う。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from .config import NotionConfig, get_notion_config


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionConnectionError(NotionClientError):
    """接続エラー・タイムアウト時の例外。"""


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionNotFoundError(NotionClientError):
    """対象のページ / データベース / ブロックが存在しない、または共有されていない。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotionClient:
    """
    Notion API の薄いラッパークライアント。

    - ページのメタデータ取得
    - データベースの query（ソート・カーソル指定）
    - ブロック子要素の一覧（カーソル指定）
    - 認証確認用の users/me・データベース取得

    httpx.Client を 1 つだけ保持し、プロセス内で使い回す。
    不要になったら close() で明示的に解放すること。
    """

    def __init__(
        self,
        config: Optional[NotionConfig] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or get_notion_config()
        self._http = httpx.Client(
            base_url=self.config.api_base_url,
            headers=self._build_headers(),
            timeout=self.config.timeout_seconds,
            transport=transport,
        )

    def _build_headers(self) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check NOTION_API_KEY.")
        if response.status_code == 403:
            raise NotionAuthError("Forbidden. Check Notion integration permissions.")
        if response.status_code == 404:
            raise NotionNotFoundError(f"Notion object not found: {response.url.path}")
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = self._http.request(method, path, params=params, json=json)
        except httpx.RequestError as exc:
            raise NotionConnectionError(f"Failed to call Notion API: {exc}") from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise NotionAPIError("Notion API returned a non-JSON body.") from exc

        if not isinstance(data, dict):
            raise NotionAPIError("Unexpected Notion API response format: body is not an object.")
        return data

    @staticmethod
    def _check_list_response(data: Dict[str, Any]) -> Dict[str, Any]:
        results = data.get("results", [])
        if not isinstance(results, list):
            raise NotionAPIError("Unexpected Notion API response format: 'results' is not a list.")
        return data

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        """
        ページ 1 件のメタデータ（properties / created_time など）を取得する。
        """
        return self._request("GET", f"/pages/{page_id}")

    def query_database(
        self,
        database_id: str,
        *,
        sorts: Optional[List[Dict[str, Any]]] = None,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        データベースを query する。

        返り値は Notion API のレスポンスそのもの
        (results / has_more / next_cursor)。ページ送りは上位レイヤーで行う。
        """
        payload: Dict[str, Any] = {}
        if sorts:
            payload["sorts"] = sorts
        if start_cursor:
            payload["start_cursor"] = start_cursor
        if page_size:
            payload["page_size"] = page_size

        data = self._request("POST", f"/databases/{database_id}/query", json=payload)
        return self._check_list_response(data)

    def list_block_children(
        self,
        block_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        ブロック（ページ）の子要素を 1 ページ分取得する。
        """
        params: Dict[str, Any] = {}
        if start_cursor:
            params["start_cursor"] = start_cursor
        if page_size:
            params["page_size"] = page_size

        data = self._request("GET", f"/blocks/{block_id}/children", params=params or None)
        return self._check_list_response(data)

    def retrieve_database(self, database_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/databases/{database_id}")

    def get_me(self) -> Dict[str, Any]:
        """インテグレーション自身（bot ユーザー）を取得する。認証確認用。"""
        return self._request("GET", "/users/me")

    def close(self) -> None:
        self._http.close()
