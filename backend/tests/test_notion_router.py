# backend/tests/test_notion_router.py

from datetime import datetime, timezone
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from blogapp.main import create_app
from blogapp.notion.client import NotionAPIError, NotionClient
from blogapp.notion.config import NotionConfig
from blogapp.notion.schemas import ContentBlock, ContentBlockType, CredentialCheck, PostDocument
from blogapp.notion.service import InvalidPostStructureError, PostNotFoundError, PostService
from blogapp.notion.state import get_post_service
from blogapp.utils.cache import TTLCache


class _StubService:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def fetch_post(self, post_id: str) -> PostDocument:
        if self._error is not None:
            raise self._error
        return self._result

    def verify_credentials(self) -> CredentialCheck:
        return CredentialCheck(is_valid=False, error="Invalid Notion API Key")


def create_test_client(service) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_post_service] = lambda: service
    return TestClient(app)


def _post() -> PostDocument:
    return PostDocument(
        title="Day 1",
        published_at=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc),
        content=[
            ContentBlock(type=ContentBlockType.PARAGRAPH, text="Hello"),
            ContentBlock(type=ContentBlockType.HEADING3, text="Section"),
        ],
        last_edited_at=datetime(2025, 1, 7, 10, 30, tzinfo=timezone.utc),
        canonical_url="https://www.notion.so/Day-1-abc",
    )


def test_get_post_success():
    client = create_test_client(_StubService(result=_post()))

    resp = client.get("/api/posts/abc")

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Day 1"
    assert body["date"].startswith("2025-01-06T09:00:00")
    assert body["lastEditedTime"].startswith("2025-01-07T10:30:00")
    assert body["url"] == "https://www.notion.so/Day-1-abc"
    assert body["content"] == [
        {"type": "paragraph", "text": "Hello"},
        {"type": "heading3", "text": "Section"},
    ]
    assert "s-maxage=60" in resp.headers["cache-control"]


def test_get_post_not_found():
    client = create_test_client(_StubService(error=PostNotFoundError("missing")))

    resp = client.get("/api/posts/missing")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Post not found"}


def test_get_post_empty_title_is_not_found():
    client = create_test_client(_StubService(error=InvalidPostStructureError("no title")))

    resp = client.get("/api/posts/abc")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Post not found"}


def test_get_post_unexpected_error_hides_details():
    client = create_test_client(
        _StubService(error=NotionAPIError("Notion API error: 502 upstream secret", status_code=502))
    )

    resp = client.get("/api/posts/abc")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "secret" not in resp.text


def _service_over_notion(status_code: int, body: dict) -> PostService:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=body)

    config = NotionConfig(
        api_key="dummy-key",
        database_id="main-db",
        writing_database_id="writing-db",
        api_base_url="https://notion.test/v1",
        api_version="2022-06-28",
    )
    client = NotionClient(config, transport=httpx.MockTransport(handler))
    return PostService(client, cache=TTLCache(ttl_seconds=60))


@pytest.mark.parametrize(
    "status_code, code",
    [
        (400, "validation_error"),
        (403, "restricted_resource"),
        (404, "object_not_found"),
    ],
)
def test_get_post_rejected_id_from_notion_is_not_found(status_code, code):
    # Notion は UUID でない ID に 404 ではなく 400 validation_error を返す
    service = _service_over_notion(status_code, {"object": "error", "status": status_code, "code": code})
    client = create_test_client(service)

    resp = client.get("/api/posts/no-such-post")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Post not found"}


def test_get_post_notion_server_error_stays_500():
    service = _service_over_notion(502, {"object": "error", "status": 502, "code": "bad_gateway"})
    client = create_test_client(service)

    resp = client.get("/api/posts/abc")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_get_post_with_patched_service_method():
    # PostService.fetch_post をモックして、共有インスタンス経由でも同じ契約になることを確認
    client = TestClient(create_app())

    with patch.object(PostService, "fetch_post", side_effect=PostNotFoundError("missing")):
        resp = client.get("/api/posts/missing")

    assert resp.status_code == 404


def test_missing_api_key_returns_generic_500(monkeypatch):
    monkeypatch.delenv("NOTION_API_KEY", raising=False)
    client = TestClient(create_app())

    resp = client.get("/api/posts/abc")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_health_endpoints():
    client = create_test_client(_StubService())

    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/notion").json() == {
        "is_valid": False,
        "error": "Invalid Notion API Key",
    }
