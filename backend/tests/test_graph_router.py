# backend/tests/test_graph_router.py

from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient

from blogapp.graph.config import GraphSettings, get_graph_settings
from blogapp.graph.router import format_tooltip_date, get_post_service_or_none
from blogapp.main import create_app
from blogapp.notion.client import NotionClient
from blogapp.notion.config import NotionConfig
from blogapp.notion.schemas import EntrySummary
from blogapp.notion.service import PostService
from blogapp.utils.cache import TTLCache
from blogapp.utils.config import ConfigurationError


class _StubService:
    def __init__(self, entries=None, error=None):
        self._entries = entries or []
        self._error = error

    def list_entries(self):
        if self._error is not None:
            raise self._error
        return self._entries


def create_test_client(service) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_post_service_or_none] = lambda: service
    app.dependency_overrides[get_graph_settings] = lambda: GraphSettings(start_date=date(2025, 1, 1), months=1)
    return TestClient(app)


def test_graph_page_marks_cells():
    entries = [
        EntrySummary(post_id="abc", title="Day 1", publish_date="2025-01-06", preview="First day"),
        EntrySummary(post_id=None, title="Day 2", publish_date="2025-01-07"),
    ]
    client = create_test_client(_StubService(entries))

    resp = client.get("/")

    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    html = resp.text
    assert 'data-post-id="abc"' in html
    assert html.count("cell published_post") == 2  # マス 1 つ + 凡例
    assert html.count("cell entry_no_post") == 2
    assert "First day" in html
    assert "Jan 6, 2025" in html
    assert "s-maxage=60" in resp.headers["cache-control"]


def test_graph_page_renders_empty_graph_when_listing_is_empty():
    client = create_test_client(_StubService([]))

    resp = client.get("/")

    assert resp.status_code == 200
    assert "data-post-id" not in resp.text.split("<script>")[0]
    assert "cell no_entry" in resp.text


def _unreachable_notion(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.mark.parametrize(
    "handler",
    [
        _unreachable_notion,
        lambda request: httpx.Response(500, json={"object": "error", "code": "internal_server_error"}),
    ],
)
def test_graph_page_renders_empty_graph_when_notion_query_fails(handler):
    config = NotionConfig(
        api_key="dummy-key",
        database_id="main-db",
        writing_database_id="writing-db",
        api_base_url="https://notion.test/v1",
        api_version="2022-06-28",
    )
    notion = NotionClient(config, transport=httpx.MockTransport(handler))
    client = create_test_client(PostService(notion, cache=TTLCache(ttl_seconds=60)))

    resp = client.get("/")

    assert resp.status_code == 200
    assert "data-post-id" not in resp.text.split("<script>")[0]
    assert "cell no_entry" in resp.text
    assert "cell published_post" in resp.text  # 凡例だけ


def test_graph_page_survives_missing_writing_database():
    client = create_test_client(_StubService(error=ConfigurationError("missing")))

    resp = client.get("/")

    assert resp.status_code == 200
    assert "Writing database is not configured." in resp.text
    assert "cell no_entry" in resp.text


def test_graph_page_survives_missing_api_key():
    client = create_test_client(None)

    resp = client.get("/")

    assert resp.status_code == 200
    assert "Notion is not configured." in resp.text


def test_get_post_service_or_none_without_api_key(monkeypatch):
    monkeypatch.delenv("NOTION_API_KEY", raising=False)

    assert get_post_service_or_none() is None


def test_format_tooltip_date():
    assert format_tooltip_date(date(2025, 1, 6)) == "Jan 6, 2025"
    assert format_tooltip_date(date(2024, 12, 18)) == "Dec 18, 2024"
