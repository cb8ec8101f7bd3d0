from __future__ import annotations

import json

import httpx
import pytest

from team_competition import db
from team_competition.core.clients.pages import HttpContentStore
from team_competition.core.exceptions import PersistenceFailure
from team_competition.store import SqlContentStore, get_content_store


@pytest.fixture()
async def sql_store(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'pages.db'}")
    await db.close_db()
    await db.init_db()
    try:
        yield SqlContentStore()
    finally:
        await db.close_db()


@pytest.mark.asyncio
async def test_sql_store_missing_page_is_none(sql_store):
    assert await sql_store.load("team-competition") is None


@pytest.mark.asyncio
async def test_sql_store_save_then_overwrite(sql_store):
    assert await sql_store.save("groups", "Bus 1\nAnn") is True
    assert await sql_store.save("groups", "Bus 2\nBen") is True
    assert await sql_store.load("groups") == "Bus 2\nBen"


def _page_service(pages: dict[str, str], fail: bool = False) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers.get("Authorization") == "Bearer secret"
        slug = request.url.path.rsplit("/", 1)[-1]
        if fail:
            return httpx.Response(503, json={"error": "down"})
        if request.method == "GET":
            if slug not in pages:
                return httpx.Response(404)
            return httpx.Response(200, json={"slug": slug, "content": pages[slug]})
        if request.method == "PUT":
            pages[slug] = json.loads(request.content)["content"]
            return httpx.Response(204)
        return httpx.Response(405)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_http_store_round_trip():
    pages: dict[str, str] = {}
    store = HttpContentStore("https://trip.example/api/", token="secret", transport=_page_service(pages))

    assert await store.load("team-competition") is None
    assert await store.save("team-competition", '{"teams": []}') is True
    assert pages == {"team-competition": '{"teams": []}'}
    assert await store.load("team-competition") == '{"teams": []}'


@pytest.mark.asyncio
async def test_http_store_failures():
    store = HttpContentStore("https://trip.example/api", token="secret", transport=_page_service({}, fail=True))

    assert await store.save("team-competition", "{}") is False
    with pytest.raises(PersistenceFailure) as excinfo:
        await store.load("team-competition")
    assert excinfo.value.page_id == "team-competition"


def test_content_store_selected_from_environment(monkeypatch):
    monkeypatch.delenv("CONTENT_STORE_URL", raising=False)
    assert isinstance(get_content_store(), SqlContentStore)

    monkeypatch.setenv("CONTENT_STORE_URL", "https://trip.example/api")
    store = get_content_store()
    assert isinstance(store, HttpContentStore)
    assert store.base_url == "https://trip.example/api"


@pytest.mark.asyncio
async def test_http_store_unparseable_page_raises_persistence_failure():
    nested = "[" * 100000 + "]" * 100000
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=nested))
    store = HttpContentStore("https://trip.example/api", transport=transport)

    with pytest.raises(PersistenceFailure):
        await store.load("team-competition")


def test_default_page_file_lives_in_data_dir(tmp_path, monkeypatch):
    data_dir = tmp_path / "competition-data"
    monkeypatch.setenv("DATA_DIR", str(data_dir))
    monkeypatch.delenv("DATABASE_URL", raising=False)

    assert db.pages_db_path() == data_dir / "pages.db"
    assert not data_dir.exists()

    assert db.get_db_url() == f"sqlite+aiosqlite:///{data_dir / 'pages.db'}"
    assert data_dir.is_dir()


def test_database_url_override_creates_nothing(tmp_path, monkeypatch):
    data_dir = tmp_path / "unused"
    monkeypatch.setenv("DATA_DIR", str(data_dir))
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

    assert db.get_db_url() == "sqlite+aiosqlite:///:memory:"
    assert not data_dir.exists()
