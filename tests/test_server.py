"""Tests for the FastAPI web service."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

try:
    from httpx import AsyncClient, ASGITransport
    _HAS_HTTPX = True
except ImportError:
    _HAS_HTTPX = False

from revbuild.server import app

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_JSON = FIXTURE_DIR / "ch01.json"

pytestmark = pytest.mark.skipif(not _HAS_HTTPX, reason="httpx not installed")


@pytest.fixture
def client():
    """Create an async test client."""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def sample() -> dict:
    return json.loads(SAMPLE_JSON.read_text(encoding="utf-8"))


@pytest.mark.asyncio
class TestHealthEndpoint:

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data


@pytest.mark.asyncio
class TestBuildersEndpoint:

    async def test_list_builders(self, client):
        resp = await client.get("/builders")
        assert resp.status_code == 200
        assert resp.json()["builders"] == ["html", "latex", "top"]


@pytest.mark.asyncio
class TestRenderEndpoint:

    async def test_render_sample(self, client, sample):
        resp = await client.post("/render", json=sample)
        assert resp.status_code == 200
        data = resp.json()
        assert data["builder"] == "html"
        assert '<p class="caption">リスト1.1: Hello</p>' in data["output"]
        assert data["warnings"] == []
        assert data["errors"] == []

    async def test_render_latex(self, client, sample):
        sample["builder"] = "latex"
        resp = await client.post("/render", json=sample)
        assert resp.status_code == 200
        assert resp.json()["output"].startswith("\\chapter{Getting Started}")

    async def test_config_is_applied(self, client, sample):
        sample["config"] = {"secnolevel": 0}
        resp = await client.post("/render", json=sample)
        assert resp.status_code == 200
        assert "リスト1: Hello" in resp.json()["output"]

    async def test_warnings_returned(self, client):
        resp = await client.post("/render", json={
            "chapter": {"id": "ch"},
            "commands": [{"name": "paragraph", "lines": ["@<list>{nope}"], "lineno": 5}],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["output"] == "<p>[UnknownList:nope]</p>\n"
        assert data["warnings"] == ["ch:5: warning: unknown list: nope"]

    async def test_unknown_builder(self, client, sample):
        sample["builder"] = "docx"
        resp = await client.post("/render", json=sample)
        assert resp.status_code == 422
        assert "Unknown builder" in resp.json()["detail"]

    async def test_invalid_config(self, client, sample):
        sample["config"] = {"secnolevel": -1}
        resp = await client.post("/render", json=sample)
        assert resp.status_code == 422

    async def test_missing_chapter(self, client):
        resp = await client.post("/render", json={"commands": []})
        assert resp.status_code == 422

    async def test_fatal_error(self, client):
        resp = await client.post("/render", json={
            "chapter": {"id": "ch"},
            "commands": [{"name": "bogus"}],
        })
        assert resp.status_code == 500
        assert resp.json()["detail"] == "ch: error: unknown command: //bogus"
