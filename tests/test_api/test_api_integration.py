"""Integration tests for the API endpoints."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest

from fileindex.exceptions import FileSystemError, RebuildInProgressError, StorageError
from fileindex.main import create_app
from tests.conftest import create_test_client

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from httpx import AsyncClient

    from fileindex.config import Settings


@pytest.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient]:
    async with create_test_client(test_settings) as ac:
        yield ac


@pytest.fixture
async def indexed_client(client: AsyncClient) -> AsyncClient:
    resp = await client.post("/api/rebuild")
    assert resp.status_code == 200
    return client


class TestRebuild:
    async def test_rebuild_returns_count_and_duration(self, client: AsyncClient) -> None:
        resp = await client.post("/api/rebuild")
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 4
        assert data["duration_ms"] >= 0

    async def test_rebuild_missing_root_is_error(
        self, client: AsyncClient, tmp_root: Path
    ) -> None:
        shutil.rmtree(tmp_root)
        resp = await client.post("/api/rebuild")
        assert resp.status_code == 500
        assert "Cannot list root directory" in resp.json()["detail"]

    async def test_rebuild_in_progress_conflict(self, client: AsyncClient) -> None:
        with patch(
            "fileindex.services.rebuild_service.IndexRebuilder.rebuild",
            new=AsyncMock(side_effect=RebuildInProgressError("busy")),
        ):
            resp = await client.post("/api/rebuild")
        assert resp.status_code == 409
        assert resp.json()["detail"] == "busy"

    async def test_storage_failure_is_generic_500(self, client: AsyncClient) -> None:
        with patch(
            "fileindex.services.rebuild_service.IndexRebuilder.rebuild",
            new=AsyncMock(side_effect=StorageError("disk I/O error at /secret/path")),
        ):
            resp = await client.post("/api/rebuild")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Index storage operation failed"


class TestSearch:
    async def test_search_by_type(self, indexed_client: AsyncClient) -> None:
        resp = await indexed_client.get("/api/search", params={"type": "json"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        assert data["limit"] == 100
        assert data["offset"] == 0
        entry = data["files"][0]
        assert entry["name"] == "b.json"
        assert entry["relative_path"] == "sub/b.json"
        assert entry["size_formatted"] == "20.00 B"
        assert entry["is_directory"] is False
        assert "modified_at_formatted" in entry

    async def test_search_by_term(self, indexed_client: AsyncClient) -> None:
        resp = await indexed_client.get("/api/search", params={"q": "sub"})
        data = resp.json()
        assert data["total"] == 3
        assert [f["name"] for f in data["files"]] == ["b.json", "empty", "sub"]

    async def test_search_without_params_returns_all(self, indexed_client: AsyncClient) -> None:
        resp = await indexed_client.get("/api/search")
        assert resp.json()["total"] == 4

    async def test_pagination(self, indexed_client: AsyncClient) -> None:
        resp = await indexed_client.get("/api/search", params={"limit": 3, "offset": 2})
        data = resp.json()
        assert data["total"] == 4
        assert data["limit"] == 3
        assert data["offset"] == 2
        assert len(data["files"]) == 2

    @pytest.mark.parametrize("bad", ["-1", "abc"])
    async def test_malformed_pagination_is_normalized(
        self, indexed_client: AsyncClient, bad: str
    ) -> None:
        resp = await indexed_client.get("/api/search", params={"limit": bad, "offset": bad})
        assert resp.status_code == 200
        data = resp.json()
        assert data["limit"] == 100
        assert data["offset"] == 0
        assert len(data["files"]) == 4

    async def test_huge_offset_returns_empty_page(self, indexed_client: AsyncClient) -> None:
        resp = await indexed_client.get(
            "/api/search", params={"offset": "99999999999999999999"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["files"] == []
        assert data["total"] == 4
        assert data["offset"] == 2**63 - 1

    async def test_search_before_rebuild_is_empty(self, client: AsyncClient) -> None:
        resp = await client.get("/api/search", params={"q": "a"})
        assert resp.status_code == 200
        assert resp.json() == {"files": [], "total": 0, "limit": 100, "offset": 0}

    async def test_cors_preflight(self, client: AsyncClient) -> None:
        resp = await client.options(
            "/api/search",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"


class TestStats:
    async def test_stats(self, indexed_client: AsyncClient) -> None:
        resp = await indexed_client.get("/api/stats")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_files"] == 2
        assert data["total_directories"] == 2
        assert data["total_size_bytes"] == 30
        assert data["total_size_formatted"] == "30.00 B"
        assert sorted(data["file_types"], key=lambda t: t["type_label"]) == [
            {"type_label": "json", "count": 1},
            {"type_label": "text", "count": 1},
        ]


class TestTypes:
    async def test_types_lists_filterable_labels(self, client: AsyncClient) -> None:
        resp = await client.get("/api/types")
        labels = resp.json()["type_labels"]
        assert labels[0] == "directory"
        assert {"json", "text", "unknown", "other"} <= set(labels)


class TestHealth:
    async def test_health_before_rebuild(self, client: AsyncClient) -> None:
        resp = await client.get("/api/health")
        data = resp.json()
        assert data["status"] == "ok"
        assert data["database"] == "ok"
        assert data["indexed_entries"] == 0
        assert data["rebuild_running"] is False
        assert data["last_rebuild_at"] is None

    async def test_health_after_rebuild(self, indexed_client: AsyncClient) -> None:
        data = (await indexed_client.get("/api/health")).json()
        assert data["indexed_entries"] == 4
        assert data["last_rebuild_at"] is not None


class TestExceptionHandlers:
    def test_only_domain_errors_are_mapped(self, test_settings: Settings) -> None:
        handlers = create_app(test_settings).exception_handlers
        assert {RebuildInProgressError, FileSystemError, StorageError} <= set(handlers)
        assert OSError not in handlers
