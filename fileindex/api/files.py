"""File index API endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from fileindex.api.deps import get_index_store, get_rebuilder, get_settings
from fileindex.config import Settings
from fileindex.filesystem.classifier import DIRECTORY_LABEL, known_labels
from fileindex.schemas.files import (
    RebuildResponse,
    SearchParams,
    SearchResponse,
    StatsResponse,
    TypeLabelsResponse,
)
from fileindex.services.index_store import IndexStore
from fileindex.services.query_service import get_stats, search_files
from fileindex.services.rebuild_service import IndexRebuilder

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/rebuild", response_model=RebuildResponse)
async def rebuild_endpoint(
    rebuilder: Annotated[IndexRebuilder, Depends(get_rebuilder)],
) -> RebuildResponse:
    """Clear the index and rescan the root directory."""
    result = await rebuilder.rebuild()
    return RebuildResponse(count=result.count, duration_ms=result.duration_ms)


@router.get("/search", response_model=SearchResponse)
async def search_endpoint(
    store: Annotated[IndexStore, Depends(get_index_store)],
    settings: Annotated[Settings, Depends(get_settings)],
    q: str | None = None,
    file_type: str | None = Query(None, alias="type"),
    # Raw strings: malformed pagination is normalized, not rejected.
    limit: str | None = None,
    offset: str | None = None,
) -> SearchResponse:
    """Search indexed entries by name or relative path, optionally by type."""
    params = SearchParams.model_validate(
        {
            "term": q,
            "type_filter": file_type,
            "limit": limit,
            "offset": offset,
        }
    )
    return await search_files(
        store,
        params,
        max_limit=settings.max_search_limit,
        tz=settings.display_timezone,
    )


@router.get("/stats", response_model=StatsResponse)
async def stats_endpoint(
    store: Annotated[IndexStore, Depends(get_index_store)],
) -> StatsResponse:
    """Aggregate counts and sizes over the index."""
    return await get_stats(store)


@router.get("/types", response_model=TypeLabelsResponse)
async def types_endpoint() -> TypeLabelsResponse:
    """Type labels usable as a search filter."""
    return TypeLabelsResponse(type_labels=[DIRECTORY_LABEL, *known_labels()])
