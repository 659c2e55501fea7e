"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fileindex.api.deps import get_index_store, get_rebuilder
from fileindex.exceptions import StorageError
from fileindex.services.datetime_service import format_iso
from fileindex.services.index_store import IndexStore
from fileindex.services.rebuild_service import IndexRebuilder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    indexed_entries: int | None = None
    rebuild_running: bool = False
    last_rebuild_at: str | None = None


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    store: Annotated[IndexStore, Depends(get_index_store)],
    rebuilder: Annotated[IndexRebuilder, Depends(get_rebuilder)],
) -> HealthResponse:
    """Health check endpoint for monitoring and load balancers."""
    db_status = "ok"
    indexed_entries: int | None = None
    try:
        indexed_entries = await store.count()
    except StorageError:
        logger.warning("Health check database query failed", exc_info=True)
        db_status = "error"

    last = rebuilder.last_result
    return HealthResponse(
        status="ok" if db_status == "ok" else "degraded",
        version="0.1.0",
        database=db_status,
        indexed_entries=indexed_entries,
        rebuild_running=rebuilder.is_running,
        last_rebuild_at=format_iso(last.finished_at) if last is not None else None,
    )
