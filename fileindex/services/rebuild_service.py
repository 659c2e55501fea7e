"""Full index rebuild from the filesystem."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from fileindex.exceptions import RebuildInProgressError, StorageError
from fileindex.filesystem.walker import walk_tree
from fileindex.services.datetime_service import monotonic_ms, now_utc

if TYPE_CHECKING:
    from collections.abc import Collection
    from pathlib import Path

    from fileindex.services.index_store import IndexStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebuildResult:
    """Outcome of a completed rebuild."""

    count: int
    duration_ms: int
    finished_at: datetime


class IndexRebuilder:
    """Clears the index and repopulates it from a fresh walk of the root.

    Only one rebuild runs at a time; a second request while one is in flight
    is rejected with RebuildInProgressError. Queries are unaffected by the
    guard and keep reading the last committed snapshot.
    """

    def __init__(
        self,
        store: IndexStore,
        root: Path,
        *,
        excluded_names: Collection[str] = (),
        batch_size: int = 100,
    ) -> None:
        self._store = store
        self._root = root
        self._excluded_names = frozenset(excluded_names)
        self._batch_size = batch_size
        self._lock = asyncio.Lock()
        self.last_result: RebuildResult | None = None

    @property
    def is_running(self) -> bool:
        """Whether a rebuild is currently in flight."""
        return self._lock.locked()

    async def rebuild(self) -> RebuildResult:
        """Clear the index, walk the root and write every discovered entry.

        Raises FileSystemError if the root cannot be listed and StorageError
        if the index cannot be cleared or written.
        """
        if self._lock.locked():
            raise RebuildInProgressError("An index rebuild is already in progress")
        async with self._lock:
            return await self._rebuild_locked()

    async def _rebuild_locked(self) -> RebuildResult:
        start = monotonic_ms()
        logger.info("Rebuilding file index for %s", self._root)
        try:
            async with self._store.session() as session:
                await self._store.clear(session)
                # Traversal blocks on the filesystem; keep the event loop free.
                records = await asyncio.to_thread(walk_tree, self._root, self._excluded_names)
                logger.info("Discovered %d files and directories", len(records))
                count = await self._store.bulk_upsert(
                    session, records, batch_size=self._batch_size
                )
                try:
                    await session.commit()
                except SQLAlchemyError as exc:
                    raise StorageError(f"Failed to commit rebuilt index: {exc}") from exc
        except Exception:
            logger.error("Index rebuild failed after %dms", monotonic_ms() - start)
            raise

        result = RebuildResult(
            count=count,
            duration_ms=monotonic_ms() - start,
            finished_at=now_utc(),
        )
        self.last_result = result
        logger.info("Index rebuilt: %d entries in %dms", result.count, result.duration_ms)
        return result
