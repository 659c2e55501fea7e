"""Durable index store backed by the ``file_index`` table."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, delete, func, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from fileindex.exceptions import StorageError
from fileindex.models.base import Base
from fileindex.models.entry import FileEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from fileindex.filesystem.walker import EntryRecord

logger = logging.getLogger(__name__)

# Columns overwritten when a full_path is written again.
_UPSERT_COLUMNS = (
    "name",
    "size_bytes",
    "type_label",
    "is_directory",
    "relative_path",
    "modified_at",
    "updated_at",
)


@dataclass(frozen=True)
class SearchQuery:
    """Store-level search request. Pagination values are already normalized."""

    term: str | None = None
    type_label: str | None = None
    limit: int = 100
    offset: int = 0


@dataclass
class IndexStats:
    """Raw aggregates over the index."""

    total_files: int = 0
    total_directories: int = 0
    total_size_bytes: int = 0
    type_counts: list[tuple[str, int]] = field(default_factory=list)


def build_search_filters(
    term: str | None = None, type_label: str | None = None
) -> list[ColumnElement[bool]]:
    """Compose WHERE predicates for a search.

    The term matches as a substring of either the name or the relative path.
    LIKE wildcards in the term are escaped, so ``%`` and ``_`` match literally.
    """
    filters: list[ColumnElement[bool]] = []
    if term:
        filters.append(
            or_(
                FileEntry.name.contains(term, autoescape=True),
                FileEntry.relative_path.contains(term, autoescape=True),
            )
        )
    if type_label:
        filters.append(FileEntry.type_label == type_label)
    return filters


class IndexStore:
    """Owns all reads and writes against the index table.

    Query methods open their own short-lived sessions. Rebuild writes go
    through ``clear`` and ``bulk_upsert`` on a session supplied by the caller
    so that they commit together.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def session(self) -> AsyncSession:
        """Open a new session on the index database."""
        return self._session_factory()

    async def create_schema(self) -> None:
        """Create the index table and its indexes if they don't exist."""
        try:
            async with self.session() as session:
                conn = await session.connection()
                await conn.run_sync(Base.metadata.create_all)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to create index schema: {exc}") from exc

    async def clear(self, session: AsyncSession) -> None:
        """Delete every record."""
        try:
            await session.execute(delete(FileEntry))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to clear index: {exc}") from exc

    async def bulk_upsert(
        self,
        session: AsyncSession,
        records: Sequence[EntryRecord],
        *,
        batch_size: int = 100,
    ) -> int:
        """Insert records, fully overwriting any row with the same full_path.

        ``created_at`` is stamped on first insertion only; ``updated_at`` on
        every write. Returns the number of records written.
        """
        now = int(time.time())
        written = 0
        try:
            for start in range(0, len(records), batch_size):
                batch = records[start : start + batch_size]
                rows = [{**r.to_row(), "created_at": now, "updated_at": now} for r in batch]
                stmt = sqlite_insert(FileEntry).values(rows)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[FileEntry.full_path],
                    set_={col: stmt.excluded[col] for col in _UPSERT_COLUMNS},
                )
                await session.execute(stmt)
                written += len(batch)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write index records: {exc}") from exc
        logger.debug("Wrote %d index records", written)
        return written

    async def search(self, query: SearchQuery) -> tuple[list[FileEntry], int]:
        """Return one page of matches ordered by name, plus the unpaginated total."""
        stmt = select(FileEntry)
        for predicate in build_search_filters(query.term, query.type_label):
            stmt = stmt.where(predicate)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        page_stmt = (
            stmt.order_by(FileEntry.name.asc(), FileEntry.full_path.asc())
            .offset(query.offset)
            .limit(query.limit)
        )
        try:
            async with self.session() as session:
                total = (await session.execute(count_stmt)).scalar() or 0
                rows = list((await session.execute(page_stmt)).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to search index: {exc}") from exc
        return rows, total

    async def stats(self) -> IndexStats:
        """Compute file/directory counts, total file size and per-type counts."""
        is_file = FileEntry.is_directory.is_(False)
        totals_stmt = select(
            func.count().filter(is_file),
            func.count().filter(FileEntry.is_directory.is_(True)),
            func.coalesce(func.sum(FileEntry.size_bytes).filter(is_file), 0),
        ).select_from(FileEntry)
        count_col = func.count().label("count")
        types_stmt = (
            select(FileEntry.type_label, count_col)
            .where(is_file)
            .group_by(FileEntry.type_label)
            .order_by(count_col.desc(), FileEntry.type_label.asc())
        )
        try:
            async with self.session() as session:
                files, directories, size = (await session.execute(totals_stmt)).one()
                type_rows = (await session.execute(types_stmt)).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to compute index statistics: {exc}") from exc
        return IndexStats(
            total_files=files or 0,
            total_directories=directories or 0,
            total_size_bytes=int(size or 0),
            type_counts=[(label, count) for label, count in type_rows],
        )

    async def count(self) -> int:
        """Number of live records."""
        try:
            async with self.session() as session:
                result = await session.execute(select(func.count()).select_from(FileEntry))
                return result.scalar() or 0
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to count index records: {exc}") from exc
