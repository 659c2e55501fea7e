"""Query service: search and statistics over the index, formatted for clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fileindex.schemas.files import (
    FileTypeCount,
    FormattedEntry,
    SearchParams,
    SearchResponse,
    StatsResponse,
)
from fileindex.services.datetime_service import format_timestamp
from fileindex.services.index_store import SearchQuery

if TYPE_CHECKING:
    from fileindex.models.entry import FileEntry
    from fileindex.services.index_store import IndexStore

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size_bytes: int) -> str:
    """Format a byte count with binary prefixes and two decimals.

    >>> format_size(1536)
    '1.50 KB'
    """
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {_SIZE_UNITS[unit]}"


def format_entry(entry: FileEntry, tz: str = "UTC") -> FormattedEntry:
    """Attach display fields to a stored entry."""
    return FormattedEntry(
        full_path=entry.full_path,
        name=entry.name,
        size_bytes=entry.size_bytes,
        type_label=entry.type_label,
        is_directory=bool(entry.is_directory),
        relative_path=entry.relative_path,
        modified_at=entry.modified_at,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        size_formatted=format_size(entry.size_bytes),
        modified_at_formatted=format_timestamp(entry.modified_at, tz),
    )


async def search_files(
    store: IndexStore,
    params: SearchParams,
    *,
    max_limit: int = 1000,
    tz: str = "UTC",
) -> SearchResponse:
    """Search the index by term and type label, one page at a time."""
    limit = min(params.limit, max_limit)
    rows, total = await store.search(
        SearchQuery(
            term=params.term,
            type_label=params.type_filter,
            limit=limit,
            offset=params.offset,
        )
    )
    return SearchResponse(
        files=[format_entry(row, tz) for row in rows],
        total=total,
        limit=limit,
        offset=params.offset,
    )


async def get_stats(store: IndexStore) -> StatsResponse:
    """Aggregate statistics with a human-readable total size."""
    stats = await store.stats()
    return StatsResponse(
        total_files=stats.total_files,
        total_directories=stats.total_directories,
        total_size_bytes=stats.total_size_bytes,
        total_size_formatted=format_size(stats.total_size_bytes),
        file_types=[
            FileTypeCount(type_label=label, count=count) for label, count in stats.type_counts
        ],
    )
