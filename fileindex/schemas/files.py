"""File index request/response schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0
# Largest value SQLite accepts for LIMIT and OFFSET.
MAX_PAGINATION_VALUE = 2**63 - 1


def _coerce_non_negative(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value.isdecimal():
            return default
        digits = value.lstrip("0") or "0"
        if len(digits) > len(str(MAX_PAGINATION_VALUE)):
            return MAX_PAGINATION_VALUE
        value = int(digits)
    if not isinstance(value, int) or value < 0:
        return default
    return min(value, MAX_PAGINATION_VALUE)


class SearchParams(BaseModel):
    """Search filters and pagination.

    Empty strings count as absent. Negative or non-numeric ``limit`` and
    ``offset`` fall back to their defaults instead of failing, and values too
    large for SQLite are clamped.
    """

    term: str | None = None
    type_filter: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET

    @field_validator("term", "type_filter", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("limit", mode="before")
    @classmethod
    def normalize_limit(cls, v: Any) -> int:
        return _coerce_non_negative(v, DEFAULT_LIMIT)

    @field_validator("offset", mode="before")
    @classmethod
    def normalize_offset(cls, v: Any) -> int:
        return _coerce_non_negative(v, DEFAULT_OFFSET)


class FormattedEntry(BaseModel):
    """Indexed entry with human-readable size and modification time."""

    full_path: str
    name: str
    size_bytes: int = Field(ge=0)
    type_label: str
    is_directory: bool
    relative_path: str
    modified_at: int
    created_at: int
    updated_at: int
    size_formatted: str
    modified_at_formatted: str


class SearchResponse(BaseModel):
    """One page of search results."""

    files: list[FormattedEntry]
    total: int = Field(ge=0)
    limit: int = Field(ge=0)
    offset: int = Field(ge=0)


class FileTypeCount(BaseModel):
    """Number of indexed files carrying a type label."""

    type_label: str
    count: int = Field(ge=0)


class StatsResponse(BaseModel):
    """Aggregate statistics over the index."""

    total_files: int = Field(ge=0)
    total_directories: int = Field(ge=0)
    total_size_bytes: int = Field(ge=0)
    total_size_formatted: str
    file_types: list[FileTypeCount] = Field(default_factory=list)


class RebuildResponse(BaseModel):
    """Outcome of a completed rebuild."""

    count: int = Field(ge=0)
    duration_ms: int = Field(ge=0)


class TypeLabelsResponse(BaseModel):
    """Type labels that may appear in the index."""

    type_labels: list[str]
