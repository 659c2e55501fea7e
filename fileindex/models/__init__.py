"""SQLAlchemy ORM models for the file index."""

from fileindex.models.base import Base
from fileindex.models.entry import FileEntry

__all__ = [
    "Base",
    "FileEntry",
]
