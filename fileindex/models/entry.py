"""File index entry model."""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from fileindex.models.base import Base


class FileEntry(Base):
    """One indexed file or directory (regenerated from the filesystem on rebuild)."""

    __tablename__ = "file_index"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_path: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type_label: Mapped[str] = mapped_column(Text, nullable=False)
    is_directory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    relative_path: Mapped[str] = mapped_column(Text, nullable=False)
    # Unix seconds
    modified_at: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_file_name", "name"),
        Index("idx_file_type", "type_label"),
        Index("idx_relative_path", "relative_path"),
    )
