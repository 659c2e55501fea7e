"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# SQLite keeps these next to the database file while a transaction is open.
_SQLITE_SIDE_SUFFIXES = ("-journal", "-wal", "-shm")


class Settings(BaseSettings):
    """File index service settings."""

    model_config = SettingsConfigDict(
        env_prefix="FILE_INDEXER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///index.db"

    # Indexing
    root_dir: Path = Field(default_factory=Path.cwd)
    entry_names: list[str] = Field(default_factory=lambda: ["main.py"])
    insert_batch_size: int = Field(default=100, ge=1)
    rebuild_on_startup: bool = False

    # Queries
    max_search_limit: int = Field(default=1000, ge=1)
    display_timezone: str = "UTC"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3002, ge=1, le=65535)

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def storage_path(self) -> Path | None:
        """Filesystem path of the SQLite index database, if file-backed."""
        if not self.database_url.startswith("sqlite") or "///" not in self.database_url:
            return None
        db_path = self.database_url.split("///", 1)[-1]
        if not db_path or db_path == ":memory:":
            return None
        return Path(db_path)

    def excluded_names(self) -> frozenset[str]:
        """Base names the walker must skip at every depth."""
        names = set(self.entry_names)
        storage = self.storage_path
        if storage is not None:
            names.add(storage.name)
            names.update(storage.name + suffix for suffix in _SQLITE_SIDE_SUFFIXES)
        return frozenset(names)

    def validate_runtime(self) -> None:
        """Validate that the configured root can be indexed."""
        if not self.root_dir.exists():
            raise ValueError(f"Root directory does not exist: {self.root_dir}")
        if not self.root_dir.is_dir():
            raise ValueError(f"Root path is not a directory: {self.root_dir}")
