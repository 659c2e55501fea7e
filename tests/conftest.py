"""Shared test fixtures for the file index service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fileindex.config import Settings
from fileindex.main import build_rebuilder, create_app
from fileindex.services.index_store import IndexStore
from tests._helpers import write_file

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from fileindex.services.rebuild_service import IndexRebuilder


@asynccontextmanager
async def create_test_client(settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client with a fully initialized app.

    Manually performs the work of the application lifespan (engine, schema,
    rebuild coordinator) because ASGITransport does not trigger it.
    """
    from fileindex.database import create_engine as create_db_engine

    app = create_app(settings)
    settings.validate_runtime()

    engine, session_factory = create_db_engine(settings)
    app.state.engine = engine
    store = IndexStore(session_factory)
    await store.create_schema()
    app.state.index_store = store
    app.state.rebuilder = build_rebuilder(settings, store)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await engine.dispose()


@pytest.fixture
def tmp_root(tmp_path: Path) -> Path:
    """Root with a.txt (10 bytes), sub/b.json (20 bytes) and an empty sub/empty/."""
    root = tmp_path / "root"
    root.mkdir()
    write_file(root / "a.txt", 10)
    write_file(root / "sub" / "b.json", 20)
    (root / "sub" / "empty").mkdir()
    return root


@pytest.fixture
def test_settings(tmp_root: Path, tmp_path: Path) -> Settings:
    """Create test settings with temporary paths."""
    db_path = tmp_path / "db" / "index.db"
    return Settings(
        _env_file=None,
        debug=True,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        root_dir=tmp_root,
    )


@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine."""
    assert test_settings.storage_path is not None
    test_settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(
    db_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def index_store(db_engine: AsyncEngine) -> IndexStore:
    """Index store with the schema created."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    store = IndexStore(session_factory)
    await store.create_schema()
    return store


@pytest.fixture
def rebuilder(index_store: IndexStore, test_settings: Settings) -> IndexRebuilder:
    """Rebuild coordinator over ``tmp_root``."""
    return build_rebuilder(test_settings, index_store)
