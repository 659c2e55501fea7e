"""FastAPI application entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from fileindex.api.files import router as files_router
from fileindex.api.health import router as health_router
from fileindex.config import Settings
from fileindex.database import create_engine
from fileindex.exceptions import FileSystemError, RebuildInProgressError, StorageError
from fileindex.services.index_store import IndexStore
from fileindex.services.rebuild_service import IndexRebuilder

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)


def build_rebuilder(settings: Settings, store: IndexStore) -> IndexRebuilder:
    """Create the rebuild coordinator for the configured root."""
    return IndexRebuilder(
        store,
        settings.root_dir.absolute(),
        excluded_names=settings.excluded_names(),
        batch_size=settings.insert_batch_size,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: startup and shutdown."""
    settings: Settings = app.state.settings
    _configure_logging(settings.debug)
    settings.validate_runtime()
    logger.info("Starting file index service (root=%s)", settings.root_dir)

    try:
        engine, session_factory = create_engine(settings)
        app.state.engine = engine
    except Exception as exc:
        logger.critical(
            "Failed to initialize database: %s. Check database path and permissions.", exc
        )
        raise

    store = IndexStore(session_factory)
    try:
        await store.create_schema()
    except StorageError as exc:
        logger.critical("Failed to create database schema: %s.", exc)
        raise
    app.state.index_store = store
    app.state.rebuilder = build_rebuilder(settings, store)

    if settings.rebuild_on_startup:
        try:
            await app.state.rebuilder.rebuild()
        except (FileSystemError, StorageError) as exc:
            logger.critical("Failed to build initial index: %s.", exc)
            raise

    yield

    try:
        await engine.dispose()
    except Exception as exc:
        logger.error("Error during engine disposal: %s", exc, exc_info=True)

    logger.info("File index service stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="File Index",
        description="Searchable metadata index of a directory tree",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["Range", "Content-Type"],
    )

    app.include_router(health_router)
    app.include_router(files_router)

    @app.exception_handler(RebuildInProgressError)
    async def rebuild_in_progress_handler(
        request: Request, exc: RebuildInProgressError
    ) -> JSONResponse:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(FileSystemError)
    async def filesystem_error_handler(request: Request, exc: FileSystemError) -> JSONResponse:
        logger.error(
            "FileSystemError in %s %s: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(
            "StorageError in %s %s: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Index storage operation failed"},
        )

    return app


app = create_app()


def _port(value: str) -> int:
    port = int(value)
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535, got {port}")
    return port


def cli_entry(argv: list[str] | None = None) -> None:
    """CLI entry point for running the server.

    ``--port`` and ``--path`` override the configured port and root directory.
    They are also exported to the environment so reloaded workers see them.
    """
    import uvicorn

    parser = argparse.ArgumentParser(
        prog="fileindex", description="Serve a searchable index of a directory tree"
    )
    parser.add_argument("--port", type=_port, help="Port to listen on")
    parser.add_argument("--path", type=Path, help="Root directory to index")
    args = parser.parse_args(argv)

    settings: Settings = app.state.settings
    overrides: dict[str, object] = {}
    if args.port is not None:
        overrides["port"] = args.port
        os.environ["FILE_INDEXER_PORT"] = str(args.port)
    if args.path is not None:
        overrides["root_dir"] = args.path.absolute()
        os.environ["FILE_INDEXER_ROOT_DIR"] = str(overrides["root_dir"])
    if overrides:
        settings = settings.model_copy(update=overrides)
        app.state.settings = settings

    uvicorn.run(
        "fileindex.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
