"""Shared API dependencies: settings, index store, rebuild coordinator."""

from __future__ import annotations

from fastapi import Request

from fileindex.config import Settings
from fileindex.services.index_store import IndexStore
from fileindex.services.rebuild_service import IndexRebuilder


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


def get_index_store(request: Request) -> IndexStore:
    """Get the index store from app state."""
    store: IndexStore = request.app.state.index_store
    return store


def get_rebuilder(request: Request) -> IndexRebuilder:
    """Get the rebuild coordinator from app state."""
    rebuilder: IndexRebuilder = request.app.state.rebuilder
    return rebuilder
